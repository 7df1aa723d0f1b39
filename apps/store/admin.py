from django.contrib import admin

from .models import StoreSettings


@admin.register(StoreSettings)
class StoreSettingsAdmin(admin.ModelAdmin):
    list_display = ("name", "delivery_fee_cents", "min_order_delivery_cents", "updated_at")

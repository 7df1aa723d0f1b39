from django.contrib import admin

from .models import PushToken


@admin.register(PushToken)
class PushTokenAdmin(admin.ModelAdmin):
    list_display = ("scope", "order_number", "short_token", "device_info", "last_seen")
    list_filter = ("scope",)
    search_fields = ("order_number", "token", "device_info")
    readonly_fields = ("created_at", "updated_at")

    @admin.display(description="token")
    def short_token(self, obj):
        return f"{obj.token[:16]}…"

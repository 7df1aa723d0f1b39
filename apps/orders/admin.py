from django.contrib import admin

from .models import Order, OrderItem, OrderStatusChange


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "unit_price_cents",
        "quantity",
        "additions_label",
        "addition_unit_cents",
        "line_total_cents",
        "note",
    )
    exclude = ("addition_ids", "position")


class OrderStatusChangeInline(admin.TabularInline):
    model = OrderStatusChange
    extra = 0
    can_delete = False
    readonly_fields = ("status", "source", "note", "created_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "status", "order_type", "customer_name", "total_cents", "created_at")
    list_filter = ("status", "order_type", "payment_method")
    search_fields = ("order_number", "customer_name", "customer_phone")
    date_hierarchy = "created_at"
    # prices are immutable snapshots; status changes go through the state machine
    readonly_fields = (
        "order_number",
        "status",
        "subtotal_cents",
        "delivery_fee_cents",
        "discount_code",
        "discount_cents",
        "total_cents",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline, OrderStatusChangeInline]

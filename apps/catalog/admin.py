from django.contrib import admin

from .models import Addition, AdditionCategoryRule, Category, DiscountCode, Product


class AdditionCategoryRuleInline(admin.StackedInline):
    model = AdditionCategoryRule
    extra = 0


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "display_order")
    search_fields = ("name", "slug")
    ordering = ("display_order", "name")
    prepopulated_fields = {"slug": ("name",)}
    inlines = [AdditionCategoryRuleInline]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price_cents", "available", "display_order")
    list_filter = ("available", "category")
    search_fields = ("name", "description")
    list_select_related = ("category",)


@admin.register(Addition)
class AdditionAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "price_cents", "is_active", "display_order")
    list_filter = ("type", "is_active")
    search_fields = ("name",)


@admin.register(AdditionCategoryRule)
class AdditionCategoryRuleAdmin(admin.ModelAdmin):
    list_display = ("category", "sauce_mode", "max_sauces", "sauce_price_cents", "is_active")
    list_filter = ("sauce_mode", "is_active")
    list_select_related = ("category",)


@admin.register(DiscountCode)
class DiscountCodeAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_type", "value", "min_order_cents", "is_active", "valid_from", "valid_until")
    list_filter = ("discount_type", "is_active")
    search_fields = ("code",)

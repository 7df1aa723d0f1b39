from django.urls import path

from . import views_admin, views_public


urlpatterns = [
    path("api/orders", views_public.create_order, name="orders_create"),
    path("api/orders/<str:order_number>", views_public.order_detail, name="orders_detail"),
    path("api/discounts/verify", views_public.verify_discount, name="discounts_verify"),
    path("api/admin/orders/<uuid:order_id>/status", views_admin.update_order_status, name="orders_update_status"),
]

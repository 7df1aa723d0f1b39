from django.urls import path

from . import views


urlpatterns = [
    path("api/push/register", views.register, name="push_register"),
    path("api/push/unregister", views.unregister, name="push_unregister"),
    path("api/admin/push/register", views.admin_register, name="push_admin_register"),
    path("api/admin/push/unregister", views.admin_unregister, name="push_admin_unregister"),
]

from django.urls import path

from . import views


urlpatterns = [
    path("api/store/status", views.store_status, name="store_status"),
]

from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.orders.urls")),
    path("", include("apps.push.urls")),
    path("", include("apps.store.urls")),
    # Healthcheck endpoint
    path("healthz", lambda _request: HttpResponse("ok")),
]

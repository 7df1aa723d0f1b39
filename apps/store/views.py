from django.http import JsonResponse
from django.views.decorators.http import require_GET

from apps.common.http import rate_limited

from .hours import format_next_open, local_now
from .models import StoreSettings


@require_GET
@rate_limited("store_status")
def store_status(request):
    store = StoreSettings.load()
    now = local_now()
    status = store.ordering_status(now)
    return JsonResponse(
        {
            "is_open": status.is_open,
            "next_open": status.next_open.isoformat() if status.next_open else None,
            "next_open_label": format_next_open(status.next_open, now),
            "display": store.opening_hours_display,
        }
    )

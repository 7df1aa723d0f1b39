from django.db import models
from django.utils import timezone

from apps.common.models import BaseModel


class PushToken(BaseModel):
    class Scope(models.TextChoices):
        CUSTOMER = "customer", "Cliente"
        ADMIN = "admin", "Staff"

    token = models.CharField(max_length=512)
    scope = models.CharField(max_length=10, choices=Scope.choices, default=Scope.CUSTOMER)
    # order number for customer tokens; empty for staff devices
    order_number = models.CharField(max_length=20, blank=True, default="")
    user_agent = models.CharField(max_length=255, blank=True)
    device_info = models.CharField(max_length=255, blank=True)
    last_seen = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["scope", "order_number", "token"], name="uniq_push_token_scope_order"),
        ]
        indexes = [
            models.Index(fields=["order_number"], name="push_token_order_idx"),
            models.Index(fields=["scope", "last_seen"], name="push_token_scope_seen_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.scope}:{self.order_number or '-'}:{self.token[:10]}"

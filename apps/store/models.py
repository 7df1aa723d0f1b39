from __future__ import annotations

import datetime as dt
from typing import Optional

from django.core.validators import MinValueValidator
from django.db import models

from apps.common.models import BaseModel

from .hours import OrderSchedule, ScheduleStatus, evaluate, extract_opening_hours, local_now


class StoreSettings(BaseModel):
    """Single row holding the store's public info and ordering rules."""

    key = models.CharField(max_length=20, unique=True, default="default")
    name = models.CharField(max_length=120, blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=40, blank=True)
    # display text and/or {"display": ..., "order_schedule": {...}}
    opening_hours = models.JSONField(blank=True, null=True)
    delivery_fee_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    min_order_delivery_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])

    class Meta:
        verbose_name = "store settings"
        verbose_name_plural = "store settings"

    def __str__(self) -> str:
        return self.name or self.key

    @classmethod
    def load(cls) -> "StoreSettings":
        obj, _ = cls.objects.get_or_create(key="default")
        return obj

    @property
    def order_schedule(self) -> Optional[OrderSchedule]:
        return extract_opening_hours(self.opening_hours)[1]

    @property
    def opening_hours_display(self):
        return extract_opening_hours(self.opening_hours)[0]

    def ordering_status(self, now: Optional[dt.datetime] = None) -> ScheduleStatus:
        return evaluate(self.order_schedule, local_now(now))

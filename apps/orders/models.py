from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.common.models import BaseModel


class Order(BaseModel):
    class Status(models.TextChoices):
        PENDING = "pending", "In attesa"
        CONFIRMED = "confirmed", "Confermato"
        PREPARING = "preparing", "In preparazione"
        READY = "ready", "Pronto"
        COMPLETED = "completed", "Completato"
        CANCELLED = "cancelled", "Annullato"

    class OrderType(models.TextChoices):
        DELIVERY = "delivery", "Consegna"
        TAKEAWAY = "takeaway", "Asporto"

    class PaymentMethod(models.TextChoices):
        CASH = "cash", "Contanti"
        CARD = "card", "Carta"

    order_number = models.CharField(max_length=20, unique=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    customer_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=20)
    customer_address = models.CharField(max_length=500, blank=True)
    order_type = models.CharField(max_length=10, choices=OrderType.choices)
    # only recorded for delivery orders
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, blank=True, null=True)
    subtotal_cents = models.IntegerField(validators=[MinValueValidator(0)])
    delivery_fee_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    discount_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    total_cents = models.IntegerField(validators=[MinValueValidator(0)])
    discount_code = models.CharField(max_length=40, blank=True, null=True)
    notes = models.TextField(blank=True)

    class Meta:
        indexes = [models.Index(fields=["status", "created_at"], name="orders_status_created_idx")]

    def __str__(self) -> str:
        return self.order_number

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.Status.COMPLETED, self.Status.CANCELLED)


class OrderItem(BaseModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("catalog.Product", on_delete=models.SET_NULL, null=True, blank=True)
    position = models.PositiveSmallIntegerField(default=0)
    # snapshots taken at order time, never re-derived
    product_name = models.CharField(max_length=160)
    unit_price_cents = models.IntegerField(validators=[MinValueValidator(0)])
    quantity = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(99)])
    addition_ids = models.JSONField(default=list, blank=True)
    addition_unit_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    additions_label = models.CharField(max_length=500, blank=True)
    line_total_cents = models.IntegerField(validators=[MinValueValidator(0)])
    note = models.CharField(max_length=200, blank=True)

    class Meta:
        ordering = ["position"]


class OrderStatusChange(BaseModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_changes")
    status = models.CharField(max_length=20, choices=Order.Status.choices)
    source = models.CharField(max_length=32, blank=True)
    note = models.CharField(max_length=200, blank=True)

    class Meta:
        indexes = [models.Index(fields=["order", "created_at"], name="orders_statuschange_idx")]
        ordering = ["created_at"]

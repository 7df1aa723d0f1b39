from __future__ import annotations

import datetime as dt
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.text import slugify

from apps.common.models import BaseModel


class Category(BaseModel):
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=120, unique=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:120]
        super().save(*args, **kwargs)


class Product(BaseModel):
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="products")
    name = models.CharField(max_length=160)
    description = models.TextField(blank=True)
    price_cents = models.IntegerField(validators=[MinValueValidator(0)])
    available = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        indexes = [models.Index(fields=["category", "available"], name="catalog_product_avail_idx")]
        ordering = ["display_order", "name"]

    def __str__(self) -> str:
        return self.name


class Addition(BaseModel):
    class Type(models.TextChoices):
        SAUCE = "sauce", "Salsa"
        EXTRA = "extra", "Extra"

    type = models.CharField(max_length=10, choices=Type.choices)
    name = models.CharField(max_length=120)
    # sauces are priced by the category rule; this price only applies to extras
    price_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["type", "display_order", "name"]

    def __str__(self) -> str:
        return f"{self.get_type_display()}: {self.name}"


class SauceMode(models.TextChoices):
    NONE = "none", "Nessuna salsa"
    FREE_SINGLE = "free_single", "Una salsa gratuita"
    PAID_MULTI = "paid_multi", "Più salse a pagamento"


class AdditionCategoryRule(BaseModel):
    category = models.OneToOneField(Category, on_delete=models.CASCADE, related_name="sauce_rule")
    sauce_mode = models.CharField(max_length=20, choices=SauceMode.choices, default=SauceMode.FREE_SINGLE)
    max_sauces = models.PositiveSmallIntegerField(default=1, validators=[MaxValueValidator(10)])
    sauce_price_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return f"{self.category.slug}: {self.sauce_mode}"


class DiscountCode(BaseModel):
    class Type(models.TextChoices):
        PERCENTAGE = "percentage", "Percentuale"
        FIXED = "fixed", "Importo fisso"

    code = models.CharField(max_length=40, unique=True)
    discount_type = models.CharField(max_length=12, choices=Type.choices)
    value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text="percentage: percent off the subtotal (0-100); fixed: euros off",
    )
    min_order_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    is_active = models.BooleanField(default=True)
    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return self.code

    def clean(self):
        super().clean()
        if self.discount_type == self.Type.PERCENTAGE and self.value is not None:
            try:
                MaxValueValidator(100)(self.value)
            except ValidationError as e:
                raise ValidationError({"value": e.messages}) from e

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def is_valid_at(self, when: Optional[dt.datetime] = None) -> bool:
        when = when or timezone.now()
        if not self.is_active or self.valid_from > when:
            return False
        return self.valid_until is None or self.valid_until >= when

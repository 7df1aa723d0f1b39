from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=120)),
                ("slug", models.SlugField(max_length=120, unique=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["display_order", "name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="Addition",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("type", models.CharField(choices=[("sauce", "Salsa"), ("extra", "Extra")], max_length=10)),
                ("name", models.CharField(max_length=120)),
                ("price_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("is_active", models.BooleanField(default=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["type", "display_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="DiscountCode",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=40, unique=True)),
                ("discount_type", models.CharField(choices=[("percentage", "Percentuale"), ("fixed", "Importo fisso")], max_length=12)),
                ("value", models.DecimalField(decimal_places=2, help_text="percentage: percent off the subtotal (0-100); fixed: euros off", max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ("min_order_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("is_active", models.BooleanField(default=True)),
                ("valid_from", models.DateTimeField(default=django.utils.timezone.now)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=160)),
                ("description", models.TextField(blank=True)),
                ("price_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("available", models.BooleanField(default=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="products", to="catalog.category")),
            ],
            options={
                "ordering": ["display_order", "name"],
                "indexes": [
                    models.Index(fields=["category", "available"], name="catalog_product_avail_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AdditionCategoryRule",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sauce_mode", models.CharField(choices=[("none", "Nessuna salsa"), ("free_single", "Una salsa gratuita"), ("paid_multi", "Più salse a pagamento")], default="free_single", max_length=20)),
                ("max_sauces", models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MaxValueValidator(10)])),
                ("sauce_price_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("is_active", models.BooleanField(default=True)),
                ("category", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="sauce_rule", to="catalog.category")),
            ],
        ),
    ]

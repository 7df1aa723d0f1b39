from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import uuid


STATUS_CHOICES = [
    ("pending", "In attesa"),
    ("confirmed", "Confermato"),
    ("preparing", "In preparazione"),
    ("ready", "Pronto"),
    ("completed", "Completato"),
    ("cancelled", "Annullato"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order_number", models.CharField(max_length=20, unique=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="pending", max_length=20)),
                ("customer_name", models.CharField(max_length=100)),
                ("customer_phone", models.CharField(max_length=20)),
                ("customer_address", models.CharField(blank=True, max_length=500)),
                ("order_type", models.CharField(choices=[("delivery", "Consegna"), ("takeaway", "Asporto")], max_length=10)),
                ("payment_method", models.CharField(blank=True, choices=[("cash", "Contanti"), ("card", "Carta")], max_length=10, null=True)),
                ("subtotal_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("delivery_fee_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("discount_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("total_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("discount_code", models.CharField(blank=True, max_length=40, null=True)),
                ("notes", models.TextField(blank=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("product_name", models.CharField(max_length=160)),
                ("unit_price_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("quantity", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(99)])),
                ("addition_ids", models.JSONField(blank=True, default=list)),
                ("addition_unit_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("additions_label", models.CharField(blank=True, max_length=500)),
                ("line_total_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("note", models.CharField(blank=True, max_length=200)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
                ("product", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="catalog.product")),
            ],
            options={
                "ordering": ["position"],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusChange",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("source", models.CharField(blank=True, max_length=32)),
                ("note", models.CharField(blank=True, max_length=200)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_changes", to="orders.order")),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["order", "created_at"], name="orders_statuschange_idx"),
                ],
            },
        ),
    ]

from django.db import migrations, models
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PushToken",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("token", models.CharField(max_length=512)),
                ("scope", models.CharField(choices=[("customer", "Cliente"), ("admin", "Staff")], default="customer", max_length=10)),
                ("order_number", models.CharField(blank=True, default="", max_length=20)),
                ("user_agent", models.CharField(blank=True, max_length=255)),
                ("device_info", models.CharField(blank=True, max_length=255)),
                ("last_seen", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("scope", "order_number", "token"), name="uniq_push_token_scope_order"),
                ],
                "indexes": [
                    models.Index(fields=["order_number"], name="push_token_order_idx"),
                    models.Index(fields=["scope", "last_seen"], name="push_token_scope_seen_idx"),
                ],
            },
        ),
    ]

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                ("location", models.CharField(max_length=255)),
                ("region", models.CharField(blank=True, max_length=100)),
                ("description", models.TextField(blank=True)),
                ("house_rules", models.TextField(blank=True)),
                ("bedrooms", models.PositiveSmallIntegerField(default=1)),
                ("bathrooms", models.PositiveSmallIntegerField(default=1)),
                (
                    "sleeps_min",
                    models.PositiveSmallIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "sleeps_max",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "midweek_rate",
                    models.DecimalField(
                        decimal_places=2, help_text="Nightly price for Sunday-Thursday nights.", max_digits=10
                    ),
                ),
                (
                    "weekend_rate",
                    models.DecimalField(decimal_places=2, help_text="Nightly price for weekend nights.", max_digits=10),
                ),
                ("cleaning_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "security_deposit",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Refundable, held separately from the booking total.",
                        max_digits=10,
                    ),
                ),
                (
                    "service_fee_percent",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "tax_rate_percent",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                ("currency", models.CharField(default="GBP", max_length=3)),
                (
                    "weekend_nights",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Weekdays (0=Mon ... 6=Sun) priced at the weekend rate. Empty uses the platform default.",
                    ),
                ),
                ("is_published", models.BooleanField(default=True)),
                ("featured", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="properties",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Property",
                "verbose_name_plural": "Properties",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_published"], name="property_published_idx"),
                    models.Index(fields=["owner", "is_published"], name="property_owner_published_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("sleeps_max__gte", models.F("sleeps_min"))),
                        name="property_valid_occupancy",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PropertySeasonalRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(help_text="Last night covered by the rate (inclusive).")),
                ("price_per_night", models.DecimalField(decimal_places=2, max_digits=10)),
                ("description", models.CharField(blank=True, max_length=255)),
                (
                    "priority",
                    models.PositiveSmallIntegerField(default=0, help_text="When periods overlap the higher priority wins."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_seasonal_rates",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="seasonal_rates",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Seasonal rate",
                "verbose_name_plural": "Seasonal rates",
                "ordering": ["start_date"],
                "indexes": [
                    models.Index(
                        fields=["property", "start_date", "end_date", "priority"],
                        name="seasonal_rate_lookup_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="seasonal_rate_valid_date_range",
                    ),
                ],
            },
        ),
    ]

"""Property domain models.

Group escape houses with their nightly rates, fee schedule,
occupancy bounds and seasonal price overrides.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Property(models.Model):
    """A house listed for group stays."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    location = models.CharField(max_length=255)
    region = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    house_rules = models.TextField(blank=True)
    bedrooms = models.PositiveSmallIntegerField(default=1)
    bathrooms = models.PositiveSmallIntegerField(default=1)
    sleeps_min = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    sleeps_max = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    midweek_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Nightly price for Sunday-Thursday nights."),
    )
    weekend_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Nightly price for weekend nights."),
    )
    cleaning_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    security_deposit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Refundable, held separately from the booking total."),
    )
    service_fee_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    tax_rate_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    currency = models.CharField(max_length=3, default="GBP")
    weekend_nights = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Weekdays (0=Mon ... 6=Sun) priced at the weekend rate. Empty uses the platform default."),
    )
    is_published = models.BooleanField(default=True)
    featured = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(sleeps_max__gte=models.F("sleeps_min")),
                name="property_valid_occupancy",
            ),
        ]
        indexes = [
            models.Index(fields=["is_published"], name="property_published_idx"),
            models.Index(fields=["owner", "is_published"], name="property_owner_published_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.title)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)


class PropertySeasonalRate(models.Model):
    """Per-date price exceptions that win over the midweek/weekend rate."""

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="seasonal_rates",
    )
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Last night covered by the rate (inclusive)."))
    price_per_night = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.CharField(max_length=255, blank=True)
    priority = models.PositiveSmallIntegerField(
        default=0,
        help_text=_("When periods overlap the higher priority wins."),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_seasonal_rates",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Seasonal rate")
        verbose_name_plural = _("Seasonal rates")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="seasonal_rate_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(
                fields=["property", "start_date", "end_date", "priority"],
                name="seasonal_rate_lookup_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.property.title}: {self.start_date} - {self.end_date}"

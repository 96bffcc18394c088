# catalog/models.py
from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

from django.core.validators import MinValueValidator
from django.db import models
from django.urls import reverse
from django.utils.translation import gettext_lazy as _

from core.models import TimeStampedModel

from catalog.managers import ProductManager

DECIMAL_ZERO = Decimal("0.00")


# ============================================================
# Products
# ============================================================
class Product(TimeStampedModel):
    slug = models.SlugField(unique=True, max_length=200, verbose_name=_("Slug"))

    # Translated via modeltranslation: title, content
    title = models.CharField(max_length=200, verbose_name=_("Title"))
    content = models.TextField(blank=True, verbose_name=_("Description"))

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=DECIMAL_ZERO,
        validators=[MinValueValidator(DECIMAL_ZERO)],
        verbose_name=_("Price"),
    )
    stock_level = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Stock level"),
        help_text=_("Used when the product has no attributes."),
    )
    is_active = models.BooleanField(default=True, verbose_name=_("Active"))

    objects = ProductManager()

    class Meta:
        ordering = ("title",)
        verbose_name = _("Product")
        verbose_name_plural = _("Products")

    def __str__(self) -> str:
        return self.title or self.slug

    def get_absolute_url(self) -> str:
        return reverse("catalog:product_detail", kwargs={"slug": self.slug})

    @property
    def product_class(self) -> str:
        """Type discriminator posted back by the cart form, e.g. "catalog.Product"."""
        return self._meta.label

    def requires_variation(self) -> bool:
        """A product with attributes can only be bought as one of its variations."""
        return self.attributes.exists()

    def get_stock_level(self) -> int:
        return self.stock_level


# ============================================================
# Attributes & Options
# ============================================================
class Attribute(models.Model):
    """
    A choice dimension of a product, e.g. Size or Color.
    Attributes render as chained selects in `sort_order`.
    """
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="attributes",
        verbose_name=_("Product"),
    )
    title = models.CharField(max_length=100, verbose_name=_("Title"))
    label = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_("Label"),
        help_text=_("Shown next to the select on the product page."),
    )
    sort_order = models.PositiveIntegerField(default=0, verbose_name=_("Sort order"))

    class Meta:
        ordering = ("sort_order", "id")
        verbose_name = _("Attribute")
        verbose_name_plural = _("Attributes")

    def __str__(self) -> str:
        return self.title

    def get_label(self) -> str:
        return self.label or self.title

    @property
    def field_name(self) -> str:
        return f"Options[{self.pk}]"


class Option(models.Model):
    attribute = models.ForeignKey(
        Attribute,
        on_delete=models.CASCADE,
        related_name="options",
        verbose_name=_("Attribute"),
    )
    title = models.CharField(max_length=100, verbose_name=_("Title"))
    sort_order = models.PositiveIntegerField(default=0, verbose_name=_("Sort order"))

    class Meta:
        ordering = ("sort_order", "id")
        verbose_name = _("Option")
        verbose_name_plural = _("Options")

    def __str__(self) -> str:
        return f"{self.attribute}: {self.title}"


# ============================================================
# Variations
# ============================================================
class Variation(TimeStampedModel):
    """
    One purchasable combination of options, with its own price delta and stock.
    """

    class Status(models.TextChoices):
        ENABLED = "enabled", _("Enabled")
        DISABLED = "disabled", _("Disabled")

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="variations",
        verbose_name=_("Product"),
    )
    options = models.ManyToManyField(
        Option,
        related_name="variations",
        blank=True,
        verbose_name=_("Options"),
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=DECIMAL_ZERO,
        verbose_name=_("Price difference"),
        help_text=_("Added to the product price."),
    )
    stock_level = models.PositiveIntegerField(default=0, verbose_name=_("Stock level"))
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ENABLED,
        verbose_name=_("Status"),
    )

    class Meta:
        ordering = ("product", "id")
        verbose_name = _("Variation")
        verbose_name_plural = _("Variations")

    def __str__(self) -> str:
        titles = [option.title for option in self.options.all()]
        if not titles:
            return f"{self.product} #{self.pk}"
        return f"{self.product} - {' / '.join(titles)}"

    def is_enabled(self) -> bool:
        return self.status == self.Status.ENABLED

    def option_map(self) -> Dict[str, str]:
        """Return {attribute_id: option_id} as strings, the shape the form posts."""
        return {
            str(option.attribute_id): str(option.pk)
            for option in self.options.all()
        }

    def option_ids(self) -> List[int]:
        return [option.pk for option in self.options.all()]

    def get_stock_level(self) -> int:
        return self.stock_level

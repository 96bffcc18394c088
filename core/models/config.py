# core/models/config.py
from __future__ import annotations

from django.db import models
from django.utils.translation import gettext_lazy as _
from solo.models import SingletonModel


class ShopConfig(SingletonModel):
    """
    Shop-wide settings edited from the admin.

    Carts cannot take items while `base_currency` is blank.
    """
    base_currency = models.CharField(
        max_length=3,
        blank=True,
        verbose_name=_("Base currency"),
        help_text=_("ISO 4217 code, e.g. USD."),
    )
    base_currency_symbol = models.CharField(
        max_length=10,
        blank=True,
        default="$",
        verbose_name=_("Currency symbol"),
    )

    class Meta:
        verbose_name = _("Shop settings")

    def __str__(self) -> str:
        return "Shop settings"

    @property
    def has_base_currency(self) -> bool:
        return bool((self.base_currency or "").strip())

from django.contrib import admin
from solo.admin import SingletonModelAdmin

from .models import ShopConfig


@admin.register(ShopConfig)
class ShopConfigAdmin(SingletonModelAdmin):
    fieldsets = (
        (None, {"fields": ("base_currency", "base_currency_symbol")}),
    )

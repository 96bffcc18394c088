from django.contrib import admin
from modeltranslation.admin import TranslationAdmin, TranslationTabularInline

from .models import Attribute, Option, Product, Variation


class AttributeInline(TranslationTabularInline):
    model = Attribute
    extra = 0
    fields = ("title", "label", "sort_order")
    show_change_link = True


class VariationInline(admin.TabularInline):
    model = Variation
    extra = 0
    fields = ("options", "amount", "stock_level", "status")
    filter_horizontal = ("options",)


@admin.register(Product)
class ProductAdmin(TranslationAdmin):
    list_display = ("title", "slug", "price", "stock_level", "is_active")
    list_filter = ("is_active",)
    search_fields = ("title", "slug")
    inlines = [AttributeInline, VariationInline]


class OptionInline(TranslationTabularInline):
    model = Option
    extra = 0
    fields = ("title", "sort_order")


@admin.register(Attribute)
class AttributeAdmin(TranslationAdmin):
    list_display = ("title", "product", "sort_order")
    list_filter = ("product",)
    inlines = [OptionInline]


@admin.register(Variation)
class VariationAdmin(admin.ModelAdmin):
    list_display = ("__str__", "product", "amount", "stock_level", "status")
    list_filter = ("status", "product")
    filter_horizontal = ("options",)

# catalog/translation.py

from modeltranslation.translator import register, TranslationOptions
from .models import Product, Attribute, Option


@register(Product)
class ProductTR(TranslationOptions):
    fields = (
        "title",
        "content",
    )


@register(Attribute)
class AttributeTR(TranslationOptions):
    fields = ("title", "label")


@register(Option)
class OptionTR(TranslationOptions):
    fields = ("title",)

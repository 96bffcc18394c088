from django.test import TestCase

from .models import ShopConfig


class ShopConfigTests(TestCase):
    def test_get_solo_creates_single_row(self):
        first = ShopConfig.get_solo()
        second = ShopConfig.get_solo()

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(ShopConfig.objects.count(), 1)

    def test_base_currency_is_unset_by_default(self):
        self.assertFalse(ShopConfig.get_solo().has_base_currency)

    def test_blank_currency_counts_as_unset(self):
        config = ShopConfig.get_solo()
        config.base_currency = "   "
        config.save()

        self.assertFalse(ShopConfig.get_solo().has_base_currency)

        config.base_currency = "USD"
        config.save()
        self.assertTrue(ShopConfig.get_solo().has_base_currency)

from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from core.models import ShopConfig

from .models import Attribute, Option, Product, Variation
from . import services


class BaseCatalogTestCase(TestCase):
    def setUp(self):
        config = ShopConfig.get_solo()
        config.base_currency = "USD"
        config.save()

        # Product with two attributes
        self.product = Product.objects.create(
            slug="tee",
            title="Tee",
            price=Decimal("10.00"),
        )
        self.size = Attribute.objects.create(product=self.product, title="Size", sort_order=1)
        self.color = Attribute.objects.create(product=self.product, title="Color", sort_order=2)

        self.small = Option.objects.create(attribute=self.size, title="S")
        self.medium = Option.objects.create(attribute=self.size, title="M")
        self.red = Option.objects.create(attribute=self.color, title="Red")
        self.blue = Option.objects.create(attribute=self.color, title="Blue")

        # Variations
        self.small_red = self._variation([self.small, self.red], amount="2.00", stock=3)
        self.medium_blue = self._variation([self.medium, self.blue], amount="3.00", stock=0)
        self.medium_red = self._variation(
            [self.medium, self.red],
            amount="1.00",
            stock=5,
            status=Variation.Status.DISABLED,
        )

        # Product without attributes
        self.plain = Product.objects.create(
            slug="mug",
            title="Mug",
            price=Decimal("5.00"),
            stock_level=2,
        )

    def _variation(self, options, *, amount="0.00", stock=0, status=Variation.Status.ENABLED, product=None):
        variation = Variation.objects.create(
            product=product or self.product,
            amount=Decimal(amount),
            stock_level=stock,
            status=status,
        )
        variation.options.set(options)
        return variation

    def selection(self, *options):
        return {str(option.attribute_id): str(option.pk) for option in options}


class ProductModelTests(BaseCatalogTestCase):
    def test_requires_variation_follows_attributes(self):
        self.assertTrue(self.product.requires_variation())
        self.assertFalse(self.plain.requires_variation())

    def test_product_class_is_model_label(self):
        self.assertEqual(self.product.product_class, "catalog.Product")

    def test_attributes_are_ordered(self):
        self.assertEqual(list(self.product.attributes.all()), [self.size, self.color])
        self.assertEqual(self.size.field_name, f"Options[{self.size.pk}]")

    def test_variation_helpers(self):
        self.assertTrue(self.small_red.is_enabled())
        self.assertFalse(self.medium_red.is_enabled())
        self.assertEqual(
            self.small_red.option_map(),
            {str(self.size.pk): str(self.small.pk), str(self.color.pk): str(self.red.pk)},
        )
        self.assertEqual(str(self.small_red), "Tee - S / Red")


class GetProductTests(BaseCatalogTestCase):
    def test_resolves_by_class_and_id(self):
        self.assertEqual(services.get_product("catalog.Product", str(self.product.pk)), self.product)

    def test_unknown_or_invalid_input_returns_none(self):
        self.assertIsNone(services.get_product("catalog.Product", "999999"))
        self.assertIsNone(services.get_product("catalog.Product", "abc"))
        self.assertIsNone(services.get_product("nope.Model", str(self.product.pk)))
        self.assertIsNone(services.get_product("catalog", str(self.product.pk)))
        self.assertIsNone(services.get_product("", str(self.product.pk)))

    def test_non_product_model_is_rejected(self):
        self.assertIsNone(services.get_product("catalog.Option", str(self.small.pk)))

    def test_inactive_product_is_not_found(self):
        self.product.is_active = False
        self.product.save()

        self.assertIsNone(services.get_product("catalog.Product", str(self.product.pk)))


class VariationMatchingTests(BaseCatalogTestCase):
    def test_exact_enabled_match(self):
        matches = services.matching_variations(self.product, self.selection(self.small, self.red))
        self.assertEqual(matches, [self.small_red])

    def test_disabled_variation_never_matches(self):
        matches = services.matching_variations(self.product, self.selection(self.medium, self.red))
        self.assertEqual(matches, [])

    def test_partial_selection_does_not_match(self):
        matches = services.matching_variations(self.product, self.selection(self.small))
        self.assertEqual(matches, [])

    def test_variation_without_options_never_matches(self):
        self._variation([], amount="0.00", stock=5)

        self.assertEqual(services.matching_variations(self.product, {}), [])
        self.assertIsNone(services.resolve_variation(self.product, {}))

    def test_resolve_variation_prefers_lowest_id(self):
        duplicate = self._variation([self.small, self.red], amount="9.00", stock=1)

        resolved = services.resolve_variation(self.product, self.selection(self.small, self.red))

        self.assertEqual(resolved, self.small_red)
        self.assertNotEqual(resolved, duplicate)

    def test_resolve_variation_without_match(self):
        self.assertIsNone(services.resolve_variation(self.product, {}))

    def test_stock_level_for(self):
        self.assertEqual(services.stock_level_for(self.product, self.small_red), 3)
        self.assertEqual(services.stock_level_for(self.plain), 2)

    def test_get_product_prefetches_the_catalog(self):
        product = services.get_product("catalog.Product", str(self.product.pk))

        with self.assertNumQueries(0):
            matches = services.matching_variations(product, self.selection(self.small, self.red))
            entries = services.price_map(product)
            services.option_dependencies(product, self.size, self.color)

        self.assertEqual(matches, [self.small_red])
        self.assertEqual(len(entries), 3)


class PriceMapTests(BaseCatalogTestCase):
    def test_single_variation_adds_delta_to_product_price(self):
        product = Product.objects.create(slug="cap", title="Cap", price=Decimal("10.00"))
        size = Attribute.objects.create(product=product, title="Size")
        one_size = Option.objects.create(attribute=size, title="One size")
        self._variation([one_size], amount="2.00", stock=1, product=product)

        entries = services.price_map(product)

        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0]["price"], "12.00")
        self.assertEqual(entries[0]["options"], [one_size.pk])
        self.assertEqual(entries[0]["free"], "Free")

    def test_prices_accumulate_across_variations(self):
        entries = services.price_map(self.product)

        # 10.00 + 2.00, then + 3.00, then + 1.00
        self.assertEqual([entry["price"] for entry in entries], ["12.00", "15.00", "16.00"])
        self.assertEqual(entries[0]["options"], [self.small.pk, self.red.pk])

    def test_product_without_variations_has_empty_map(self):
        self.assertEqual(services.price_map(self.plain), [])


class OptionDependencyTests(BaseCatalogTestCase):
    def test_dependencies_only_use_enabled_variations(self):
        dependencies = services.option_dependencies(self.product, self.size, self.color)

        self.assertEqual(
            dependencies,
            {
                str(self.small.pk): [str(self.red.pk)],
                str(self.medium.pk): [str(self.blue.pk)],
            },
        )


class CatalogViewTests(BaseCatalogTestCase):
    def test_product_list(self):
        response = self.client.get(reverse("catalog:product_list"))

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Tee")
        self.assertContains(response, "Mug")

    def test_product_detail_renders_cart_form(self):
        response = self.client.get(self.product.get_absolute_url())

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'class="product-form"')
        self.assertContains(response, "data-map=")
        self.assertContains(response, f'name="Options[{self.size.pk}]"')
        self.assertContains(response, f'name="Options[{self.color.pk}]"')
        self.assertContains(response, 'name="Quantity"')
        self.assertContains(response, "Add To Cart")

    def test_inactive_product_detail_is_404(self):
        self.product.is_active = False
        self.product.save()

        response = self.client.get(self.product.get_absolute_url())
        self.assertEqual(response.status_code, 404)

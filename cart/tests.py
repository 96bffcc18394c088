import json
from decimal import Decimal
from unittest import mock

from django.contrib.messages import get_messages
from django.contrib.sessions.backends.db import SessionStore
from django.core.exceptions import ValidationError
from django.forms.forms import NON_FIELD_ERRORS
from django.http import Http404, QueryDict
from django.test import RequestFactory, SimpleTestCase, TestCase
from django.urls import reverse

from catalog.models import Attribute, Option, Product, Variation
from core.models import ShopConfig

from .cart import CART_SESSION_ID, Cart, Order
from .forms import ProductForm, QuantityField, submitted_options
from .hooks import ItemOption, OptionHookRegistry, option_hooks
from . import services

VARIATION_REQUIRED = "This product requires options before it can be added to the cart."
OUT_OF_STOCK = "Sorry, this product is out of stock."
STOCK_EXCEEDED = "The quantity is greater than available stock for this product."
CURRENCY_NOT_SET = "The currency is not set."


class BaseCartTestCase(TestCase):
    def setUp(self):
        self.config = ShopConfig.get_solo()
        self.config.base_currency = "USD"
        self.config.save()

        self.product = Product.objects.create(slug="tee", title="Tee", price=Decimal("10.00"))
        self.size = Attribute.objects.create(product=self.product, title="Size", sort_order=1)
        self.color = Attribute.objects.create(product=self.product, title="Color", sort_order=2)

        self.small = Option.objects.create(attribute=self.size, title="S")
        self.medium = Option.objects.create(attribute=self.size, title="M")
        self.red = Option.objects.create(attribute=self.color, title="Red")
        self.blue = Option.objects.create(attribute=self.color, title="Blue")

        self.small_red = Variation.objects.create(
            product=self.product, amount=Decimal("2.00"), stock_level=3
        )
        self.small_red.options.set([self.small, self.red])

        self.medium_blue = Variation.objects.create(
            product=self.product, amount=Decimal("3.00"), stock_level=0
        )
        self.medium_blue.options.set([self.medium, self.blue])

        self.medium_red = Variation.objects.create(
            product=self.product,
            amount=Decimal("1.00"),
            stock_level=5,
            status=Variation.Status.DISABLED,
        )
        self.medium_red.options.set([self.medium, self.red])

        self.plain = Product.objects.create(
            slug="mug", title="Mug", price=Decimal("5.00"), stock_level=2
        )

    def post_data(self, product=None, options=(), quantity="1", **extra):
        product = product or self.product
        data = {
            "ProductClass": product.product_class,
            "ProductID": str(product.pk),
            "Redirect": "",
            "Quantity": quantity,
        }
        for option in options:
            data[f"Options[{option.attribute_id}]"] = str(option.pk)
        data.update(extra)
        return data

    def bound_form(self, product=None, **kwargs):
        product = product or self.product
        query = QueryDict(mutable=True)
        query.update(self.post_data(product, **kwargs))
        return ProductForm(product, data=query)


# ============================================================
# Quantity field
# ============================================================

class QuantityFieldTests(SimpleTestCase):
    def setUp(self):
        self.field = QuantityField()

    def test_valid_quantity(self):
        self.assertEqual(self.field.clean("5"), 5)
        self.assertEqual(self.field.clean(" 7 "), 7)
        self.assertEqual(self.field.clean("2147483647"), 2147483647)

    def test_not_a_number(self):
        for value in ("abc", "2.5", "NaN", "1e"):
            with self.subTest(value=value):
                with self.assertRaisesMessage(ValidationError, "The quantity must be a number"):
                    self.field.clean(value)

    def test_at_least_one(self):
        for value in ("0", "-3"):
            with self.subTest(value=value):
                with self.assertRaisesMessage(ValidationError, "The quantity must be at least 1"):
                    self.field.clean(value)

    def test_upper_bound(self):
        with self.assertRaisesMessage(ValidationError, "The quantity must be less than 2,147,483,647"):
            self.field.clean("2147483648")

    def test_upper_bound_message_follows_limit(self):
        field = QuantityField(max_quantity=1000)

        self.assertEqual(field.clean("1000"), 1000)
        with self.assertRaisesMessage(ValidationError, "The quantity must be less than 1,000"):
            field.clean("1001")

    def test_required(self):
        with self.assertRaisesMessage(ValidationError, "This field is required."):
            self.field.clean("")

    def test_custom_validation_message(self):
        field = QuantityField(custom_validation_message="Pick between 1 and 10")

        for value in ("abc", "0", "2147483648"):
            with self.subTest(value=value):
                with self.assertRaisesMessage(ValidationError, "Pick between 1 and 10"):
                    field.clean(value)


class SubmittedOptionsTests(SimpleTestCase):
    def test_extracts_attribute_option_pairs(self):
        data = QueryDict("Options[3]=7&Options[4]=&Quantity=1&Options=9")
        self.assertEqual(submitted_options(data), {"3": "7"})

    def test_empty_data(self):
        self.assertEqual(submitted_options(None), {})


# ============================================================
# Form builder
# ============================================================

class ProductFormBuilderTests(BaseCartTestCase):
    def test_field_order(self):
        form = ProductForm(self.product)

        self.assertEqual(
            list(form.fields),
            [
                "ProductClass",
                "ProductID",
                "Redirect",
                f"Options[{self.size.pk}]",
                f"Options[{self.color.pk}]",
                "Quantity",
            ],
        )

    def test_initial_values(self):
        form = ProductForm(self.product, quantity=2, redirect_url="/en/cart/")

        self.assertEqual(form.fields["ProductClass"].initial, "catalog.Product")
        self.assertEqual(form.fields["ProductID"].initial, self.product.pk)
        self.assertEqual(form.fields["Redirect"].initial, "/en/cart/")
        self.assertEqual(form.fields["Quantity"].initial, 2)

    def test_product_without_attributes_has_no_option_fields(self):
        form = ProductForm(self.plain)

        self.assertFalse([name for name in form.fields if name.startswith("Options[")])
        self.assertEqual(list(form.fields)[-1], "Quantity")

    def test_option_fields_are_chained(self):
        form = ProductForm(self.product)
        size_field = form.fields[self.size.field_name]
        color_field = form.fields[self.color.field_name]

        self.assertNotIn("data-prev", size_field.widget.attrs)
        self.assertEqual(color_field.widget.attrs["data-prev"], self.size.field_name)
        self.assertEqual(
            json.loads(color_field.widget.attrs["data-depends"]),
            {str(self.small.pk): [str(self.red.pk)], str(self.medium.pk): [str(self.blue.pk)]},
        )
        # Unbound: every option is offered, the browser narrows them
        self.assertEqual(
            [value for value, _ in color_field.choices],
            ["", str(self.red.pk), str(self.blue.pk)],
        )

    def test_bound_option_field_is_limited_by_previous_selection(self):
        form = self.bound_form(options=[self.small])
        color_field = form.fields[self.color.field_name]

        self.assertEqual([value for value, _ in color_field.choices], ["", str(self.red.pk)])

    def test_data_map(self):
        form = ProductForm(self.product)
        entries = json.loads(form.data_map)

        self.assertEqual([entry["price"] for entry in entries], ["12.00", "15.00", "16.00"])
        self.assertEqual(entries[0]["options"], [self.small.pk, self.red.pk])

    def test_prefetched_product_renders_without_queries(self):
        product = Product.objects.with_catalog().get(pk=self.product.pk)

        with self.assertNumQueries(0):
            form = ProductForm(product)
            form.data_map

        self.assertIn(self.color.field_name, form.fields)


# ============================================================
# Validator
# ============================================================

class ProductFormValidationTests(BaseCartTestCase):
    def test_matching_variation_with_enough_stock_is_valid(self):
        form = self.bound_form(options=[self.small, self.red], quantity="3")

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.variation, self.small_red)
        self.assertEqual(form.stock_level, 3)
        self.assertEqual(form.cleaned_data["Quantity"], 3)

    def test_variation_required_when_no_options(self):
        form = self.bound_form()

        self.assertFalse(form.is_valid())
        self.assertIn(VARIATION_REQUIRED, form.non_field_errors())

    def test_variation_without_options_does_not_satisfy_attributes(self):
        bare = Variation.objects.create(product=self.product, stock_level=5)
        self.assertEqual(bare.option_map(), {})

        form = self.bound_form()

        self.assertFalse(form.is_valid())
        self.assertIn(VARIATION_REQUIRED, form.non_field_errors())
        self.assertIsNone(form.variation)

    def test_disabled_variation_is_not_selectable(self):
        form = self.bound_form(options=[self.medium, self.red])

        self.assertFalse(form.is_valid())
        self.assertIn(VARIATION_REQUIRED, form.non_field_errors())

    def test_out_of_stock_variation(self):
        form = self.bound_form(options=[self.medium, self.blue])

        self.assertFalse(form.is_valid())
        self.assertIn(OUT_OF_STOCK, form.non_field_errors())

    def test_quantity_above_stock(self):
        form = self.bound_form(options=[self.small, self.red], quantity="4")

        self.assertFalse(form.is_valid())
        self.assertIn(STOCK_EXCEEDED, form.non_field_errors())

    def test_product_stock_is_used_without_attributes(self):
        self.assertTrue(self.bound_form(self.plain, quantity="2").is_valid())

        form = self.bound_form(self.plain, quantity="3")
        self.assertFalse(form.is_valid())
        self.assertIn(STOCK_EXCEEDED, form.non_field_errors())

        self.plain.stock_level = 0
        self.plain.save()
        form = self.bound_form(self.plain, quantity="1")
        self.assertFalse(form.is_valid())
        self.assertIn(OUT_OF_STOCK, form.non_field_errors())

    def test_missing_currency(self):
        self.config.base_currency = ""
        self.config.save()

        form = self.bound_form(options=[self.small, self.red], quantity="1")

        self.assertFalse(form.is_valid())
        self.assertEqual(form.non_field_errors(), [CURRENCY_NOT_SET])

    def test_errors_accumulate(self):
        self.config.base_currency = ""
        self.config.save()

        form = self.bound_form(options=[self.small, self.red], quantity="5")

        self.assertFalse(form.is_valid())
        self.assertIn(STOCK_EXCEEDED, form.non_field_errors())
        self.assertIn(CURRENCY_NOT_SET, form.non_field_errors())

    def test_invalid_quantity_skips_stock_comparison(self):
        form = self.bound_form(self.plain, quantity="abc")

        self.assertFalse(form.is_valid())
        self.assertEqual(form.errors["Quantity"], ["The quantity must be a number"])
        self.assertNotIn(STOCK_EXCEEDED, form.non_field_errors())

    def test_required_fields(self):
        form = ProductForm(None, data={})

        self.assertFalse(form.is_valid())
        for name in ("ProductClass", "ProductID", "Quantity"):
            self.assertEqual(form.errors[name], ["This field is required."])


# ============================================================
# Option hooks
# ============================================================

class OptionHookRegistryTests(BaseCartTestCase):
    def test_hooks_run_in_order_on_shared_list(self):
        registry = OptionHookRegistry()
        seen = []

        @registry.register
        def wrap(options, **kwargs):
            options.append(ItemOption("Gift wrap", Decimal("2.50")))

        @registry.register
        def note(options, *, product, variation, quantity, request):
            seen.append(len(options))
            options.append(ItemOption(f"Note for {product.title} x{quantity}"))

        options = registry.collect(product=self.plain, variation=None, quantity=2)

        self.assertEqual(len(registry), 2)
        self.assertEqual(seen, [1])
        self.assertEqual(
            options,
            [ItemOption("Gift wrap", Decimal("2.50")), ItemOption("Note for Mug x2")],
        )

    def test_hook_errors_propagate(self):
        registry = OptionHookRegistry()

        @registry.register
        def broken(options, **kwargs):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            registry.collect(product=self.plain, variation=None, quantity=1)

    def test_unregister(self):
        registry = OptionHookRegistry()

        def hook(options, **kwargs):
            options.append(ItemOption("x"))

        registry.register(hook)
        registry.unregister(hook)

        self.assertEqual(registry.collect(product=self.plain, variation=None, quantity=1), [])


# ============================================================
# Order
# ============================================================

class OrderTests(BaseCartTestCase):
    def setUp(self):
        super().setUp()
        self.session = SessionStore()
        self.request = RequestFactory().get("/")
        self.request.session = self.session

    def test_get_current_order_only_creates_when_asked(self):
        self.assertIsNone(Cart.get_current_order(self.request))

        order = Cart.get_current_order(self.request, create=True)

        self.assertIsInstance(order, Order)
        self.assertTrue(order.is_empty())
        self.assertIsNotNone(Cart.get_current_order(self.request))

    def test_add_item_merges_same_line(self):
        order = Cart.get_current_order(self.request, create=True)

        order.add_item(self.product, self.small_red, 1)
        order.add_item(self.product, self.small_red, 2)
        order.add_item(self.plain, None, 1)

        self.assertEqual(len(order), 2)
        self.assertEqual(order.get_total_quantity(), 4)
        # 3 x 12.00 + 1 x 5.00
        self.assertEqual(order.get_total_price(), Decimal("41.00"))

        line = self.session[CART_SESSION_ID][Order.line_key(self.product, self.small_red)]
        self.assertEqual(line["quantity"], 3)
        self.assertEqual(line["price"], "12.00")
        self.assertEqual(line["variation_id"], self.small_red.pk)

    def test_options_make_separate_lines_and_add_to_price(self):
        order = Cart.get_current_order(self.request, create=True)
        wrap = [ItemOption("Gift wrap", Decimal("2.50"))]

        order.add_item(self.plain, None, 1)
        order.add_item(self.plain, None, 1, wrap)

        self.assertEqual(len(order), 2)
        lines = {line["key"]: line for line in order}
        wrapped = lines[Order.line_key(self.plain, None, wrap)]
        self.assertEqual(wrapped["price"], Decimal("7.50"))
        self.assertEqual(wrapped["options"], wrap)

    def test_iteration_attaches_instances(self):
        order = Cart.get_current_order(self.request, create=True)
        order.add_item(self.product, self.small_red, 2)

        (line,) = list(order)

        self.assertEqual(line["product"], self.product)
        self.assertEqual(line["variation"], self.small_red)
        self.assertEqual(line["total_price"], Decimal("24.00"))

    def test_remove_and_clear(self):
        order = Cart.get_current_order(self.request, create=True)
        order.add_item(self.plain, None, 1)
        key = Order.line_key(self.plain, None)

        self.assertTrue(order.remove_item(key))
        self.assertFalse(order.remove_item(key))

        order.add_item(self.plain, None, 1)
        order.clear()
        self.assertTrue(order.is_empty())
        self.assertEqual(self.session[CART_SESSION_ID], {})


# ============================================================
# Services
# ============================================================

class RedirectTargetTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_same_site_target_is_used(self):
        request = self.factory.post("/en/cart/add/")
        self.assertEqual(services.get_next_url(request, "/en/cart/", "/fallback/"), "/en/cart/")
        self.assertEqual(
            services.get_next_url(request, "http://testserver/en/cart/", "/fallback/"),
            "http://testserver/en/cart/",
        )

    def test_off_site_target_goes_back_to_referer(self):
        request = self.factory.post(
            "/en/cart/add/", HTTP_REFERER="http://testserver/en/products/tee/"
        )

        for target in ("https://evil.example.com/", "//evil.example.com/x"):
            with self.subTest(target=target):
                self.assertEqual(
                    services.get_next_url(request, target, "/fallback/"),
                    "http://testserver/en/products/tee/",
                )

    def test_relative_target_without_leading_slash_is_ignored(self):
        request = self.factory.post(
            "/en/cart/add/", HTTP_REFERER="http://testserver/en/products/tee/"
        )

        for target in ("cart/", "../cart/", "javascript:alert(1)"):
            with self.subTest(target=target):
                self.assertEqual(
                    services.get_next_url(request, target, "/fallback/"),
                    "http://testserver/en/products/tee/",
                )

    def test_off_site_referer_falls_back(self):
        request = self.factory.post("/en/cart/add/", HTTP_REFERER="https://evil.example.com/")
        self.assertEqual(services.get_next_url(request, None, "/fallback/"), "/fallback/")

    def test_async_detection(self):
        self.assertTrue(
            services.is_async_request(self.factory.post("/", HTTP_X_REQUESTED_WITH="XMLHttpRequest"))
        )
        self.assertTrue(services.is_async_request(self.factory.post("/", HTTP_ACCEPT="application/json")))
        self.assertFalse(services.is_async_request(self.factory.post("/", HTTP_ACCEPT="text/html")))


class ResolveProductTests(BaseCartTestCase):
    def test_missing_ids_give_none(self):
        self.assertIsNone(services.resolve_product(QueryDict("")))

    def test_unknown_product_raises_404(self):
        with self.assertRaises(Http404):
            services.resolve_product(QueryDict("ProductClass=catalog.Product&ProductID=999999"))

    def test_resolves_product(self):
        data = QueryDict(f"ProductClass=catalog.Product&ProductID={self.product.pk}")
        self.assertEqual(services.resolve_product(data), self.product)


class FormErrorsPayloadTests(BaseCartTestCase):
    def test_payload_shape(self):
        form = self.bound_form(self.plain, quantity="0")
        self.config.base_currency = ""
        self.config.save()

        self.assertFalse(form.is_valid())
        payload = services.form_errors_payload(form)

        self.assertIn(
            {
                "fieldName": "Quantity",
                "message": "The quantity must be at least 1",
                "messageType": "error",
            },
            payload,
        )
        self.assertIn(
            {"fieldName": NON_FIELD_ERRORS, "message": CURRENCY_NOT_SET, "messageType": "bad"},
            payload,
        )


# ============================================================
# Endpoint
# ============================================================

class CartAddViewTests(BaseCartTestCase):
    def setUp(self):
        super().setUp()
        self.url = reverse("cart:add")
        self.referer = "http://testserver" + self.product.get_absolute_url()

    def test_get_not_allowed(self):
        self.assertEqual(self.client.get(self.url).status_code, 405)

    def test_exact_combination_is_added_once(self):
        data = self.post_data(options=[self.small, self.red], quantity="3")

        with mock.patch.object(Order, "add_item", autospec=True) as add_item:
            response = self.client.post(self.url, data, HTTP_REFERER=self.referer)

        self.assertEqual(response.status_code, 302)
        add_item.assert_called_once()
        _, product, variation, quantity, options = add_item.call_args.args
        self.assertEqual(product, self.product)
        self.assertEqual(variation, self.small_red)
        self.assertEqual(quantity, 3)
        self.assertEqual(options, [])

    def test_success_redirects_back_with_message(self):
        data = self.post_data(options=[self.small, self.red], quantity="2")

        response = self.client.post(self.url, data, HTTP_REFERER=self.referer)

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], self.referer)

        lines = self.client.session[CART_SESSION_ID]
        self.assertEqual(len(lines), 1)
        self.assertEqual(next(iter(lines.values()))["quantity"], 2)

        messages = [str(message) for message in get_messages(response.wsgi_request)]
        self.assertEqual(len(messages), 1)
        self.assertIn("The product was added to", messages[0])
        self.assertIn(reverse("cart:detail"), messages[0])

    def test_same_site_redirect_target_skips_message(self):
        cart_url = reverse("cart:detail")
        data = self.post_data(options=[self.small, self.red], Redirect=cart_url)

        response = self.client.post(self.url, data, HTTP_REFERER=self.referer)

        self.assertEqual(response["Location"], cart_url)
        self.assertEqual(list(get_messages(response.wsgi_request)), [])

    def test_off_site_redirect_target_goes_back_to_referer(self):
        data = self.post_data(options=[self.small, self.red], Redirect="https://evil.example.com/")

        response = self.client.post(self.url, data, HTTP_REFERER=self.referer)

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], self.referer)

    def test_without_referer_goes_to_product_page(self):
        data = self.post_data(self.plain)

        response = self.client.post(self.url, data)

        self.assertEqual(response["Location"], self.plain.get_absolute_url())

    def test_option_hooks_feed_the_cart_line(self):
        def engraving(options, *, product, variation, quantity, request):
            if request.POST.get("Engraving"):
                options.append(ItemOption("Engraving: " + request.POST["Engraving"], Decimal("4.00")))

        option_hooks.register(engraving)
        self.addCleanup(option_hooks.unregister, engraving)

        data = self.post_data(self.plain, Engraving="AB")
        self.client.post(self.url, data, HTTP_REFERER=self.referer)

        (line,) = self.client.session[CART_SESSION_ID].values()
        self.assertEqual(line["options"], [{"description": "Engraving: AB", "price": "4.00"}])
        self.assertEqual(line["price"], "9.00")

    def test_unknown_product_is_404(self):
        data = self.post_data(ProductID="999999")

        with mock.patch.object(Order, "add_item", autospec=True) as add_item:
            response = self.client.post(self.url, data, HTTP_REFERER=self.referer)

        self.assertEqual(response.status_code, 404)
        add_item.assert_not_called()

    def test_async_validation_errors_are_json(self):
        data = self.post_data(options=[self.medium, self.red])

        with mock.patch.object(Order, "add_item", autospec=True) as add_item:
            response = self.client.post(
                self.url, data, HTTP_X_REQUESTED_WITH="XMLHttpRequest"
            )

        self.assertEqual(response.status_code, 400)
        add_item.assert_not_called()
        payload = response.json()
        self.assertEqual(payload["status"], "bad")
        self.assertEqual(payload["message"], "Validation failed")
        self.assertIn(
            {"fieldName": NON_FIELD_ERRORS, "message": VARIATION_REQUIRED, "messageType": "bad"},
            payload["errors"],
        )

    def test_sync_validation_errors_are_kept_for_the_product_page(self):
        data = self.post_data(options=[self.small, self.red], quantity="abc")

        response = self.client.post(self.url, data, HTTP_REFERER=self.referer)

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], self.referer)
        self.assertNotIn(CART_SESSION_ID, self.client.session)

        info = self.client.session["FormInfo.ProductForm"]
        self.assertEqual(info["data"]["Quantity"], "abc")
        self.assertIn(
            {"fieldName": "Quantity", "message": "The quantity must be a number", "messageType": "error"},
            info["errors"],
        )
        self.assertEqual(info["formError"], {})

        # The product page shows the errors once
        page = self.client.get(self.product.get_absolute_url())
        self.assertContains(page, "The quantity must be a number")
        self.assertEqual(page.context["form"].initial["Quantity"], "abc")
        self.assertNotIn("FormInfo.ProductForm", self.client.session)

        page = self.client.get(self.product.get_absolute_url())
        self.assertNotContains(page, "The quantity must be a number")

    def test_stored_errors_stay_with_their_product(self):
        data = self.post_data(options=[self.small, self.red], quantity="abc")
        self.client.post(self.url, data, HTTP_REFERER=self.referer)

        page = self.client.get(self.plain.get_absolute_url())

        self.assertNotContains(page, "The quantity must be a number")
        self.assertEqual(page.context["form"]["ProductID"].value(), self.plain.pk)
        self.assertEqual(page.context["form"]["Quantity"].value(), 1)
        self.assertNotIn("FormInfo.ProductForm", self.client.session)

    def test_option_less_variation_is_not_added(self):
        Variation.objects.create(product=self.product, stock_level=5)

        response = self.client.post(
            self.url, self.post_data(), HTTP_X_REQUESTED_WITH="XMLHttpRequest"
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn(
            {"fieldName": NON_FIELD_ERRORS, "message": VARIATION_REQUIRED, "messageType": "bad"},
            response.json()["errors"],
        )
        self.assertNotIn(CART_SESSION_ID, self.client.session)

    def test_form_error_is_stored_for_redisplay(self):
        data = self.post_data(options=[self.small, self.red], quantity="4")

        self.client.post(self.url, data, HTTP_REFERER=self.referer)

        info = self.client.session["FormInfo.ProductForm"]
        self.assertEqual(info["formError"], {"message": STOCK_EXCEEDED, "messageType": "bad"})

        page = self.client.get(self.product.get_absolute_url())
        self.assertContains(page, STOCK_EXCEEDED)


class CartDetailViewTests(BaseCartTestCase):
    def test_empty_cart(self):
        response = self.client.get(reverse("cart:detail"))

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Your cart is empty.")
        self.assertEqual(response.context["cart_item_count"], 0)

    def test_lines_and_remove(self):
        self.client.post(
            reverse("cart:add"),
            self.post_data(options=[self.small, self.red], quantity="2"),
        )

        response = self.client.get(reverse("cart:detail"))
        self.assertContains(response, "Tee - S / Red")
        self.assertContains(response, "24.00")
        self.assertEqual(response.context["cart_item_count"], 2)

        key = Order.line_key(self.product, self.small_red)
        response = self.client.post(reverse("cart:remove", args=[key]))
        self.assertRedirects(response, reverse("cart:detail"))
        self.assertEqual(self.client.session[CART_SESSION_ID], {})

from django.views.generic import ListView, DetailView

from cart.forms import ProductForm
from cart.services import pop_form_info

from .models import Product


# ============================================================
# Products
# ============================================================

class ProductListView(ListView):
    """
    Public list of active products.
    """
    model = Product
    template_name = "catalog/product_list.html"
    context_object_name = "products"
    paginate_by = 12

    def get_queryset(self):
        return Product.objects.active().order_by("title")


class ProductDetailView(DetailView):
    """
    Public product page with the add-to-cart form.

    Errors and data from a rejected submission are taken out of the session
    and shown once.
    """
    model = Product
    template_name = "catalog/product_detail.html"
    context_object_name = "product"
    slug_field = "slug"
    slug_url_kwarg = "slug"

    def get_queryset(self):
        return Product.objects.active().with_catalog()

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)

        form_info = pop_form_info(self.request.session, ProductForm.form_name, self.object) or {}
        context["form"] = ProductForm(
            self.object,
            initial=form_info.get("data") or None,
            quantity=self.request.GET.get("quantity"),
            redirect_url=self.request.GET.get("redirect"),
        )
        context["form_errors"] = form_info.get("errors", [])
        context["form_error"] = form_info.get("formError") or {}
        return context

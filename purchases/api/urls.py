# purchases/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from purchases.api.views import (
    PurchaseInvoiceViewSet,
    SupplierDetailView,
    SupplierListCreateView,
)

router = DefaultRouter()
router.register(r"invoices", PurchaseInvoiceViewSet, basename="purchase-invoice")

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="purchase-suppliers"),
    path(
        "suppliers/<uuid:supplier_id>/",
        SupplierDetailView.as_view(),
        name="purchase-supplier-detail",
    ),
    path("", include(router.urls)),
]

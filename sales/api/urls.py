# sales/api/urls.py

"""
SALES API URLS

- Sales invoices:
    /api/sales/invoices/
    /api/sales/invoices/<uuid>/
    POST /api/sales/invoices/<uuid>/post/
    POST /api/sales/invoices/<uuid>/cancel/

- Walk-in sales:
    /api/sales/walk-in-sales/
    /api/sales/walk-in-sales/<uuid>/
    POST /api/sales/walk-in-sales/<uuid>/post/
    POST /api/sales/walk-in-sales/<uuid>/cancel/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.views import SalesInvoiceViewSet, WalkInSaleViewSet

router = DefaultRouter()
router.register(r"invoices", SalesInvoiceViewSet, basename="sales-invoice")
router.register(r"walk-in-sales", WalkInSaleViewSet, basename="walk-in-sale")

urlpatterns = [
    path("", include(router.urls)),
]

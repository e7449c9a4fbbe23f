# sales/tests/test_api.py

from __future__ import annotations

from django.contrib.auth.models import Permission
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from accounting.models.voucher import Voucher
from accounting.services.chart_seed import seed_default_chart
from accounting.tests.utils import ORG, OTHER_ORG, make_user
from sales.models import SalesInvoice


class SalesInvoiceApiTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", superuser=True)
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)
        self.client.credentials(HTTP_X_ORGANIZATION_ID=ORG)
        seed_default_chart(ORG)

    def _create(self, number="INV-9001", **extra):
        payload = {
            "invoice_number": number,
            "invoice_date": "2025-06-01",
            "customer_name": "Gamma Pharma",
            "subtotal": "400.00",
            "total_tax": "72.00",
        }
        payload.update(extra)
        return self.client.post(reverse("sales-invoice-list"), payload, format="json")

    def test_create_post_and_cancel(self):
        res = self._create()
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["total_amount"], "472.00")
        self.assertEqual(res.data["status"], "draft")
        invoice_id = res.data["id"]

        res = self.client.post(reverse("sales-invoice-post", args=[invoice_id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "posted")
        self.assertEqual(res.data["voucher_number"], "JV-2025-0001")

        again = self.client.post(reverse("sales-invoice-post", args=[invoice_id]))
        self.assertEqual(again.status_code, 409)

        res = self.client.post(
            reverse("sales-invoice-cancel", args=[invoice_id]),
            {"reason": "Duplicate invoice"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "cancelled")
        self.assertEqual(Voucher.objects.get().status, Voucher.STATUS_VOID)

    def test_document_voucher_void_is_conflict_and_cancel_still_works(self):
        invoice_id = self._create().data["id"]
        self.client.post(reverse("sales-invoice-post", args=[invoice_id]))
        voucher = Voucher.objects.get()

        res = self.client.post(
            reverse("voucher-void", args=[voucher.pk]),
            {"reason": "Voiding behind the invoice"},
            format="json",
        )
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "DocumentVoucherError")
        voucher.refresh_from_db()
        self.assertEqual(voucher.status, Voucher.STATUS_POSTED)

        long_reason = self.client.post(
            reverse("sales-invoice-cancel", args=[invoice_id]),
            {"reason": "x" * 501},
            format="json",
        )
        self.assertEqual(long_reason.status_code, 400)
        self.assertEqual(SalesInvoice.objects.get(pk=invoice_id).status, "posted")

        res = self.client.post(
            reverse("sales-invoice-cancel", args=[invoice_id]),
            {"reason": "Duplicate invoice"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        voucher.refresh_from_db()
        self.assertEqual(voucher.status, Voucher.STATUS_VOID)

    def test_duplicate_number_is_conflict(self):
        self.assertEqual(self._create().status_code, 201)
        self.assertEqual(self._create().status_code, 409)

    def test_invalid_totals_are_400(self):
        res = self._create(total_discount="500.00")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "InvalidDocumentError")

    def test_edit_and_delete_draft(self):
        invoice_id = self._create().data["id"]
        url = reverse("sales-invoice-detail", args=[invoice_id])

        res = self.client.patch(url, {"customer_name": "Gamma Pharma Pvt"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["customer_name"], "Gamma Pharma Pvt")

        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertFalse(SalesInvoice.objects.exists())

    def test_list_filters_by_status_and_organization(self):
        self._create("INV-1")
        posted_id = self._create("INV-2").data["id"]
        self.client.post(reverse("sales-invoice-post", args=[posted_id]))

        res = self.client.get(reverse("sales-invoice-list"), {"status": "posted"})
        self.assertEqual(res.data["count"], 1)

        self.client.credentials(HTTP_X_ORGANIZATION_ID=OTHER_ORG)
        self.assertEqual(self.client.get(reverse("sales-invoice-list")).data["count"], 0)
        self.assertEqual(
            self.client.get(reverse("sales-invoice-detail", args=[posted_id])).status_code,
            404,
        )


class WalkInSaleApiTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", superuser=True)
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)
        self.client.credentials(HTTP_X_ORGANIZATION_ID=ORG)

    def test_create_and_post(self):
        res = self.client.post(
            reverse("walk-in-sale-list"),
            {"sale_number": "WS-77", "sale_date": "2025-06-02", "subtotal": "50.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)

        res = self.client.post(reverse("walk-in-sale-post", args=[res.data["id"]]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["voucher_number"], "RV-2025-0001")


class SalesPermissionTests(TestCase):
    """
    GUARANTEES:
    - Posting a document also needs accounting.post_voucher
    - Cancelling a posted document also needs accounting.void_voucher
    """

    def setUp(self):
        self.user = make_user("cashier")
        self.user.user_permissions.add(
            *Permission.objects.filter(
                content_type__app_label="sales",
                codename__in=["view_salesinvoice", "add_salesinvoice", "change_salesinvoice"],
            )
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.client.credentials(HTTP_X_ORGANIZATION_ID=ORG)

        res = self.client.post(
            reverse("sales-invoice-list"),
            {"invoice_number": "INV-P1", "customer_name": "Delta", "subtotal": "10.00"},
            format="json",
        )
        self.invoice_id = res.data["id"]

    def test_post_requires_post_voucher(self):
        res = self.client.post(reverse("sales-invoice-post", args=[self.invoice_id]))
        self.assertEqual(res.status_code, 403)

    def test_cancel_posted_requires_void_voucher(self):
        self.user.user_permissions.add(
            Permission.objects.get(content_type__app_label="accounting", codename="post_voucher")
        )
        # Permission cache is per user instance.
        self.user = type(self.user).objects.get(pk=self.user.pk)
        self.client.force_authenticate(user=self.user)

        self.assertEqual(self.client.post(reverse("sales-invoice-post", args=[self.invoice_id])).status_code, 200)

        res = self.client.post(
            reverse("sales-invoice-cancel", args=[self.invoice_id]),
            {"reason": "Customer changed mind"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

    def test_delete_needs_delete_permission(self):
        res = self.client.delete(reverse("sales-invoice-detail", args=[self.invoice_id]))
        self.assertEqual(res.status_code, 403)

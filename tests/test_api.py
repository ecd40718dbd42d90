"""HTTP surface: status codes, error envelope and response shapes."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

TODAY = date.today()


def _pay(api, invoice_id, headers, amount="100.00", **overrides):
    body = {"amount": amount, "date": TODAY.isoformat(), "method": "bank_transfer"}
    body.update(overrides)
    return api.post(f"/api/invoices/{invoice_id}/payments", json=body, headers=headers)


class TestRecordPaymentEndpoint:

    def test_created_with_recomputed_invoice(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("1000.00")
        response = _pay(api, invoice_id, employee_headers, "400.00", reference="TRX-9")

        assert response.status_code == 201
        body = response.json()
        assert isinstance(body["payment_id"], int)
        invoice = body["invoice"]
        assert invoice["id"] == invoice_id
        assert Decimal(invoice["paid_amount"]) == Decimal("400.00")
        assert Decimal(invoice["balance_amount"]) == Decimal("600.00")
        assert invoice["status"] == "partially_paid"
        assert invoice["client_name"] == "Acme Trading"
        assert response.headers["X-Request-ID"]

        payment = api.get(f"/api/payments/{body['payment_id']}", headers=employee_headers).json()
        assert payment["payment_reference"] == "TRX-9"
        assert payment["payment_method"] == "bank_transfer"
        assert payment["invoice_number"] == invoice["invoice_number"]

    def test_overpayment_conflict(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("50.00")
        response = _pay(api, invoice_id, employee_headers, "75.00")

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "AMOUNT_EXCEEDS_BALANCE"
        assert error["details"]["balance"] == "50.00"

        balance = api.get(f"/api/invoices/{invoice_id}/balance", headers=employee_headers).json()
        assert balance["balance_amount"] == "50.00"
        assert balance["status"] == "sent"

    def test_already_paid_conflict(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("100.00")
        assert _pay(api, invoice_id, employee_headers, "100.00").status_code == 201

        response = _pay(api, invoice_id, employee_headers, "1.00")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVOICE_ALREADY_PAID"

    def test_cancelled_conflict(self, api, committed_invoice, employee_headers, admin_headers):
        invoice_id = committed_invoice("100.00")
        assert api.patch(f"/api/invoices/{invoice_id}/cancel", headers=admin_headers).status_code == 200

        response = _pay(api, invoice_id, employee_headers, "10.00")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVOICE_CANCELLED"

    def test_unknown_invoice(self, api, employee_headers):
        response = _pay(api, 98765, employee_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "INVOICE_NOT_FOUND"

    @pytest.mark.parametrize(
        "overrides, code",
        [
            ({"amount": "-5.00"}, "INVALID_AMOUNT"),
            ({"amount": "0"}, "INVALID_AMOUNT"),
            ({"amount": "10.001"}, "INVALID_AMOUNT"),
            ({"method": "barter"}, "INVALID_METHOD"),
            ({"date": (TODAY + timedelta(days=2)).isoformat()}, "PAYMENT_DATE_IN_FUTURE"),
            ({"date": "not-a-date"}, "VALIDATION_ERROR"),
            ({"amount": "lots"}, "VALIDATION_ERROR"),
        ],
    )
    def test_validation_errors(self, api, committed_invoice, employee_headers, overrides, code):
        invoice_id = committed_invoice("100.00")
        overrides = dict(overrides)
        amount = overrides.pop("amount", "10.00")
        response = _pay(api, invoice_id, employee_headers, amount, **overrides)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == code
        balance = api.get(f"/api/invoices/{invoice_id}/balance", headers=employee_headers).json()
        assert balance["paid_amount"] == "0.00"

    def test_missing_fields(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice()
        response = api.post(
            f"/api/invoices/{invoice_id}/payments", json={"amount": "10.00"}, headers=employee_headers
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        fields = {e["field"] for e in error["details"]["errors"]}
        assert {"date", "method"} <= fields


class TestInvoiceEndpoints:

    def _create(self, api, headers, client_id, **overrides):
        body = {
            "client_id": client_id,
            "invoice_date": (TODAY - timedelta(days=30)).isoformat(),
            "due_date": (TODAY - timedelta(days=1)).isoformat(),
            "status": "sent",
            "items": [{"description": "Audit", "quantity": "1", "unit_price": "200.00"}],
        }
        body.update(overrides)
        return api.post("/api/invoices", json=body, headers=headers)

    def test_create_and_read_overdue(self, api, seed, employee_headers):
        response = self._create(api, employee_headers, seed.client_id)
        assert response.status_code == 201
        created = response.json()
        assert created["invoice_number"].startswith("INV-")
        assert created["status"] == "overdue"
        assert created["is_overdue"] is True

        listed = api.get("/api/invoices", params={"status": "overdue"}, headers=employee_headers).json()
        assert [i["id"] for i in listed["invoices"]] == [created["id"]]
        assert listed["total"] == 1

        paid = _pay(api, created["id"], employee_headers, "200.00").json()
        assert paid["invoice"]["status"] == "paid"
        assert paid["invoice"]["is_overdue"] is False

    def test_create_for_inactive_client(self, api, seed, employee_headers):
        response = self._create(api, employee_headers, seed.inactive_client_id)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CLIENT_INACTIVE"

    def test_create_for_unknown_client(self, api, employee_headers):
        response = self._create(api, employee_headers, 424242)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CLIENT_NOT_FOUND"

    def test_update_below_paid_conflict(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("300.00")
        _pay(api, invoice_id, employee_headers, "250.00")

        response = api.put(
            f"/api/invoices/{invoice_id}",
            json={"items": [{"description": "Smaller", "quantity": "1", "unit_price": "200.00"}]},
            headers=employee_headers,
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TOTAL_BELOW_PAID"

    def test_send_draft(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice(status="draft")
        response = api.patch(f"/api/invoices/{invoice_id}/send", headers=employee_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "sent"

        again = api.patch(f"/api/invoices/{invoice_id}/send", headers=employee_headers)
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"

    def test_delete_guarded_by_payments(self, api, committed_invoice, employee_headers, admin_headers):
        invoice_id = committed_invoice("100.00")
        _pay(api, invoice_id, employee_headers, "10.00")

        refused = api.delete(f"/api/invoices/{invoice_id}", headers=admin_headers)
        assert refused.status_code == 409
        assert refused.json()["error"]["code"] == "INVOICE_HAS_PAYMENTS"

        purged = api.delete(f"/api/invoices/{invoice_id}", params={"purge_payments": True}, headers=admin_headers)
        assert purged.status_code == 204
        assert api.get(f"/api/invoices/{invoice_id}", headers=admin_headers).status_code == 404

    def test_invoice_payments_listing(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("300.00")
        for amount in ("100.00", "50.00"):
            _pay(api, invoice_id, employee_headers, amount)

        body = api.get(f"/api/invoices/{invoice_id}/payments", headers=employee_headers).json()
        assert body["total"] == 2
        assert {p["payment_amount"] for p in body["payments"]} == {"100.00", "50.00"}


class TestLedgerAdministration:

    def test_recompute_and_reconcile(self, api, committed_invoice, employee_headers, admin_headers):
        invoice_id = committed_invoice("300.00")
        _pay(api, invoice_id, employee_headers, "100.00")

        report = api.get(f"/api/invoices/{invoice_id}/reconcile", headers=admin_headers).json()
        assert report["consistent"] is True
        assert report["payments_total"] == "100.00"

        recomputed = api.post(f"/api/invoices/{invoice_id}/recompute", headers=admin_headers).json()
        assert recomputed["balance_amount"] == "200.00"

        ledger = api.get("/api/invoices/ledger/reconcile", headers=admin_headers).json()
        assert ledger == {"consistent": True, "checked": 1, "discrepancies": []}

    def test_delete_unknown_payment(self, api, admin_headers):
        response = api.delete("/api/payments/5150", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PAYMENT_NOT_FOUND"


class TestPaymentsAndClients:

    def test_payment_search_and_filters(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("500.00")
        _pay(api, invoice_id, employee_headers, "10.00", reference="WIRE-777")
        _pay(api, invoice_id, employee_headers, "20.00", method="cash")

        by_ref = api.get("/api/payments", params={"search": "wire-777"}, headers=employee_headers).json()
        assert by_ref["total"] == 1
        assert by_ref["payments"][0]["payment_reference"] == "WIRE-777"

        by_client = api.get("/api/payments", params={"search": "acme"}, headers=employee_headers).json()
        assert by_client["total"] == 2

        by_method = api.get("/api/payments", params={"method": "cash"}, headers=employee_headers).json()
        assert by_method["total"] == 1

        bad_method = api.get("/api/payments", params={"method": "gold"}, headers=employee_headers)
        assert bad_method.status_code == 400

    def test_client_lifecycle(self, api, employee_headers, admin_headers):
        created = api.post("/api/clients", json={"company_name": "Umbrella"}, headers=employee_headers)
        assert created.status_code == 201
        client_id = created.json()["id"]

        summary = api.get(f"/api/clients/{client_id}/summary", headers=employee_headers).json()
        assert summary["invoice_count"] == 0
        assert summary["outstanding"] == "0.00"

        assert api.patch(f"/api/clients/{client_id}/deactivate", headers=employee_headers).status_code == 403
        deactivated = api.patch(f"/api/clients/{client_id}/deactivate", headers=admin_headers)
        assert deactivated.json()["is_active"] is False

    def test_unknown_client(self, api, employee_headers):
        response = api.get("/api/clients/999", headers=employee_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CLIENT_NOT_FOUND"


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

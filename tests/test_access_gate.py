"""Authentication and role checks in front of the ledger."""
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

from jose import jwt

from conftest import ADMIN_PASSWORD, EMPLOYEE_PASSWORD, token_for
from security import create_access_token, decode_access_token


def _payment_body(amount="100.00"):
    return {"amount": amount, "date": date.today().isoformat(), "method": "cash"}


def _balance(api, invoice_id, headers):
    return api.get(f"/api/invoices/{invoice_id}/balance", headers=headers).json()["balance_amount"]


class TestAuthentication:

    def test_missing_token(self, api, committed_invoice, admin_headers):
        invoice_id = committed_invoice("500.00")
        response = api.post(f"/api/invoices/{invoice_id}/payments", json=_payment_body())

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert _balance(api, invoice_id, admin_headers) == "500.00"

    def test_malformed_token(self, api, committed_invoice):
        invoice_id = committed_invoice()
        response = api.post(
            f"/api/invoices/{invoice_id}/payments",
            json=_payment_body(),
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_wrong_scheme(self, api, committed_invoice):
        invoice_id = committed_invoice()
        response = api.get(f"/api/invoices/{invoice_id}", headers={"Authorization": "Basic YWRtaW46YWRtaW4="})
        assert response.status_code == 401

    def test_expired_token(self, api, seed, committed_invoice):
        invoice_id = committed_invoice()
        token = create_access_token(
            SimpleNamespace(id=seed.admin_id, username="admin", role="admin"), expires_minutes=-5
        )
        response = api.get(f"/api/invoices/{invoice_id}", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_signed_with_other_key(self, api, seed, committed_invoice):
        invoice_id = committed_invoice()
        forged = jwt.encode(
            {
                "sub": str(seed.admin_id),
                "username": "admin",
                "role": "admin",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            },
            "some-other-secret",
            algorithm="HS256",
        )
        response = api.post(
            f"/api/invoices/{invoice_id}/payments",
            json=_payment_body(),
            headers={"Authorization": f"Bearer {forged}"},
        )
        assert response.status_code == 401

    def test_deactivated_user_token_refused(self, api, seed, committed_invoice, admin_headers):
        invoice_id = committed_invoice("500.00")
        headers = {"Authorization": f"Bearer {token_for(seed.disabled_id, 'former', 'employee')}"}
        response = api.post(
            f"/api/invoices/{invoice_id}/payments", json=_payment_body("10.00"), headers=headers
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert _balance(api, invoice_id, admin_headers) == "500.00"

    def test_unknown_user_token_refused(self, api, committed_invoice, admin_headers):
        invoice_id = committed_invoice("500.00")
        headers = {"Authorization": f"Bearer {token_for(99999, 'ghost', 'admin')}"}
        response = api.post(
            f"/api/invoices/{invoice_id}/payments", json=_payment_body("10.00"), headers=headers
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert _balance(api, invoice_id, admin_headers) == "500.00"

    def test_token_round_trip(self, seed):
        token = token_for(seed.employee_id, "clerk", "employee")
        claims = decode_access_token(token)
        assert claims["sub"] == str(seed.employee_id)
        assert claims["role"] == "employee"


class TestRoles:

    def test_employee_records_payment(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice("500.00")
        response = api.post(
            f"/api/invoices/{invoice_id}/payments", json=_payment_body("100.00"), headers=employee_headers
        )
        assert response.status_code == 201

    def test_role_claim_is_not_trusted(self, api, seed, committed_invoice, admin_headers):
        invoice_id = committed_invoice("500.00")
        headers = {"Authorization": f"Bearer {token_for(seed.employee_id, 'clerk', 'admin')}"}

        response = api.patch(f"/api/invoices/{invoice_id}/cancel", headers=headers)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        assert api.get("/api/auth/me", headers=headers).json()["role"] == "employee"
        assert api.get(f"/api/invoices/{invoice_id}", headers=admin_headers).json()["status"] == "sent"

    def test_employee_cannot_delete_payment(self, api, committed_invoice, employee_headers, admin_headers):
        invoice_id = committed_invoice("500.00")
        created = api.post(
            f"/api/invoices/{invoice_id}/payments", json=_payment_body("100.00"), headers=employee_headers
        ).json()

        denied = api.delete(f"/api/payments/{created['payment_id']}", headers=employee_headers)
        assert denied.status_code == 403

        allowed = api.delete(f"/api/payments/{created['payment_id']}", headers=admin_headers)
        assert allowed.status_code == 200
        assert allowed.json()["balance_amount"] == "500.00"

    def test_admin_only_routes(self, api, committed_invoice, employee_headers):
        invoice_id = committed_invoice()
        assert api.patch(f"/api/invoices/{invoice_id}/cancel", headers=employee_headers).status_code == 403
        assert api.delete(f"/api/invoices/{invoice_id}", headers=employee_headers).status_code == 403
        assert api.post(f"/api/invoices/{invoice_id}/recompute", headers=employee_headers).status_code == 403
        assert api.get(f"/api/invoices/{invoice_id}/reconcile", headers=employee_headers).status_code == 403
        assert api.get("/api/invoices/ledger/reconcile", headers=employee_headers).status_code == 403


class TestLogin:

    def test_login_with_username(self, api):
        response = api.post("/api/auth/login", json={"login": "admin", "password": ADMIN_PASSWORD})
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["role"] == "admin"

        me = api.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["username"] == "admin"

    def test_login_with_email(self, api):
        response = api.post("/api/auth/login", json={"login": "clerk@example.com", "password": EMPLOYEE_PASSWORD})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "employee"

    def test_wrong_password(self, api):
        response = api.post("/api/auth/login", json={"login": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_inactive_user_refused(self, api):
        response = api.post("/api/auth/login", json={"login": "former", "password": EMPLOYEE_PASSWORD})
        assert response.status_code == 401

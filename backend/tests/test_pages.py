"""Tests for the data-bearing page routes."""

import httpx
import pytest

from tests.conftest import COMPANY, USER_EMAIL, make_invoice

PROVIDERS = [
    {
        "rfc": "TNO010101AB1",
        "nombre": "Textiles del Norte",
        "email": "ventas@textilesnorte.com",
        "moneda": "MXN",
        "total_mxn": "487250.00",
        "total_usd": "0",
        "status": "activo",
        "clave": "P-001",
    },
    {
        "rfc": "ACM020202CD2",
        "nombre": "Aceros MX",
        "email": "pagos@acerosmx.com",
        "status": "pendiente",
    },
    {
        "rfc": "MEB030303EF3",
        "nombre": "Metales del Bajío",
        "email": "contacto@metalicas.com",
        "status": "suspendido",
    },
]

BALANCES = [
    {"currency": "MXN", "total_balance": "487250.00", "pending_balance": "150750.50",
     "paid_balance": "336499.50", "invoice_count": 40},
    {"currency": "USD", "total_balance": "24500.75", "invoice_count": 7},
]


@pytest.fixture
def invoices_payload():
    return {
        "invoices": [
            make_invoice("inv1", "25500.00", status="paid", nombre_emisor="Algodón Industrial"),
            make_invoice("inv2", "150750.50", nombre_emisor="Aceros y Metales"),
            make_invoice("inv3", "not-a-number", nombre_emisor="Plásticos"),
            make_invoice("inv4", "100", nombre_emisor="Componentes"),
        ]
    }


class TestDashboard:
    def test_metrics(self, auth_client, backend, invoices_payload):
        backend.set("GET", "/api/invoices", invoices_payload)
        backend.set("GET", "/api/vendors", PROVIDERS)
        backend.set("GET", "/api/invoices/balances", BALANCES)

        response = auth_client.get("/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["error"] is None
        metrics = data["metrics"]
        assert metrics["total_revenue"] == "176350.50"
        assert metrics["total_invoices"] == 4
        assert metrics["active_providers"] == 1
        assert [b["currency"] for b in metrics["balances"]] == ["MXN", "USD"]
        assert metrics["balances"][1]["pending_balance"] == "0"
        assert [a["description"] for a in metrics["recent_activity"]] == [
            "Nueva factura recibida de Algodón Industrial",
            "Nueva factura recibida de Aceros y Metales",
            "Nueva factura recibida de Plásticos",
        ]

    def test_backend_failure_shows_error(self, auth_client, backend):
        backend.fail("GET", "/api/invoices", httpx.ReadTimeout("slow"))
        data = auth_client.get("/dashboard").json()
        assert data["metrics"] is None
        assert data["error"].startswith("Error al cargar los datos del dashboard")


class TestInvoices:
    def test_lists_invoices(self, auth_client, backend, invoices_payload):
        backend.set("GET", "/api/invoices", invoices_payload)

        data = auth_client.get("/invoices").json()

        assert data["error"] is None
        first = data["invoices"][0]
        assert first["issuer_name"] == "Algodón Industrial"
        assert first["payment_conditions"] == "30 días"
        assert first["invoice_date"] == "2024-01-15"
        assert first["currency"] == "MXN"
        assert data["invoices"][2]["total"] == "0"

    def test_lists_invoices_in_other_currencies(self, auth_client, backend):
        backend.set("GET", "/api/invoices", {"invoices": [make_invoice("u1", "100", moneda="EUR")]})

        response = auth_client.get("/invoices")

        assert response.status_code == 200
        assert response.json()["invoices"][0]["currency"] == "EUR"

    def test_forwards_filters(self, auth_client, backend):
        backend.set("GET", "/api/invoices", {"invoices": []})
        auth_client.get(
            "/invoices",
            params={"company": COMPANY, "status": "pending", "date": "2024-01-15", "date_sort": "desc"},
        )
        params = backend.calls("GET", "/api/invoices")[0].url.params
        assert params["company"] == COMPANY
        assert params["status"] == "pending"
        assert params["date"] == "2024-01-15"
        assert params["date_sort"] == "desc"
        assert "user" not in params

    def test_invalid_sort_is_422(self, auth_client, backend):
        assert auth_client.get("/invoices", params={"date_sort": "sideways"}).status_code == 422

    def test_backend_failure_shows_error(self, auth_client, backend):
        backend.set("GET", "/api/invoices", None, status=500)
        data = auth_client.get("/invoices").json()
        assert data["invoices"] == []
        assert data["error"] == "Error al cargar facturas. Por favor intenta de nuevo más tarde."

    def test_get_invoice_with_complements(self, auth_client, backend):
        invoice = make_invoice(
            "inv9",
            "1160.00",
            complementos=[
                {"tipo_documento": "pago", "total": "500.00", "fecha": "2024-02-01", "referencia": "SPEI"},
                {"tipo_documento": "nota", "total": "60", "folio": "NC-1", "moneda": "MXN"},
                {"tipo_documento": "desconocido", "entry_date": "2024-02-03"},
            ],
        )
        backend.set("GET", "/api/invoices/inv9", invoice)

        data = auth_client.get("/invoices/inv9").json()

        assert [c["kind"] for c in data["complements"]] == ["payment", "credit_note", "generic"]
        assert data["complements"][0]["reference"] == "SPEI"
        assert data["complements"][1]["total"] == "60"

    def test_get_missing_invoice_is_404(self, auth_client, backend):
        response = auth_client.get("/invoices/nope")
        assert response.status_code == 404
        assert response.json()["detail"] == "Factura no encontrada"

    def test_delete_invoice(self, auth_client, backend):
        backend.set("DELETE", "/api/invoices/inv1", {"message": "deleted"})
        response = auth_client.delete("/invoices/inv1")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "deleted"}

    def test_delete_forbidden_propagates(self, auth_client, backend):
        backend.set("DELETE", "/api/invoices/inv1", None, status=403)
        response = auth_client.delete("/invoices/inv1")
        assert response.status_code == 403
        assert response.json() == {"detail": "Acceso denegado", "code": "FORBIDDEN"}


class TestProviders:
    def test_lists_and_normalises(self, auth_client, backend):
        backend.set("GET", "/api/vendors", PROVIDERS)

        data = auth_client.get("/providers").json()

        assert [p["status"] for p in data["providers"]] == ["activo", "pendiente", "revisar"]
        assert data["providers"][0]["name"] == "Textiles del Norte"
        assert data["providers"][0]["mxn_total"] == "487250.00"

    @pytest.mark.parametrize(
        ("term", "expected"),
        [("aceros", ["ACM020202CD2"]), ("meb03", ["MEB030303EF3"]), ("@textilesnorte", ["TNO010101AB1"])],
    )
    def test_search(self, auth_client, backend, term, expected):
        backend.set("GET", "/api/vendors", PROVIDERS)
        data = auth_client.get("/providers", params={"search": term}).json()
        assert [p["rfc"] for p in data["providers"]] == expected

    def test_backend_failure_shows_error(self, auth_client, backend):
        backend.set("GET", "/api/vendors", None, status=502)
        data = auth_client.get("/providers").json()
        assert data["providers"] == []
        assert data["error"].startswith("Error al cargar proveedores")


class TestReports:
    def test_returns_current_user(self, auth_client):
        data = auth_client.get("/reports").json()
        assert data["user"]["user"] == USER_EMAIL
        assert data["user"]["company"] == COMPANY


class TestUsers:
    def test_lists_users(self, auth_client, backend):
        backend.set(
            "GET",
            "/api/users",
            {"users": [{"id": "1", "name": "Ana García López", "email": USER_EMAIL, "role": "vendor"}]},
        )
        data = auth_client.get("/users").json()
        assert data["users"][0]["name"] == "Ana García López"
        assert data["error"] is None

    def test_backend_failure_shows_error(self, auth_client, backend):
        backend.fail("GET", "/api/users", httpx.ConnectError("refused"))
        data = auth_client.get("/users").json()
        assert data["users"] == []
        assert data["error"]

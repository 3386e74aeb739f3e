"""
Tests for the stock ledger API endpoints.

These test the HTTP layer: status codes, response format,
and error translation. Ledger rules are tested in
tests/services.
"""


def receive(client, *lines):
    return client.post("/api/stock", json={
        "items": [
            {"description": d, "qty": q, "unit": u} for d, q, u in lines
        ],
    })


def deduct(client, *lines):
    return client.post("/api/stock/deduct", json={
        "items": [
            {"description": d, "qty": q, "unit": u} for d, q, u in lines
        ],
    })


class TestGetStock:

    def test_empty_ledger(self, client):
        response = client.get("/api/stock")
        assert response.status_code == 200
        assert response.json() == {"items": []}

    def test_ledger_is_newest_first(self, client):
        receive(client, ("Cement", 100, "bags"))
        deduct(client, ("Cement", 30, "bags"))

        items = client.get("/api/stock").json()["items"]
        assert [i["qty"] for i in items] == [-30.0, 100.0]
        assert [i["kind"] for i in items] == ["ISSUE", "RECEIPT"]


class TestReceiveStock:

    def test_receipt_returns_ledger_and_balances(self, client):
        response = client.post("/api/stock", json={
            "items": [{
                "description": "TMT Bar",
                "qty": 5,
                "unit": "ton",
                "date": "2026-02-10",
                "item_code": "TMT-16",
            }],
        })

        assert response.status_code == 200
        data = response.json()
        entry = data["items"][0]
        assert entry["id"].startswith("stock_")
        assert entry["description"] == "TMT Bar"
        assert entry["qty"] == 5.0
        assert entry["unit"] == "ton"
        assert entry["date"] == "2026-02-10"
        assert entry["item_code"] == "TMT-16"
        assert data["balances"] == [
            {"description": "TMT Bar", "unit": "ton", "quantity": 5.0}
        ]

    def test_blank_date_defaults_to_today(self, client):
        response = client.post("/api/stock", json={
            "items": [{"description": "Sand", "qty": 2, "unit": "m3", "date": ""}],
        })

        entry = response.json()["items"][0]
        assert entry["date"] == entry["created_at"][:10]

    def test_items_not_a_list_returns_400(self, client):
        response = client.post("/api/stock", json={"items": "cement"})

        assert response.status_code == 400
        assert "items" in response.json()["error"]

    def test_missing_body_returns_400(self, client):
        response = client.post("/api/stock", json={})
        assert response.status_code == 400

    def test_zero_quantity_returns_400(self, client):
        response = receive(client, ("Cement", 0, "bags"))

        assert response.status_code == 400
        assert "greater than zero" in response.json()["error"]

    def test_quantity_finer_than_ledger_returns_400(self, client):
        response = receive(client, ("Cement", "0.00001", "bags"))

        assert response.status_code == 400
        assert "4 decimal places" in response.json()["error"]
        assert client.get("/api/stock").json()["items"] == []

    def test_four_decimal_places_read_back_unchanged(self, client):
        receive(client, ("Cement", "0.0005", "bags"))

        response = client.get(
            "/api/stock/balance", params={"description": "Cement", "unit": "bags"}
        )
        assert response.json()["quantity"] == 0.0005


class TestDeductStock:

    def test_deduct_returns_updated_balance(self, client):
        receive(client, ("Cement", 100, "bags"))

        response = deduct(client, ("Cement", 40, "bags"))

        assert response.status_code == 200
        assert response.json()["balances"] == [
            {"description": "Cement", "unit": "bags", "quantity": 60.0}
        ]

    def test_tmt_bar_scenario(self, client):
        receive(client, ("TMT Bar", 5, "ton"))

        assert deduct(client, ("TMT Bar", 3, "ton")).status_code == 200

        response = deduct(client, ("TMT Bar", 3, "ton"))
        assert response.status_code == 400
        assert response.json() == {
            "error": "Insufficient stock for TMT Bar (ton). "
                     "Available 2. Requested 3."
        }

        balance = client.get(
            "/api/stock/balance",
            params={"description": "TMT Bar", "unit": "ton"},
        ).json()
        assert balance["quantity"] == 2.0

    def test_combined_lines_rejected(self, client):
        receive(client, ("Cement", 10, "bags"))

        response = deduct(client, ("Cement", 6, "bags"), ("Cement", 6, "bags"))

        assert response.status_code == 400
        assert len(client.get("/api/stock").json()["items"]) == 1

    def test_missing_unit_returns_400(self, client):
        receive(client, ("Cement", 10, "bags"))

        response = deduct(client, ("Cement", 1, ""))

        assert response.status_code == 400
        assert "unit is required" in response.json()["error"]

    def test_items_not_a_list_returns_400(self, client):
        response = client.post("/api/stock/deduct", json={"items": {"a": 1}})
        assert response.status_code == 400


class TestBalances:

    def test_all_balances_sorted_by_key(self, client):
        receive(client, ("Sand", 4, "m3"), ("Cement", 50, "kg"))
        receive(client, ("Cement", 20, "bags"))

        response = client.get("/api/stock/balances")

        assert response.status_code == 200
        assert response.json()["balances"] == [
            {"description": "Cement", "unit": "bags", "quantity": 20.0},
            {"description": "Cement", "unit": "kg", "quantity": 50.0},
            {"description": "Sand", "unit": "m3", "quantity": 4.0},
        ]

    def test_unknown_key_is_zero(self, client):
        response = client.get(
            "/api/stock/balance",
            params={"description": "Plywood", "unit": "nos"},
        )
        assert response.status_code == 200
        assert response.json()["quantity"] == 0.0

    def test_balance_requires_description(self, client):
        response = client.get("/api/stock/balance", params={"unit": "nos"})
        assert response.status_code == 400

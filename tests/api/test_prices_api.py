"""Tests for /api/product-prices routes."""

from datetime import date

from core.exceptions import (
    NotFoundError,
    InvalidReferenceError,
    OverlappingIntervalError,
    InvalidPriceRangeError,
)
from core.models import PriceInterval, PriceIntervalView
from row_factories import price_row


def view(id=1, effective_date=date(2024, 1, 1), to_date=None, unit_price="50.00"):
    return PriceIntervalView.model_validate(price_row(
        id, effective_date, to_date, unit_price, product_name="Cement", product_code="CEMENT"
    ))


class TestListPrices:
    """GET /api/product-prices"""

    def test_returns_envelope(self, client, price_service):
        price_service.list_prices.return_value = [view(2, date(2024, 7, 1)), view(1)]

        response = client.get("/api/product-prices")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["id"] for p in body["data"]] == [2, 1]
        assert body["data"][0]["product_code"] == "CEMENT"
        assert body["data"][0]["unit_price"] == "50.00"
        assert body["meta"]["request_id"] == response.headers["X-Request-ID"]


class TestActivePrice:
    """GET /api/product-prices/active/{product_id}"""

    def test_resolves_for_date(self, client, price_service):
        price_service.resolve_active_price.return_value = view()

        response = client.get("/api/product-prices/active/1", params={"date": "2024-05-15"})

        assert response.status_code == 200
        assert response.json()["data"]["unit_price"] == "50.00"
        price_service.resolve_active_price.assert_called_once_with(1, date(2024, 5, 15))

    def test_date_defaults_to_service(self, client, price_service):
        price_service.resolve_active_price.return_value = view()

        client.get("/api/product-prices/active/1")

        price_service.resolve_active_price.assert_called_once_with(1, None)

    def test_no_active_price_is_404(self, client, price_service):
        price_service.resolve_active_price.return_value = None

        response = client.get("/api/product-prices/active/1", params={"date": "2023-12-01"})

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["error"]["message"] == "No active price found for this product on the specified date"

    def test_bad_date_is_validation_error(self, client, price_service):
        response = client.get("/api/product-prices/active/1", params={"date": "15/05/2024"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        price_service.resolve_active_price.assert_not_called()


class TestUpsertPrice:
    """POST /api/product-prices"""

    payload = {"product_id": 1, "effective_date": "2024-07-01", "unit_price": "55.00"}

    def test_created(self, client, price_service):
        price_service.upsert_price.return_value = (
            PriceInterval.model_validate(price_row(2, date(2024, 7, 1), None, "55.00")),
            True,
        )

        response = client.post("/api/product-prices", json=self.payload)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == 2
        assert data["to_date"] is None
        assert data["created"] is True

    def test_updated_in_place(self, client, price_service):
        price_service.upsert_price.return_value = (
            PriceInterval.model_validate(price_row(2, date(2024, 7, 1), None, "55.00")),
            False,
        )

        response = client.post("/api/product-prices", json=self.payload)

        assert response.json()["data"]["created"] is False

    def test_overlap_is_conflict(self, client, price_service):
        price_service.upsert_price.side_effect = OverlappingIntervalError(1, 2)

        response = client.post("/api/product-prices", json=self.payload)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "OVERLAPPING_INTERVAL"

    def test_unknown_product(self, client, price_service):
        price_service.upsert_price.side_effect = InvalidReferenceError("product", 99)

        response = client.post("/api/product-prices", json={**self.payload, "product_id": 99})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REFERENCE"

    def test_missing_field(self, client, price_service):
        response = client.post("/api/product-prices", json={"product_id": 1})

        assert response.status_code == 422
        price_service.upsert_price.assert_not_called()

    def test_inverted_range(self, client, price_service):
        response = client.post(
            "/api/product-prices",
            json={**self.payload, "to_date": "2024-06-01"},
        )

        assert response.status_code == 422
        assert "to_date cannot be before effective_date" in response.json()["error"]["message"]


class TestSinglePrice:
    """GET/PUT/DELETE /api/product-prices/{price_id}"""

    def test_get(self, client, price_service):
        price_service.get_by_id.return_value = view(7)

        response = client.get("/api/product-prices/7")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == 7

    def test_get_missing(self, client, price_service):
        price_service.get_by_id.return_value = None

        response = client.get("/api/product-prices/7")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Price 7 not found"

    def test_put_passes_partial_update(self, client, price_service):
        price_service.update_price.return_value = PriceInterval.model_validate(
            price_row(7, date(2024, 1, 1), None, "52.00")
        )

        response = client.put("/api/product-prices/7", json={"unit_price": "52.00"})

        assert response.status_code == 200
        price_id, update = price_service.update_price.call_args.args
        assert price_id == 7
        assert str(update.unit_price) == "52.00"
        assert update.to_date is None

    def test_put_missing(self, client, price_service):
        price_service.update_price.side_effect = NotFoundError("Price", 7)

        response = client.put("/api/product-prices/7", json={})

        assert response.status_code == 404

    def test_put_to_date_before_stored_start(self, client, price_service):
        price_service.update_price.side_effect = InvalidPriceRangeError(date(2024, 7, 1), date(2000, 1, 1))

        response = client.put("/api/product-prices/7", json={"to_date": "2000-01-01"})

        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert "before effective_date" in body["error"]["message"]

    def test_delete(self, client, price_service):
        price_service.delete_price.return_value = True

        response = client.delete("/api/product-prices/7")

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True}

    def test_delete_missing(self, client, price_service):
        price_service.delete_price.return_value = False

        response = client.delete("/api/product-prices/7")

        assert response.status_code == 404

"""Routes for the product price timeline."""

from datetime import date

from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

from api.base import success_response, error_response, ErrorCodes
from api.middleware import request_id_of
from core.exceptions import NotFoundError
from core.models import PriceUpsert, PriceUpdate


def create_prices_router(services: dict) -> APIRouter:
    router = APIRouter(prefix="/product-prices", tags=["prices"])

    price_svc = services["price"]

    @router.get("")
    def list_prices(request: Request):
        prices = price_svc.list_prices()
        return success_response(
            [p.model_dump(mode="json") for p in prices], request_id_of(request)
        ).model_dump(mode="json")

    @router.post("", status_code=201)
    def upsert_price(request: Request, body: PriceUpsert):
        price, created = price_svc.upsert_price(body)
        data = price.model_dump(mode="json")
        data["created"] = created
        return success_response(data, request_id_of(request)).model_dump(mode="json")

    @router.get("/active/{product_id}")
    def active_price(
        request: Request,
        product_id: int,
        as_of: date | None = Query(None, alias="date", description="YYYY-MM-DD, defaults to today"),
    ):
        price = price_svc.resolve_active_price(product_id, as_of)
        if price is None:
            return JSONResponse(
                status_code=404,
                content=error_response(
                    ErrorCodes.NOT_FOUND,
                    "No active price found for this product on the specified date",
                    request_id_of(request),
                ).model_dump(mode="json"),
            )
        return success_response(
            price.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    @router.get("/{price_id}")
    def get_price(request: Request, price_id: int):
        price = price_svc.get_by_id(price_id)
        if price is None:
            raise NotFoundError("Price", price_id)
        return success_response(
            price.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    @router.put("/{price_id}")
    def update_price(request: Request, price_id: int, body: PriceUpdate):
        price = price_svc.update_price(price_id, body)
        return success_response(
            price.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    @router.delete("/{price_id}")
    def delete_price(request: Request, price_id: int):
        if not price_svc.delete_price(price_id):
            raise NotFoundError("Price", price_id)
        return success_response({"deleted": True}, request_id_of(request)).model_dump(mode="json")

    return router

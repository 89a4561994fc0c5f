"""GET routes for reference data."""

from fastapi import APIRouter, Request

from api.base import success_response
from api.middleware import request_id_of


def create_registry_router(services: dict) -> APIRouter:
    router = APIRouter(tags=["registry"])

    registry_svc = services["registry"]

    @router.get("/products")
    def list_products(request: Request):
        products = registry_svc.list_products()
        return success_response(
            [p.model_dump(mode="json") for p in products], request_id_of(request)
        ).model_dump(mode="json")

    @router.get("/vendors")
    def list_vendors(request: Request):
        vendors = registry_svc.list_vendors()
        return success_response(
            [v.model_dump(mode="json") for v in vendors], request_id_of(request)
        ).model_dump(mode="json")

    @router.get("/vehicles")
    def list_vehicles(request: Request):
        vehicles = registry_svc.list_vehicles()
        return success_response(
            [v.model_dump(mode="json") for v in vehicles], request_id_of(request)
        ).model_dump(mode="json")

    return router

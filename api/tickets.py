"""Routes for the weigh ticket lifecycle."""

from fastapi import APIRouter, Request

from api.base import success_response
from api.middleware import request_id_of
from core.exceptions import NotFoundError
from core.models import TicketCreate, WeighOut, TicketApproval


def create_tickets_router(services: dict) -> APIRouter:
    router = APIRouter(prefix="/tickets", tags=["tickets"])

    ticket_svc = services["ticket"]

    @router.get("")
    def list_tickets(request: Request):
        tickets = ticket_svc.list_tickets()
        return success_response(
            [t.model_dump(mode="json") for t in tickets], request_id_of(request)
        ).model_dump(mode="json")

    @router.get("/{ticket_id}")
    def get_ticket(request: Request, ticket_id: int):
        ticket = ticket_svc.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket", ticket_id)
        return success_response(
            ticket.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    @router.post("", status_code=201)
    def create_ticket(request: Request, body: TicketCreate):
        ticket = ticket_svc.create(body)
        return success_response(
            ticket.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    @router.patch("/{ticket_id}/weigh-out")
    def record_weigh_out(request: Request, ticket_id: int, body: WeighOut):
        ticket = ticket_svc.record_weigh_out(ticket_id, body)
        return success_response(
            ticket.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    @router.patch("/{ticket_id}/approve")
    def approve_ticket(request: Request, ticket_id: int, body: TicketApproval | None = None):
        weight_out = body.weight_out if body else None
        ticket = ticket_svc.approve(ticket_id, weight_out)
        return success_response(
            ticket.model_dump(mode="json"), request_id_of(request)
        ).model_dump(mode="json")

    return router

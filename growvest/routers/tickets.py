from fastapi import APIRouter, Depends, status
from pydantic import Field

from growvest.core.pagination import page_response, paginate
from growvest.deps import get_current_user, parse_id, require_admin
from growvest.models.support_ticket import TicketStatus
from growvest.models.user import User
from growvest.serializers import CamelModel, ticket_out
from growvest.services import tickets as tickets_service

router = APIRouter()


class TicketCreate(CamelModel):
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)


class TicketReply(CamelModel):
    reply: str = Field(min_length=1)


class TicketStatusUpdate(CamelModel):
    status: TicketStatus


@router.post("", status_code=status.HTTP_201_CREATED)
async def ticket_create(body: TicketCreate, user: User = Depends(get_current_user)):
    ticket = await tickets_service.create_ticket(user, body.subject, body.message)
    return ticket_out(ticket)


@router.get("")
async def tickets_list(
    user: User = Depends(get_current_user),
    status: TicketStatus | None = None,
    limit: int = 50,
    offset: int = 0,
):
    """Own tickets; admins see all."""
    limit, offset = paginate(limit, offset)
    items, total = await tickets_service.list_tickets(user, limit, offset, status=status)
    return page_response([ticket_out(t) for t in items], limit, offset, total)


@router.get("/{ticket_id}")
async def ticket_get(ticket_id: str, user: User = Depends(get_current_user)):
    ticket = await tickets_service.get_ticket_for(user, parse_id(ticket_id, "Ticket"))
    return ticket_out(ticket)


@router.post("/{ticket_id}/reply")
async def ticket_reply(ticket_id: str, body: TicketReply, admin: User = Depends(require_admin)):
    """Admin: append a reply. An open ticket moves to in_progress."""
    ticket = await tickets_service.reply_to_ticket(parse_id(ticket_id, "Ticket"), admin, body.reply)
    return ticket_out(ticket)


@router.patch("/{ticket_id}/status")
async def ticket_status(ticket_id: str, body: TicketStatusUpdate, admin: User = Depends(require_admin)):
    ticket = await tickets_service.update_ticket_status(parse_id(ticket_id, "Ticket"), admin, body.status)
    return ticket_out(ticket)

"""Support desk routes."""

import logging

from fastapi import APIRouter, HTTPException, status

from edunexus.api.deps import CurrentAccount, StaffAccount, StoreDep
from edunexus.db.base import new_id
from edunexus.db.models import SupportTicket, TicketStatus
from edunexus.schemas.tickets import TicketCreate, TicketRead, TicketResolve

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.post("", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    data: TicketCreate,
    current_account: CurrentAccount,
    store: StoreDep,
) -> TicketRead:
    ticket = SupportTicket(
        id=new_id("req"),
        user_id=current_account.id,
        user_name=current_account.full_name,
        email=current_account.email,
        status=TicketStatus.OPEN.value,
        **data.model_dump(),
    )
    ticket = await store.tickets.create(ticket)
    return TicketRead.model_validate(ticket)


@router.get("/mine", response_model=list[TicketRead])
async def list_my_tickets(current_account: CurrentAccount, store: StoreDep) -> list[TicketRead]:
    tickets = await store.tickets.read_for_account(current_account.id)
    return [TicketRead.model_validate(t) for t in tickets]


@router.get("", response_model=list[TicketRead])
async def list_tickets(staff: StaffAccount, store: StoreDep) -> list[TicketRead]:
    """Every ticket, newest first. Staff only."""
    tickets = await store.tickets.read_all()
    return [TicketRead.model_validate(t) for t in tickets]


@router.post("/{ticket_id}/resolve", response_model=TicketRead)
async def resolve_ticket(
    ticket_id: str,
    data: TicketResolve,
    staff: StaffAccount,
    store: StoreDep,
) -> TicketRead:
    """
    Answer and close a ticket.

    A ticket is resolved once; a second resolve is a 409 and leaves the first
    reply in place.
    """
    ticket = await store.tickets.read(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    if ticket.status == TicketStatus.RESOLVED.value:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Ticket already resolved")

    ticket.status = TicketStatus.RESOLVED.value
    ticket.admin_reply = data.reply
    ticket = await store.tickets.update(ticket, expected_version=ticket.version)
    logger.info("Ticket %s resolved by %s", ticket.id, staff.id)
    return TicketRead.model_validate(ticket)

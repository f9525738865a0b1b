"""
api/routes/v1/contact.py -- Contact form intake.

Routes (mounted at /api/contact):
  POST /   -- public; store a contact message; 201
  GET  /   -- admin only; list stored messages, newest first

Messages are write-once. There is no update or delete route.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ContactCreate, ContactListResponse, ContactMessageOut, MessageResponse
from auth.dependencies import require_admin
from auth.models import TokenClaims
from contact.models import ContactMessage
from contact.store import ContactStore

# Auth policy:
# - POST /api/contact: public -- anyone can leave a message
# - GET  /api/contact: requires admin (require_admin)
router = APIRouter()


@router.post("", response_model=MessageResponse, status_code=201)
def submit_message(request: Request, body: ContactCreate) -> MessageResponse:
    contacts: ContactStore = request.app.state.contacts
    contacts.create_message(ContactMessage(name=body.name, email=body.email, message=body.message))
    return MessageResponse(message="Thank you for contacting us! We will get back to you soon.")


@router.get("", response_model=ContactListResponse)
def list_messages(
    request: Request,
    principal: TokenClaims = Depends(require_admin),
) -> ContactListResponse:
    contacts: ContactStore = request.app.state.contacts
    return ContactListResponse(messages=[ContactMessageOut.from_message(m) for m in contacts.list_messages()])

"""Contact / lead endpoints (/api/contacts)."""

from datetime import date

from src.models.contact import ContactCreate, ContactStatusUpdate
from src.services.contact_repository import ContactRepository
from src.services.slack_notifier import dispatch_notification
from src.utils.errors import InputValidationError, NotFoundError
from src.utils.http import ApiHandler, Request, Router, created, listing, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

router = Router()


def _date_arg(request: Request, name: str) -> date:
    value = request.arg(name)
    if not value:
        raise InputValidationError(f"Query parameter '{name}' is required")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InputValidationError(f"Query parameter '{name}' must be a date (YYYY-MM-DD)")


@router.add("GET", "/api/contacts")
def list_contacts(request: Request):
    return listing(ContactRepository().list_all())


@router.add("GET", "/api/contacts/stats")
def contact_stats(request: Request):
    return ok(ContactRepository().stats())


@router.add("GET", "/api/contacts/search")
def search_contacts(request: Request):
    term = (request.arg("q") or "").strip()
    if not term:
        raise InputValidationError("Query parameter 'q' is required")
    return listing(ContactRepository().search(term))


@router.add("GET", "/api/contacts/recent")
def recent_contacts(request: Request):
    return listing(ContactRepository().recent(limit=request.int_arg("limit", 10)))


@router.add("GET", "/api/contacts/range")
def contacts_in_range(request: Request):
    start, end = _date_arg(request, "start"), _date_arg(request, "end")
    return listing(ContactRepository().by_date_range(start, end))


@router.add("GET", "/api/contacts/status/{status}")
def contacts_by_status(request: Request):
    return listing(ContactRepository().list_by_status(request.params["status"]))


@router.add("GET", "/api/contacts/type/{contact_type}")
def contacts_by_type(request: Request):
    return listing(ContactRepository().list_by_type(request.params["contact_type"]))


@router.add("GET", "/api/contacts/{contact_id:int}")
def get_contact(request: Request):
    contact = ContactRepository().get_by_id(request.params["contact_id"])
    if contact is None:
        raise NotFoundError("Contact", request.params["contact_id"])
    return ok(contact)


@router.add("POST", "/api/contacts")
def create_contact(request: Request):
    contact = ContactRepository().create(ContactCreate.model_validate(request.json()))
    dispatch_notification("contact_request", lambda notifier: notifier.send_contact_notification(contact))
    return created(contact, message="Contact request received")


@router.add("PUT", "/api/contacts/{contact_id:int}")
def update_contact(request: Request):
    contact = ContactRepository().update(request.params["contact_id"], request.json())
    if contact is None:
        raise NotFoundError("Contact", request.params["contact_id"])
    return ok(contact, message="Contact updated")


@router.add("PATCH", "/api/contacts/{contact_id:int}/status")
def update_contact_status(request: Request):
    payload = ContactStatusUpdate.model_validate(request.json())
    contact = ContactRepository().update_status(request.params["contact_id"], payload.status)
    if contact is None:
        raise NotFoundError("Contact", request.params["contact_id"])
    dispatch_notification(
        "contact_status_changed",
        lambda notifier: notifier.log_action(
            "status changed", "Contact", {"name": contact["name"], "status": contact["status"]}
        ),
    )
    return ok(contact, message="Contact status updated")


@router.add("DELETE", "/api/contacts/{contact_id:int}")
def delete_contact(request: Request):
    ContactRepository().delete(request.params["contact_id"])
    return ok(message="Contact deleted")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/contacts."""
    router = router

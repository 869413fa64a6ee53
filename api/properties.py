"""Property endpoints (/api/properties)."""

from src.models.property import PropertyCreate
from src.services.property_repository import PropertyRepository
from src.services.slack_notifier import dispatch_notification
from src.utils.errors import InputValidationError, NotFoundError
from src.utils.http import ApiHandler, Request, Router, created, listing, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

router = Router()

_TRUTHY = {"1", "true", "yes", "on"}


@router.add("GET", "/api/properties")
def list_properties(request: Request):
    include_sold = (request.arg("include_sold") or "").lower() in _TRUTHY
    return listing(PropertyRepository().list_all(include_sold=include_sold))


@router.add("GET", "/api/properties/stats")
def property_stats(request: Request):
    return ok(PropertyRepository().stats())


@router.add("GET", "/api/properties/search")
def search_properties(request: Request):
    term = (request.arg("q") or "").strip()
    if not term:
        raise InputValidationError("Query parameter 'q' is required")
    return listing(PropertyRepository().search(term))


@router.add("GET", "/api/properties/{property_id:int}")
def get_property(request: Request):
    prop = PropertyRepository().get_by_id(request.params["property_id"])
    if prop is None:
        raise NotFoundError("Property", request.params["property_id"])
    return ok(prop)


@router.add("POST", "/api/properties")
def create_property(request: Request):
    prop = PropertyRepository().create(PropertyCreate.model_validate(request.json()))
    dispatch_notification("property_created", lambda notifier: notifier.send_property_notification(prop))
    return created(prop, message="Property created")


@router.add("PUT", "/api/properties/{property_id:int}")
def update_property(request: Request):
    prop = PropertyRepository().update(request.params["property_id"], request.json())
    if prop is None:
        raise NotFoundError("Property", request.params["property_id"])
    dispatch_notification(
        "property_updated",
        lambda notifier: notifier.send_property_notification(prop, created=False),
    )
    return ok(prop, message="Property updated")


@router.add("DELETE", "/api/properties/{property_id:int}")
def delete_property(request: Request):
    PropertyRepository().delete(request.params["property_id"])
    return ok(message="Property deleted")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/properties."""
    router = router

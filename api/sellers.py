"""Seller endpoints (/api/sellers)."""

from src.models.user import SellerCreate
from src.services.seller_repository import SellerRepository
from src.services.slack_notifier import dispatch_notification
from src.utils.errors import InputValidationError, NotFoundError
from src.utils.http import ApiHandler, Request, Router, created, listing, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

router = Router()


@router.add("GET", "/api/sellers")
def list_sellers(request: Request):
    return listing(SellerRepository().list_active())


@router.add("GET", "/api/sellers/stats")
def seller_stats(request: Request):
    return ok(SellerRepository().stats())


@router.add("GET", "/api/sellers/search")
def search_sellers(request: Request):
    term = (request.arg("q") or "").strip()
    if not term:
        raise InputValidationError("Query parameter 'q' is required")
    return listing(SellerRepository().search(term))


@router.add("GET", "/api/sellers/{seller_id:int}")
def get_seller(request: Request):
    seller = SellerRepository().get_by_id(request.params["seller_id"])
    if seller is None:
        raise NotFoundError("Seller", request.params["seller_id"])
    return ok(seller)


@router.add("GET", "/api/sellers/{seller_id:int}/properties")
def seller_properties(request: Request):
    repository = SellerRepository()
    seller_id = request.params["seller_id"]
    if repository.get_by_id(seller_id) is None:
        raise NotFoundError("Seller", seller_id)
    return listing(repository.get_assigned_properties(seller_id))


@router.add("POST", "/api/sellers")
def create_seller(request: Request):
    seller = SellerRepository().create(SellerCreate.model_validate(request.json()))
    dispatch_notification("new_seller", lambda notifier: notifier.send_seller_notification(seller))
    return created(seller, message="Seller created")


@router.add("PUT", "/api/sellers/{seller_id:int}")
def update_seller(request: Request):
    seller = SellerRepository().update(request.params["seller_id"], request.json())
    if seller is None:
        raise NotFoundError("Seller", request.params["seller_id"])
    return ok(seller, message="Seller updated")


@router.add("DELETE", "/api/sellers/{seller_id:int}")
def deactivate_seller(request: Request):
    if not SellerRepository().deactivate(request.params["seller_id"]):
        raise NotFoundError("Seller", request.params["seller_id"])
    return ok(message="Seller deactivated")


@router.add("POST", "/api/sellers/{seller_id:int}/activate")
def activate_seller(request: Request):
    if not SellerRepository().activate(request.params["seller_id"]):
        raise NotFoundError("Seller", request.params["seller_id"])
    return ok(message="Seller activated")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/sellers."""
    router = router

"""User endpoints (/api/users)."""

from src.models.user import UserCreate
from src.services.seller_repository import SellerRepository
from src.services.slack_notifier import dispatch_notification
from src.services.user_repository import UserRepository
from src.utils.errors import InputValidationError, NotFoundError
from src.utils.http import ApiHandler, Request, Router, created, listing, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

router = Router()


@router.add("GET", "/api/users")
def list_users(request: Request):
    return listing(UserRepository().list_active())


@router.add("GET", "/api/users/stats")
def user_stats(request: Request):
    return ok(UserRepository().stats())


@router.add("GET", "/api/users/search")
def search_users(request: Request):
    term = (request.arg("q") or "").strip()
    if not term:
        raise InputValidationError("Query parameter 'q' is required")
    return listing(UserRepository().search(term))


@router.add("GET", "/api/users/{user_id:int}")
def get_user(request: Request):
    user = UserRepository().get_by_id(request.params["user_id"])
    if user is None:
        raise NotFoundError("User", request.params["user_id"])
    return ok(user)


@router.add("POST", "/api/users")
def create_user(request: Request):
    user = UserRepository().create(UserCreate.model_validate(request.json()))
    dispatch_notification("new_user", lambda notifier: notifier.send_user_notification(user))
    return created(user, message="User created")


@router.add("PUT", "/api/users/{user_id:int}")
def update_user(request: Request):
    user = UserRepository().update(request.params["user_id"], request.json())
    if user is None:
        raise NotFoundError("User", request.params["user_id"])
    return ok(user, message="User updated")


@router.add("DELETE", "/api/users/{user_id:int}")
def deactivate_user(request: Request):
    if not UserRepository().deactivate(request.params["user_id"]):
        raise NotFoundError("User", request.params["user_id"])
    return ok(message="User deactivated")


@router.add("POST", "/api/users/{user_id:int}/update-login")
def update_login(request: Request):
    if not UserRepository().update_last_login(request.params["user_id"]):
        raise NotFoundError("User", request.params["user_id"])
    return ok(message="Last login updated")


@router.add("POST", "/api/users/{user_id:int}/convert-to-seller")
def convert_to_seller(request: Request):
    if not SellerRepository().convert_to_seller(request.params["user_id"]):
        raise NotFoundError("User", request.params["user_id"])
    return ok(message="User converted to seller")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/users."""
    router = router

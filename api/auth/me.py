"""Current-user endpoint (GET /api/auth/me)."""

from src.services import auth
from src.services.user_repository import UserRepository
from src.utils.errors import AuthenticationError
from src.utils.http import ApiHandler, Request, Router, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

router = Router()


@router.add("GET", "/api/auth/me")
def current_user(request: Request):
    claims = auth.decode_access_token(auth.bearer_token(request.header("Authorization")))
    user = UserRepository().get_by_id(int(claims["id"]))
    if user is None:
        raise AuthenticationError("User no longer active")
    return ok(user)


class handler(ApiHandler):
    """Vercel serverless function handler for /api/auth/me."""
    router = router

"""Login endpoint (POST /api/auth/login)."""

from src.models.user import LoginRequest
from src.services import auth
from src.services.user_repository import UserRepository, to_user
from src.utils.errors import AuthenticationError
from src.utils.http import ApiHandler, Request, Router, ok
from src.utils.logging import get_structured_logger, mask_email
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

router = Router()

INVALID_CREDENTIALS = "Invalid credentials"


@router.add("POST", "/api/auth/login")
def login(request: Request):
    """
    Exchange email and password for a signed access token.

    Unknown email, inactive account, missing hash and wrong password all
    produce the same 401 so the response does not reveal which one it was.
    """
    credentials = LoginRequest.model_validate(request.json())
    repository = UserRepository()

    row = repository.get_by_email(credentials.email)
    if row is None or not row.get("is_active") or not auth.verify_password(credentials.password, row.get("password_hash")):
        logger.warning("Login rejected", email=mask_email(credentials.email))
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = auth.create_access_token(row["id"], row["email"])
    repository.update_last_login(row["id"])
    repository.record_session(
        row["id"],
        expires_at=auth.token_expiry(),
        ip_address=request.client_ip,
        user_agent=request.header("User-Agent"),
        session_data={"email": row["email"], "role": row["role"]},
    )

    user = repository.get_by_id(row["id"]) or to_user(row)
    logger.info("Login succeeded", user_id=row["id"], email=mask_email(row["email"]))
    return ok({"token": token, "user": user}, message="Login successful")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/auth/login."""
    router = router

"""Local development server exposing every API route on one port.

    python -m src.server
"""

from http.server import ThreadingHTTPServer

from api import contacts, health, properties, sales, sellers, users
from api.auth import login, me
from api.slack import webhook
from src.services.database import close_engine, get_engine, init_db
from src.utils.http import ApiHandler, Request, Router, ok
from src.utils.logging import get_structured_logger
from src.utils.logging_config import LoggingConfig
from src.utils.settings import get_settings

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

ENDPOINTS = {
    "health": "/api/health",
    "sellers": "/api/sellers",
    "properties": "/api/properties",
    "contacts": "/api/contacts",
    "sales": "/api/sales",
    "users": "/api/users",
    "auth": "/api/auth/login",
    "slack": "/api/slack/webhook",
}

index_router = Router()


@index_router.add("GET", "/")
def index(request: Request):
    return ok({"service": "TerraSale Backend API", "endpoints": ENDPOINTS})


def build_router() -> Router:
    """Every route of every deployed function, plus the index."""
    router = Router()
    for module in (health, sellers, properties, contacts, sales, users, login, me, webhook):
        router.extend(module.router)
    return router.extend(index_router)


class LocalHandler(ApiHandler):
    router = build_router()


def main() -> None:
    settings = get_settings()
    init_db(get_engine())

    server = ThreadingHTTPServer(("", settings.port), LocalHandler)
    logger.info("TerraSale server listening", port=settings.port, environment=settings.environment)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
        close_engine()


if __name__ == "__main__":
    main()

"""Sale endpoints (/api/sales)."""

from src.models.sale import SaleCreate
from src.services.sale_repository import SaleRepository
from src.services.slack_notifier import dispatch_notification
from src.utils.errors import NotFoundError
from src.utils.http import ApiHandler, Request, Router, created, listing, ok
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()

router = Router()


@router.add("GET", "/api/sales")
def list_sales(request: Request):
    return listing(SaleRepository().list_all())


@router.add("GET", "/api/sales/stats")
def sale_stats(request: Request):
    return ok(SaleRepository().stats(request.arg("period") or "month"))


@router.add("GET", "/api/sales/trends")
def sale_trends(request: Request):
    return listing(SaleRepository().monthly_trends())


@router.add("GET", "/api/sales/seller/{seller_id:int}")
def sales_by_seller(request: Request):
    return listing(SaleRepository().list_by_seller(request.params["seller_id"]))


@router.add("GET", "/api/sales/{sale_id:int}")
def get_sale(request: Request):
    sale = SaleRepository().get_by_id(request.params["sale_id"])
    if sale is None:
        raise NotFoundError("Sale", request.params["sale_id"])
    return ok(sale)


@router.add("POST", "/api/sales")
def create_sale(request: Request):
    sale = SaleRepository().create(SaleCreate.model_validate(request.json()))
    dispatch_notification("sale_recorded", lambda notifier: notifier.send_sale_notification(sale))
    return created(sale, message="Sale recorded and property marked as sold")


@router.add("PUT", "/api/sales/{sale_id:int}")
def update_sale(request: Request):
    sale = SaleRepository().update(request.params["sale_id"], request.json())
    if sale is None:
        raise NotFoundError("Sale", request.params["sale_id"])
    return ok(sale, message="Sale updated")


@router.add("DELETE", "/api/sales/{sale_id:int}")
def delete_sale(request: Request):
    sale_id = request.params["sale_id"]
    SaleRepository().delete(sale_id)
    dispatch_notification("sale_deleted", lambda notifier: notifier.log_action("deleted", "Sale", {"sale_id": sale_id}))
    return ok(message="Sale deleted")


class handler(ApiHandler):
    """Vercel serverless function handler for /api/sales."""
    router = router

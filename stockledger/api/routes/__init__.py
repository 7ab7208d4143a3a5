"""API route modules."""

from stockledger.api.routes.config import router as config_router
from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.kardex import router as kardex_router
from stockledger.api.routes.pending import router as pending_router
from stockledger.api.routes.products import router as products_router
from stockledger.api.routes.purchases import router as purchases_router
from stockledger.api.routes.sales import router as sales_router
from stockledger.api.routes.stock import router as stock_router

__all__ = [
    "health_router",
    "products_router",
    "stock_router",
    "purchases_router",
    "sales_router",
    "pending_router",
    "kardex_router",
    "config_router",
]

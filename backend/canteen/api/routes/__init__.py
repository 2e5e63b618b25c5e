"""API routes."""

from fastapi import APIRouter

from canteen.api.routes import (
    auth, sessions, menu, weekly_menu, catalog, orders, billing, stock, reports, roles,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
api_router.include_router(weekly_menu.router, prefix="/weekly-menu", tags=["menu"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(stock.router, prefix="/stock", tags=["stock"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])

"""SQLAlchemy models."""

from canteen.models.user import User
from canteen.models.menu import MealSession, MenuItem, DailyMenu, WeeklyMenu
from canteen.models.orders import (
    OrderKind,
    OrderKindPolicy,
    MealOrderStatus,
    HomeMealStatus,
    MassageStatus,
    PartyStatus,
    EstateStatus,
    MealOrder,
    RegularOrder,
    GeneralOrder,
    MealOrderItem,
    PartyOrder,
    PartyOrderItem,
    MassageService,
    MassageBooking,
    BeverageItem,
    BeverageOrder,
    HomeMealOrder,
    HomeMealOrderItem,
    EstateItem,
    EstateRequest,
    ORDER_MODELS,
    order_model,
)
from canteen.models.billing import EmployeeDeduction
from canteen.models.stock import (
    AdjustmentType,
    Ingredient,
    StockAdjustment,
    StockHistory,
    ConsumptionLog,
)
from canteen.models.audit import AdminRoleAudit

__all__ = [
    "User",
    "MealSession",
    "MenuItem",
    "DailyMenu",
    "WeeklyMenu",
    "OrderKind",
    "OrderKindPolicy",
    "MealOrderStatus",
    "HomeMealStatus",
    "MassageStatus",
    "PartyStatus",
    "EstateStatus",
    "MealOrder",
    "RegularOrder",
    "GeneralOrder",
    "MealOrderItem",
    "PartyOrder",
    "PartyOrderItem",
    "MassageService",
    "MassageBooking",
    "BeverageItem",
    "BeverageOrder",
    "HomeMealOrder",
    "HomeMealOrderItem",
    "EstateItem",
    "EstateRequest",
    "ORDER_MODELS",
    "order_model",
    "EmployeeDeduction",
    "AdjustmentType",
    "Ingredient",
    "StockAdjustment",
    "StockHistory",
    "ConsumptionLog",
    "AdminRoleAudit",
]

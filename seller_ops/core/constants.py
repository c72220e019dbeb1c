from pathlib import Path


PACKAGE_DIR = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_DIR.parent

PRODUCT_STATUSES = ("active", "low_stock", "out_of_stock", "inactive")
LOW_STOCK_THRESHOLD = 5

SALE_STATUSES = ("active", "canceled")
CANCELLATION_TYPES = ("before_shipping", "after_shipping")

INVITATION_STATUSES = ("active", "used", "revoked")
MIN_INVITATION_CODE_LENGTH = 6

RECOMMENDATION_TYPES = ("product_performance", "worst_product_plan", "reorder", "pricing")

HEALTH_BUCKETS = ("critical", "warning", "good", "overstocked")
VELOCITY_TRENDS = ("increasing", "stable", "decreasing")
REORDER_PRIORITIES = ("high", "medium", "low")

DEFAULT_APP_SETTINGS = {
    "shipping_base_cost": 5.0,
    "label_cost": 1.0,
    "cancellation_shipping_loss": 5.0,
    "minimum_profit_margin": 10.0,
    "auto_reorder_enabled": False,
    "auto_price_adjustment_enabled": False,
}

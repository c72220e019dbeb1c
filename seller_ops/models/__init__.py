import importlib

from seller_ops.models.ai_recommendation import AIRecommendation
from seller_ops.models.app_settings import AppSettings
from seller_ops.models.canceled_order import CanceledOrder
from seller_ops.models.invitation import Invitation
from seller_ops.models.product import Product
from seller_ops.models.product_batch import ProductBatch
from seller_ops.models.profile import Profile
from seller_ops.models.sale import Sale


def import_all_models() -> None:
    for module_name in (
        "seller_ops.models.ai_recommendation",
        "seller_ops.models.app_settings",
        "seller_ops.models.canceled_order",
        "seller_ops.models.invitation",
        "seller_ops.models.product",
        "seller_ops.models.product_batch",
        "seller_ops.models.profile",
        "seller_ops.models.sale",
    ):
        importlib.import_module(module_name)


__all__ = [
    "AIRecommendation",
    "AppSettings",
    "CanceledOrder",
    "Invitation",
    "Product",
    "ProductBatch",
    "Profile",
    "Sale",
    "import_all_models",
]

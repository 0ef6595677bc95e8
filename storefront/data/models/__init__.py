#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel, AddressModel
from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.coupon import CouponModel, CouponUsageModel
from storefront.data.models.order import OrderModel, OrderItemModel
from storefront.data.models.inventory import InventoryModel

__all__ = [
    "UserModel",
    "AddressModel",
    "CartLineModel",
    "CouponModel",
    "CouponUsageModel",
    "OrderModel",
    "OrderItemModel",
    "InventoryModel",
]

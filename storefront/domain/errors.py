# storefront/domain/errors.py
"""
Bledy domenowe. Kazdy ma stabilny komunikat dla klienta i klasyfikacje (kind),
routery tlumacza je na HTTPException bez zmiany tresci.
"""


class DomainError(Exception):
    kind = "DomainError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFound(DomainError):
    kind = "NotFound"
    status_code = 404


class CouponNotFound(NotFound):
    def __init__(self, message: str = "Invalid coupon code."):
        super().__init__(message)


class OrderNotFound(NotFound):
    def __init__(self, message: str = "Order not found."):
        super().__init__(message)


class CartLineNotFound(NotFound):
    def __init__(self, message: str = "Cart not found."):
        super().__init__(message)


class Expired(DomainError):
    kind = "Expired"

    def __init__(self, message: str = "This coupon code is expired."):
        super().__init__(message)


class OutOfBounds(DomainError):
    kind = "OutOfBounds"

    def __init__(self, message: str, bound):
        super().__init__(message)
        self.bound = bound


class LimitExceeded(DomainError):
    kind = "LimitExceeded"

    def __init__(self, message: str = "You've already used this coupon code."):
        super().__init__(message)


class EmptySelection(DomainError):
    kind = "EmptySelection"

    def __init__(self, message: str = "Please buy some products to create your order."):
        super().__init__(message)


class MissingShippingInfo(DomainError):
    kind = "MissingShippingInfo"

    def __init__(self, message: str = "Please select shipping address."):
        super().__init__(message)


class AddressNotFound(DomainError):
    kind = "AddressNotFound"
    status_code = 404

    def __init__(self, message: str = "Shipping address not found."):
        super().__init__(message)


class InvalidTransition(DomainError):
    kind = "InvalidTransition"


class InvalidPaymentMethod(DomainError):
    kind = "InvalidPaymentMethod"


class InvalidCoupon(DomainError):
    kind = "InvalidCoupon"
    status_code = 422


class Conflict(DomainError):
    kind = "Conflict"
    status_code = 409

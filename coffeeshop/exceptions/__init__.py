"""Custom exceptions for the coffee-shop API."""


class ShopError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['success'] = False
        rv['message'] = self.message
        return rv


class ValidationError(ShopError):
    """A request field is missing or malformed."""
    def __init__(self, field, message="field is required"):
        super().__init__(f"{field} {message}", 400, {'field': field})
        self.field = field


class BusinessLogicError(ShopError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class CartEmptyError(BusinessLogicError):
    """Checkout attempted with nothing in the cart."""
    def __init__(self, message="cart is empty, can't place an order"):
        super().__init__(message)


class StockExhaustedError(BusinessLogicError):
    """The conditional stock decrement matched no row."""
    def __init__(self, product_id, product_name=None):
        label = product_name or f"product {product_id}"
        super().__init__(
            f"stock not enough for {label}",
            payload={'field': f'product_id_{product_id}'}
        )
        self.product_id = product_id


class NotFoundError(ShopError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class UnauthorizedError(ShopError):
    """Missing, expired or invalid bearer token."""
    def __init__(self, message="Please log in first"):
        super().__init__(message, 401)


class CheckoutTimeoutError(ShopError):
    """Checkout exceeded its time budget and was rolled back."""
    def __init__(self, message="checkout timed out, please try again"):
        super().__init__(message, 503)


class ForbiddenError(ShopError):
    """Authenticated, but the role may not use this resource."""
    def __init__(self, message="You do not have access rights to this resource."):
        super().__init__(message, 403)

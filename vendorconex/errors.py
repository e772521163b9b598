"""Error taxonomy raised by the workflows and mapped to JSON responses in main."""
from typing import Any, Optional


class VendorconexError(Exception):
    status_code = 500
    default_message = "Server error: something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(VendorconexError):
    status_code = 400
    default_message = "Invalid request."


class EmptyCartError(VendorconexError):
    status_code = 400
    default_message = "Your cart is empty. Cannot checkout."


class InsufficientStockError(VendorconexError):
    status_code = 400

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f"Not enough stock for product: {product_name}. Available: {available}")


class UnauthorizedError(VendorconexError):
    status_code = 401
    default_message = "Not authorized, token failed."


class InvalidCredentialsError(UnauthorizedError):
    # Same message for unknown email and wrong password
    default_message = "Invalid credentials."


class NotFoundError(VendorconexError):
    status_code = 404
    default_message = "Resource not found."


class UserNotFoundError(NotFoundError):
    default_message = "User not found."


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found.")


class OrderNotFoundError(NotFoundError):
    default_message = "Order not found."


class CartNotFoundError(NotFoundError):
    default_message = "Cart not found for this user."


class LineNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found in cart.")


class ConflictError(VendorconexError):
    status_code = 409
    default_message = "Conflict."


class DuplicateEmailError(ConflictError):
    default_message = "User with this email already exists."


class DuplicateReviewError(ConflictError):
    default_message = "Product already reviewed by this user."


class UpstreamServiceError(VendorconexError):
    """The text-completion service failed; its status and message are relayed."""

    default_message = "Error communicating with the chat service."

    def __init__(self, status_code: int, message: Optional[str] = None, details: Any = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.details is not None:
            body["details"] = self.details
        return body


class InternalError(VendorconexError):
    status_code = 500

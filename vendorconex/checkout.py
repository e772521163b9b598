"""Cart-to-order checkout.

The order write and the cart clear are two separate single-document commits.
If the second one fails the order stays and the cart keeps its lines; the
failure is logged and reported, nothing is rolled back.
"""
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from . import config, crud
from .cart import find_cart
from .errors import EmptyCartError, InternalError, ProductNotFoundError
from .logger import get_logger
from .store import CARTS, ORDERS, PRODUCTS, DocumentStore
from .utils import utcnow

logger = get_logger("checkout")


def checkout(store: DocumentStore, user_id: str, shipping_address: Optional[dict] = None) -> dict:
    cart = find_cart(store, user_id)
    if cart is None or not cart["items"]:
        raise EmptyCartError()

    # Price every line from the live catalog, never from anything cached on the cart
    lines = []
    for item in cart["items"]:
        product = store.find_by_id(PRODUCTS, item["product"])
        if product is None:
            logger.warning("checkout for user %s blocked: product %s no longer exists", user_id, item["product"])
            raise ProductNotFoundError(item["product"])
        lines.append({"product": item["product"], "quantity": item["quantity"], "price_at_order": product["price"]})

    address = shipping_address or dict(config.DEFAULT_SHIPPING_ADDRESS)
    order = store.save(ORDERS, crud.new_order(user_id, lines, address))
    logger.info("order %s created from cart %s, total %s", order["id"], cart["id"], order["total_amount"])

    cart["items"] = []
    cart["updated_at"] = utcnow()
    try:
        store.save(CARTS, cart)
    except SQLAlchemyError as e:
        logger.error("order %s was created but cart %s could not be cleared: %s", order["id"], cart["id"], e)
        raise InternalError("Server error: Could not complete checkout.") from e
    return order

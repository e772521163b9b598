"""Cart mutations. One cart document per user, each product at most once."""
from .crud import product_summary
from .errors import CartNotFoundError, LineNotFoundError, ProductNotFoundError
from .logger import get_logger
from .store import CARTS, PRODUCTS, DocumentStore
from .utils import utcnow

logger = get_logger("cart")


def find_cart(store: DocumentStore, user_id: str) -> dict | None:
    return store.find_one(CARTS, {"user": user_id})


def _require_cart(store: DocumentStore, user_id: str) -> dict:
    cart = find_cart(store, user_id)
    if cart is None:
        raise CartNotFoundError()
    return cart


def _line_index(cart: dict, product_id: str) -> int:
    for index, item in enumerate(cart["items"]):
        if item["product"] == product_id:
            return index
    return -1


def view_cart(store: DocumentStore, user_id: str) -> dict:
    """Return the caller's cart with each line's product summary filled in.

    A user without a cart gets an empty, unsaved one.
    """
    cart = find_cart(store, user_id)
    if cart is None:
        return {"user": user_id, "items": []}
    items = [{**item, "details": product_summary(store, item["product"])} for item in cart["items"]]
    return {**cart, "items": items}


def add_line(store: DocumentStore, user_id: str, product_id: str, quantity: int) -> dict:
    if store.find_by_id(PRODUCTS, product_id) is None:
        raise ProductNotFoundError(product_id)

    now = utcnow()
    cart = find_cart(store, user_id) or {"user": user_id, "items": [], "created_at": now}
    index = _line_index(cart, product_id)
    if index > -1:
        cart["items"][index]["quantity"] += quantity
    else:
        cart["items"].append({"product": product_id, "quantity": quantity})
    cart["updated_at"] = now
    saved = store.save(CARTS, cart)
    logger.info("cart %s: added %s x %s", saved["id"], quantity, product_id)
    return saved


def set_line_quantity(store: DocumentStore, user_id: str, product_id: str, quantity: int) -> dict:
    cart = _require_cart(store, user_id)
    index = _line_index(cart, product_id)
    if index == -1:
        raise LineNotFoundError(product_id)
    if quantity == 0:
        cart["items"].pop(index)
    else:
        cart["items"][index]["quantity"] = quantity
    cart["updated_at"] = utcnow()
    return store.save(CARTS, cart)


def remove_line(store: DocumentStore, user_id: str, product_id: str) -> dict:
    cart = _require_cart(store, user_id)
    remaining = [item for item in cart["items"] if item["product"] != product_id]
    if len(remaining) == len(cart["items"]):
        raise LineNotFoundError(product_id)
    cart["items"] = remaining
    cart["updated_at"] = utcnow()
    return store.save(CARTS, cart)

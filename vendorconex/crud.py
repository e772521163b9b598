import math
from typing import List, Optional

from . import auth, schemas
from .errors import (
    DuplicateEmailError,
    InsufficientStockError,
    InvalidCredentialsError,
    OrderNotFoundError,
    ProductNotFoundError,
    UserNotFoundError,
)
from .logger import get_logger
from .store import ORDERS, PRODUCTS, USERS, DocumentStore
from .utils import clean_text, order_total, sanitize_input, utcnow

logger = get_logger("crud")

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/150"


# -------------------- Users --------------------

def create_user(store: DocumentStore, user: schemas.SignupRequest) -> dict:
    email = user.email.strip().lower()
    if store.find_one(USERS, {"email": email}) is not None:
        logger.warning("signup rejected, email already registered")
        raise DuplicateEmailError()
    created = store.save(USERS, {
        "name": user.name,
        "email": email,
        "password_hash": auth.hash_password(user.password),
        "location": user.location,
        "role": user.role.value,
        "created_at": utcnow(),
    })
    logger.info("user %s registered as %s", created["id"], created["role"])
    return created


def authenticate_user(store: DocumentStore, email: str, password: str) -> dict:
    user = store.find_one(USERS, {"email": email.strip().lower()})
    if user is None:
        auth.dummy_verify()
        raise InvalidCredentialsError()
    if not auth.verify_password(password, user["password_hash"]):
        raise InvalidCredentialsError()
    return user


def get_user(store: DocumentStore, user_id: str) -> dict:
    user = store.find_by_id(USERS, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


# -------------------- Products --------------------

def create_product(store: DocumentStore, product: schemas.ProductCreate) -> dict:
    # vendor must reference a real user
    get_user(store, product.vendor)
    now = utcnow()
    created = store.save(PRODUCTS, {
        "name": product.name,
        "description": clean_text(product.description),
        "price": product.price,
        "category": product.category,
        "stock_quantity": product.stock_quantity,
        "vendor": product.vendor,
        "image_url": product.image_url or PLACEHOLDER_IMAGE_URL,
        "reviews": [],
        "rating": 0,
        "num_reviews": 0,
        "created_at": now,
        "updated_at": now,
    })
    logger.info("product %s created by vendor %s", created["id"], product.vendor)
    return created


def list_products(store: DocumentStore, name: str = "", category: str = "", page: int = 1, limit: int = 10) -> dict:
    search = {"name": sanitize_input(name), "category": sanitize_input(category)}
    total = store.count(PRODUCTS, search=search)
    products = store.find(PRODUCTS, search=search, skip=(page - 1) * limit, limit=limit)
    total_pages = math.ceil(total / limit) if total else 0

    if not products and total:
        message = f"No products found on page {page} matching your criteria."
    elif not products:
        message = "No products found matching your criteria."
    else:
        message = "Products retrieved successfully!"
    return {
        "message": message,
        "products": products,
        "current_page": page,
        "total_pages": total_pages,
        "total_items": total,
    }


def get_product(store: DocumentStore, product_id: str) -> dict:
    product = store.find_by_id(PRODUCTS, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def update_product(store: DocumentStore, product_id: str, changes: schemas.ProductUpdate) -> dict:
    product = get_product(store, product_id)
    fields = changes.model_dump(exclude_none=True)
    if "description" in fields:
        fields["description"] = clean_text(fields["description"])
    product.update(fields)
    product["updated_at"] = utcnow()
    return store.save(PRODUCTS, product)


def delete_product(store: DocumentStore, product_id: str) -> dict:
    deleted = store.delete_by_id(PRODUCTS, product_id)
    if deleted is None:
        raise ProductNotFoundError(product_id)
    logger.info("product %s deleted", product_id)
    return deleted


# -------------------- Orders --------------------

def place_order(store: DocumentStore, order: schemas.OrderCreate) -> dict:
    """Place an order from an explicit line list, deducting stock line by line.

    Each line's deduction is saved before the next line is checked, so a failure on
    a later line leaves the earlier deductions applied and no order is written.
    """
    get_user(store, order.user_id)

    lines = []
    for item in order.products:
        product = store.find_by_id(PRODUCTS, item.product_id)
        if product is None:
            raise ProductNotFoundError(item.product_id)
        if product["stock_quantity"] < item.quantity:
            logger.warning(
                "order for user %s stopped at product %s: requested %s, available %s (%s earlier lines already deducted)",
                order.user_id, item.product_id, item.quantity, product["stock_quantity"], len(lines),
            )
            raise InsufficientStockError(product["name"], product["stock_quantity"])
        product["stock_quantity"] -= item.quantity
        product["updated_at"] = utcnow()
        store.save(PRODUCTS, product)
        lines.append({"product": item.product_id, "quantity": item.quantity, "price_at_order": product["price"]})

    created = store.save(ORDERS, new_order(order.user_id, lines, order.shipping_address.model_dump()))
    logger.info("order %s placed for user %s, total %s", created["id"], order.user_id, created["total_amount"])
    return created


def new_order(user_id: str, lines: List[dict], shipping_address: dict) -> dict:
    return {
        "user": user_id,
        "products": lines,
        "total_amount": order_total((line["price_at_order"], line["quantity"]) for line in lines),
        "shipping_address": shipping_address,
        "status": schemas.OrderStatus.pending.value,
        "order_date": utcnow(),
        "tracking_number": "",
    }


def product_summary(store: DocumentStore, product_id: str) -> Optional[dict]:
    """Name, current price and image of a product, or None once it is deleted."""
    product = store.find_by_id(PRODUCTS, product_id)
    if product is None:
        return None
    return {"name": product["name"], "price": product["price"], "image_url": product.get("image_url")}


def _populate_order(store: DocumentStore, order: dict) -> dict:
    user = store.find_by_id(USERS, order["user"])
    return {
        **order,
        "user_details": {"name": user["name"], "email": user["email"]} if user else None,
        "products": [{**line, "details": product_summary(store, line["product"])} for line in order["products"]],
    }


def list_orders(store: DocumentStore) -> List[dict]:
    return [_populate_order(store, order) for order in store.find(ORDERS, newest_first=True)]


def list_user_orders(store: DocumentStore, user_id: str) -> List[dict]:
    get_user(store, user_id)
    return [_populate_order(store, order) for order in store.find(ORDERS, {"user": user_id}, newest_first=True)]


def _find_order(store: DocumentStore, order_id: str) -> dict:
    order = store.find_by_id(ORDERS, order_id)
    if order is None:
        raise OrderNotFoundError()
    return order


def get_order(store: DocumentStore, order_id: str) -> dict:
    return _populate_order(store, _find_order(store, order_id))


def update_order_status(store: DocumentStore, order_id: str, status: schemas.OrderStatus) -> dict:
    order = _find_order(store, order_id)
    order["status"] = status.value
    updated = store.save(ORDERS, order)
    logger.info("order %s moved to %s", order_id, status.value)
    return updated

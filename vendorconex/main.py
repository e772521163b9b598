from typing import Optional

from fastapi import Body, Depends, FastAPI, Header, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import cart, chat, checkout, crud, reviews, schemas
from .auth import create_access_token, resolve_bearer
from .db import Base, SessionLocal, engine
from .errors import VendorconexError
from .logger import get_logger
from .store import DocumentStore

logger = get_logger("api")

# Create tables if not existing
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Vendorconex Backend API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------- Error mapping --------------------

@app.exception_handler(VendorconexError)
async def vendorconex_error_handler(request: Request, exc: VendorconexError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # the rejected input is left out; it may not be JSON-encodable (inf, nan)
    errors = [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}" for error in errors
    )
    return JSONResponse(
        status_code=400,
        content={"message": f"Invalid request: {details}", "errors": jsonable_encoder(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error: something went wrong."})


# -------------------- Dependencies --------------------

# Dependency to get DB session per request

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return resolve_bearer(store, authorization)


def get_completion_client() -> chat.CompletionClient:
    return chat.CompletionClient.from_settings()


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- Auth --------------------

@app.post("/api/auth/signup", status_code=201)
def signup(payload: schemas.SignupRequest, store: DocumentStore = Depends(get_store)):
    user = crud.create_user(store, payload)
    return {
        "message": "User registered successfully!",
        "user_id": user["id"],
        "user_name": user["name"],
        "token": create_access_token(user["id"], user["role"]),
    }


@app.post("/api/auth/login")
def login(payload: schemas.LoginRequest, store: DocumentStore = Depends(get_store)):
    user = crud.authenticate_user(store, payload.email, payload.password)
    return {
        "message": "Login successful!",
        "user_id": user["id"],
        "user_name": user["name"],
        "token": create_access_token(user["id"], user["role"]),
    }


# -------------------- Products --------------------

@app.post("/api/products", status_code=201)
def create_product(payload: schemas.ProductCreate, store: DocumentStore = Depends(get_store)):
    product = crud.create_product(store, payload)
    return {"message": "Product created successfully!", "product": product}


@app.get("/api/products")
def list_products(
    name: str = Query("", max_length=100),
    category: str = Query("", max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: DocumentStore = Depends(get_store),
):
    return crud.list_products(store, name=name, category=category, page=page, limit=limit)


@app.get("/api/products/{product_id}")
def get_product(product_id: str, store: DocumentStore = Depends(get_store)):
    return crud.get_product(store, product_id)


@app.put("/api/products/{product_id}")
def update_product(product_id: str, payload: schemas.ProductUpdate, store: DocumentStore = Depends(get_store)):
    product = crud.update_product(store, product_id, payload)
    return {"message": "Product updated successfully!", "product": product}


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, store: DocumentStore = Depends(get_store)):
    deleted = crud.delete_product(store, product_id)
    return {"message": "Product deleted successfully!", "deleted_product": deleted}


@app.post("/api/products/{product_id}/reviews", status_code=201)
def add_review(
    product_id: str,
    payload: schemas.ReviewCreate,
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    product = reviews.add_review(store, product_id, user, payload.rating, payload.comment)
    return {"message": "Review added successfully!", "product": product}


# -------------------- Cart --------------------

@app.get("/api/cart")
def get_cart(user: dict = Depends(get_current_user), store: DocumentStore = Depends(get_store)):
    return cart.view_cart(store, user["id"])


@app.post("/api/cart")
def add_to_cart(
    payload: schemas.CartItemAdd,
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    updated = cart.add_line(store, user["id"], payload.product_id, payload.quantity)
    return {"message": "Product added to cart successfully!", "cart": updated}


@app.put("/api/cart/item/{product_id}")
def set_cart_quantity(
    product_id: str,
    payload: schemas.CartItemUpdate,
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    updated = cart.set_line_quantity(store, user["id"], product_id, payload.quantity)
    return {"message": "Cart item quantity updated successfully!", "cart": updated}


@app.delete("/api/cart/item/{product_id}")
def remove_from_cart(
    product_id: str,
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    updated = cart.remove_line(store, user["id"], product_id)
    return {"message": "Product removed from cart successfully!", "cart": updated}


@app.post("/api/cart/checkout", status_code=201)
def checkout_cart(
    payload: Optional[schemas.CheckoutRequest] = Body(default=None),
    user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    address = payload.shipping_address.model_dump() if payload and payload.shipping_address else None
    order = checkout.checkout(store, user["id"], address)
    return {"message": "Order placed successfully!", "order": order}


# -------------------- Orders --------------------

@app.post("/api/orders", status_code=201)
def place_order(payload: schemas.OrderCreate, store: DocumentStore = Depends(get_store)):
    order = crud.place_order(store, payload)
    return {"message": "Order placed successfully!", "order": order}


@app.get("/api/orders")
def list_orders(store: DocumentStore = Depends(get_store)):
    orders = crud.list_orders(store)
    return {"message": "Orders retrieved successfully!" if orders else "No orders found.", "orders": orders}


@app.get("/api/orders/{order_id}")
def get_order(order_id: str, store: DocumentStore = Depends(get_store)):
    return crud.get_order(store, order_id)


@app.put("/api/orders/{order_id}/status")
def update_order_status(order_id: str, payload: schemas.OrderStatusUpdate, store: DocumentStore = Depends(get_store)):
    order = crud.update_order_status(store, order_id, payload.status)
    return {"message": f'Order status updated to "{payload.status.value}" successfully!', "order": order}


# -------------------- Users --------------------

@app.get("/api/users/me")
def get_me(user: dict = Depends(get_current_user)):
    return user


@app.get("/api/users/{user_id}/orders")
def list_user_orders(user_id: str, store: DocumentStore = Depends(get_store)):
    orders = crud.list_user_orders(store, user_id)
    return {"message": "Orders retrieved successfully!" if orders else "No orders found for this user.", "orders": orders}


# -------------------- Chat --------------------

@app.post("/api/chat")
async def chat_reply(payload: schemas.ChatRequest, client: chat.CompletionClient = Depends(get_completion_client)):
    reply, history = await chat.converse(client, payload.message, payload.chat_history)
    return {"response": reply, "chat_history": history}


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 5000)))

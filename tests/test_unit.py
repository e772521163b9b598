from vendorconex import cart, crud, schemas
from vendorconex.store import PRODUCTS, USERS


def _vendor(store):
    return crud.create_user(store, schemas.SignupRequest(name="Vera", email="vera@example.com", password="pw", role="vendor"))


def _product(store, vendor, name="Lamp", price=10.0, stock=5):
    return crud.create_product(store, schemas.ProductCreate(
        name=name, description="desc", price=price, category="Home", stock_quantity=stock, vendor=vendor["id"],
    ))


def test_create_user_and_authenticate(store):
    user = crud.create_user(store, schemas.SignupRequest(name="Alice", email="alice@example.com", password="pw"))
    assert user["id"] is not None
    assert user["role"] == "customer"

    assert crud.authenticate_user(store, "ALICE@example.com", "pw")["id"] == user["id"]


def test_authenticate_failures(store):
    from pytest import raises
    from vendorconex.errors import InvalidCredentialsError

    crud.create_user(store, schemas.SignupRequest(name="Bob", email="bob@example.com", password="pw"))
    with raises(InvalidCredentialsError):
        crud.authenticate_user(store, "bob@example.com", "nope")
    with raises(InvalidCredentialsError):
        crud.authenticate_user(store, "nobody@example.com", "pw")


def test_place_order_snapshots_price(store):
    vendor = _vendor(store)
    lamp = _product(store, vendor, price=4.25, stock=5)
    order = crud.place_order(store, schemas.OrderCreate(
        user_id=vendor["id"],
        products=[{"product_id": lamp["id"], "quantity": 2}],
        shipping_address={"street": "1 Main", "city": "Pune", "state": "MH", "zip": "411001"},
    ))
    assert order["total_amount"] == 8.5
    assert order["products"][0]["price_at_order"] == 4.25
    assert store.find_by_id(PRODUCTS, lamp["id"])["stock_quantity"] == 3


def test_insufficient_stock_error_details(store):
    from pytest import raises
    from vendorconex.errors import InsufficientStockError

    vendor = _vendor(store)
    lamp = _product(store, vendor, stock=1)
    with raises(InsufficientStockError) as exc:
        crud.place_order(store, schemas.OrderCreate(
            user_id=vendor["id"],
            products=[{"product_id": lamp["id"], "quantity": 2}],
            shipping_address={"street": "1 Main", "city": "Pune", "state": "MH", "zip": "411001"},
        ))
    assert exc.value.available == 1
    assert exc.value.status_code == 400


def test_cart_merge_and_remove(store):
    vendor = _vendor(store)
    lamp = _product(store, vendor)
    cart.add_line(store, "u1", lamp["id"], 3)
    updated = cart.add_line(store, "u1", lamp["id"], 2)
    assert updated["items"] == [{"product": lamp["id"], "quantity": 5}]

    emptied = cart.remove_line(store, "u1", lamp["id"])
    assert emptied["items"] == []
    # the cart document survives being emptied
    assert cart.find_cart(store, "u1")["id"] == updated["id"]


def test_users_never_store_plaintext(store):
    crud.create_user(store, schemas.SignupRequest(name="Cy", email="cy@example.com", password="plaintext-pw"))
    stored = store.find_one(USERS, {"email": "cy@example.com"})
    assert "password" not in stored
    assert "plaintext-pw" not in stored["password_hash"]

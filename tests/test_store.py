from vendorconex.store import ORDERS, PRODUCTS, USERS


def test_save_assigns_id_and_round_trips(store):
    saved = store.save(PRODUCTS, {"name": "Lamp", "price": 12.5, "tags": ["home"]})
    assert saved["id"]

    loaded = store.find_by_id(PRODUCTS, saved["id"])
    assert loaded == saved


def test_returned_documents_are_copies(store):
    saved = store.save(PRODUCTS, {"name": "Lamp", "reviews": []})
    saved["reviews"].append({"rating": 5})

    assert store.find_by_id(PRODUCTS, saved["id"])["reviews"] == []


def test_save_replaces_whole_document(store):
    saved = store.save(USERS, {"name": "Ann", "location": "Pune"})
    store.save(USERS, {"id": saved["id"], "name": "Ann B"})

    loaded = store.find_by_id(USERS, saved["id"])
    assert loaded == {"id": saved["id"], "name": "Ann B"}


def test_collections_are_isolated(store):
    saved = store.save(USERS, {"name": "Ann"})
    assert store.find_by_id(PRODUCTS, saved["id"]) is None


def test_find_one_and_find_filter_by_field(store):
    store.save(ORDERS, {"user": "u1", "total_amount": 5.0})
    store.save(ORDERS, {"user": "u2", "total_amount": 7.0})
    store.save(ORDERS, {"user": "u1", "total_amount": 9.0})

    assert store.find_one(ORDERS, {"user": "u2"})["total_amount"] == 7.0
    assert store.find_one(ORDERS, {"user": "nobody"}) is None

    newest_first = store.find(ORDERS, {"user": "u1"}, newest_first=True)
    assert [o["total_amount"] for o in newest_first] == [9.0, 5.0]


def test_search_is_case_insensitive_substring(store):
    store.save(PRODUCTS, {"name": "Red Kettle", "category": "Kitchen"})
    store.save(PRODUCTS, {"name": "Blue kettle", "category": "Kitchen"})
    store.save(PRODUCTS, {"name": "Desk", "category": "Office"})

    assert store.count(PRODUCTS, search={"name": "KETTLE"}) == 2
    assert store.count(PRODUCTS, search={"category": "office"}) == 1
    # empty terms do not filter
    assert store.count(PRODUCTS, search={"name": ""}) == 3


def test_skip_and_limit(store):
    for i in range(5):
        store.save(PRODUCTS, {"name": f"P{i}"})

    page = store.find(PRODUCTS, skip=2, limit=2)
    assert [p["name"] for p in page] == ["P2", "P3"]


def test_delete_by_id(store):
    saved = store.save(PRODUCTS, {"name": "Gone"})

    deleted = store.delete_by_id(PRODUCTS, saved["id"])
    assert deleted["name"] == "Gone"
    assert store.find_by_id(PRODUCTS, saved["id"]) is None
    assert store.delete_by_id(PRODUCTS, saved["id"]) is None

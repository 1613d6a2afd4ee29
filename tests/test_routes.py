import pytest

from timber_store.app import create_app
from timber_store.config import AppConfig


PRODUCT = {
    "product_name": "Pine Plank",
    "timber_type": "Pine",
    "product_category": "Timber",
    "product_grade": "A",
    "dimensions": "38x114",
    "thickness": "38",
    "width": "114",
    "length": "3600",
    "price_per_unit": "10",
    "quantity_in_stock": "5",
}

SHIPPING = {"shipping_address": "12 Sawmill Rd", "shipping_city": "Harare"}


@pytest.fixture
def app(tmp_path):
    cfg = AppConfig(
        database_url=f"sqlite:///{tmp_path / 'app.db'}",
        secret_key="test-secret",
        log_level="WARNING",
        page_size=20,
        featured_limit=8,
    )
    app = create_app(cfg)
    app.config["TESTING"] = True
    yield app
    app.extensions["timber_store"]["engine"].dispose()


def _signup(app, email, role=None):
    client = app.test_client()
    resp = client.post(
        "/account/register",
        json={"user_firstname": "T", "user_lastname": "User", "user_email": email, "user_password": "password123"},
    )
    assert resp.status_code == 201
    if role:
        app.extensions["timber_store"]["accounts"].set_role(resp.get_json()["user"]["user_id"], role)
    resp = client.post("/account/login", json={"user_email": email, "user_password": "password123"})
    assert resp.status_code == 200
    return client


@pytest.fixture
def manager(app):
    return _signup(app, "manager@example.com", role="Manager")


@pytest.fixture
def client_user(app):
    return _signup(app, "client@example.com")


@pytest.fixture
def product_id(manager):
    resp = manager.post("/admin/products", json=PRODUCT)
    assert resp.status_code == 201
    return resp.get_json()["product"]["product_id"]


def test_anonymous_requests(app):
    anon = app.test_client()

    assert anon.get("/cart/").status_code == 401
    assert anon.post("/orders/create", json=SHIPPING).status_code == 401
    assert anon.get("/cart/count").get_json() == {"count": 0}
    assert anon.get("/account/status").get_json() == {"logged_in": False}


def test_bad_login(app):
    _signup(app, "someone@example.com")
    resp = app.test_client().post("/account/login", json={"user_email": "someone@example.com", "user_password": "nope"})

    assert resp.status_code == 400


def test_clients_cannot_reach_back_office(client_user):
    assert client_user.post("/admin/products", json=PRODUCT).status_code == 403
    assert client_user.get("/admin/customers").status_code == 403


def test_catalog_reads(app, product_id):
    anon = app.test_client()

    listing = anon.get("/products/?timber_type=Pine").get_json()
    assert listing["total"] == 1
    assert anon.get(f"/products/{product_id}").get_json()["product"]["product_name"] == "Pine Plank"
    assert anon.get("/products/9999").status_code == 404
    assert anon.get("/products/timber-types").get_json()["timber_types"][0]["variant_count"] == 1
    assert anon.get("/products/grades").get_json() == {"grades": ["A"]}
    quote = anon.post("/products/calculate-price", json={"product_id": product_id, "quantity": 3}).get_json()
    assert quote["total_price"] == 30.0


def test_checkout_and_cancel_flow(client_user, product_id, app):
    resp = client_user.post("/cart/add", json={"product_id": product_id, "quantity": 2})
    assert resp.get_json()["cart_count"] == 2

    resp = client_user.post("/orders/create", json=SHIPPING)
    assert resp.status_code == 201
    order_id = resp.get_json()["order_id"]
    assert client_user.get("/cart/count").get_json() == {"count": 0}
    assert app.test_client().get(f"/products/{product_id}").get_json()["product"]["quantity_in_stock"] == 3.0

    detail = client_user.get(f"/orders/{order_id}").get_json()
    assert detail["order"]["total_amount"] == 20.0
    assert len(detail["items"]) == 1

    assert client_user.post(f"/orders/{order_id}/cancel").status_code == 200
    again = client_user.post(f"/orders/{order_id}/cancel")
    assert again.status_code == 409
    assert again.get_json()["error"] == "invalid_state"


def test_checkout_with_empty_cart(client_user):
    resp = client_user.post("/orders/create", json=SHIPPING)

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "empty_cart"


def test_add_beyond_stock_is_refused(client_user, product_id):
    resp = client_user.post("/cart/add", json={"product_id": product_id, "quantity": 6})

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "insufficient_stock"


def test_cross_user_order_access(app, client_user, manager, product_id):
    client_user.post("/cart/add", json={"product_id": product_id, "quantity": 1})
    order_id = client_user.post("/orders/create", json=SHIPPING).get_json()["order_id"]
    other = _signup(app, "other@example.com")

    assert other.get(f"/orders/{order_id}").status_code == 404
    assert other.post(f"/orders/{order_id}/cancel").status_code == 404
    assert [o["order_id"] for o in manager.get("/orders/").get_json()["orders"]] == [order_id]
    assert manager.post(f"/orders/{order_id}/cancel").status_code == 200


def test_staff_fulfillment_and_customers(app, client_user, manager, product_id):
    employee = _signup(app, "staff@example.com", role="Employee")
    client_user.post("/cart/add", json={"product_id": product_id, "quantity": 1})
    order_id = client_user.post("/orders/create", json=SHIPPING).get_json()["order_id"]

    resp = employee.post(f"/admin/orders/{order_id}/status", json={"order_status": "Processing"})
    assert resp.status_code == 200
    assert client_user.post(f"/orders/{order_id}/cancel").status_code == 409

    customer = {"company_name": "Build Co", "contact_person": "Tendai", "contact_email": "buy@build.co"}
    assert employee.post("/admin/customers", json=customer).status_code == 403
    assert employee.get("/admin/customers").status_code == 403
    resp = manager.post("/admin/customers", json=customer)
    assert resp.status_code == 201
    assert len(manager.get("/admin/customers").get_json()["customers"]) == 1
    assert employee.post(f"/admin/products/{product_id}/deactivate").status_code == 403


def test_role_changes_need_admin_and_are_capped(app):
    admin = _signup(app, "admin@example.com", role="Admin")
    target = app.test_client().post(
        "/account/register",
        json={"user_firstname": "T", "user_lastname": "U", "user_email": "t@example.com", "user_password": "password123"},
    ).get_json()["user"]["user_id"]

    assert admin.post(f"/admin/users/{target}/role", json={"user_role": "Manager"}).status_code == 200
    assert admin.post(f"/admin/users/{target}/role", json={"user_role": "CEO"}).status_code == 403
    assert admin.post(f"/admin/users/{target}/role", json={"user_role": "Owner"}).status_code == 400


def test_settings_hot_reload(app):
    admin = _signup(app, "admin@example.com", role="Admin")

    resp = admin.post("/admin/settings", json={"settings": {"PAGE_SIZE": 5, "DATABASE_URL": "sqlite://"}})

    body = resp.get_json()
    assert body["settings"]["PAGE_SIZE"] == 5
    assert body["restart_required"] is True
    assert app.config["TIMBER_STORE_CONFIG"].page_size == 5


def test_admin_cannot_change_a_higher_ranked_user(app):
    admin = _signup(app, "admin@example.com", role="Admin")
    _signup(app, "ceo@example.com", role="CEO")
    accounts = app.extensions["timber_store"]["accounts"]
    ceo_id = accounts.authenticate("ceo@example.com", "password123")["user_id"]

    resp = admin.post(f"/admin/users/{ceo_id}/role", json={"user_role": "Client"})

    assert resp.status_code == 403
    assert accounts.get_user(ceo_id)["user_role"] == "CEO"
    assert admin.post("/admin/users/9999/role", json={"user_role": "Client"}).status_code == 404


def test_non_object_json_bodies_carry_no_fields(client_user, manager, product_id):
    resp = client_user.post("/cart/add", json=[1])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"

    resp = client_user.post("/orders/create", json=["12 Sawmill Rd", "Harare"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"

    assert manager.post("/admin/products", json="Pine").status_code == 400


def test_non_text_shipping_fields(client_user, product_id):
    client_user.post("/cart/add", json={"product_id": product_id, "quantity": 1})

    resp = client_user.post("/orders/create", json={"shipping_address": {"line": 1}, "shipping_city": "Harare"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"

    resp = client_user.post("/orders/create", json={"shipping_address": 12, "shipping_city": "Harare", "shipping_zip": 4001})
    assert resp.status_code == 201


def test_non_finite_numbers_are_bad_requests(app, manager, product_id):
    quote = app.test_client().post("/products/calculate-price", json={"product_id": product_id, "quantity": "NaN"})
    assert quote.status_code == 400

    resp = manager.post(f"/admin/products/{product_id}/stock", json={"delta": "Infinity"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation"


def test_listing_stock_follows_checkout_and_cancel(app, client_user, product_id):
    anon = app.test_client()

    def listed_stock():
        return anon.get("/products/").get_json()["items"][0]["quantity_in_stock"]

    assert listed_stock() == 5.0
    client_user.post("/cart/add", json={"product_id": product_id, "quantity": 2})
    order_id = client_user.post("/orders/create", json=SHIPPING).get_json()["order_id"]
    assert listed_stock() == 3.0

    client_user.post(f"/orders/{order_id}/cancel")
    assert listed_stock() == 5.0

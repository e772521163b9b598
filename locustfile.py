from locust import HttpUser, task, between
import random


class ShopperUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Each simulated shopper gets an account; one vendor stocks a product for them
        uid = random.randint(1, 1_000_000_000)
        r = self.client.post("/api/auth/signup", json={
            "name": f"shopper_{uid}", "email": f"shopper_{uid}@example.com", "password": "secret", "role": "vendor",
        })
        self.headers = None
        self.product_id = None
        if r.status_code != 201:
            return
        body = r.json()
        self.headers = {"Authorization": f"Bearer {body['token']}"}
        r = self.client.post("/api/products", json={
            "name": f"Load item {uid}", "description": "Load test product", "price": round(random.random() * 100, 2),
            "category": "Load", "stock_quantity": 1000, "vendor": body["user_id"],
        })
        if r.status_code == 201:
            self.product_id = r.json()["product"]["id"]

    @task(3)
    def add_to_cart(self):
        if not self.headers or not self.product_id:
            return
        self.client.post("/api/cart", json={"product_id": self.product_id, "quantity": random.randint(1, 3)}, headers=self.headers)

    @task(1)
    def checkout(self):
        if not self.headers:
            return
        with self.client.post("/api/cart/checkout", headers=self.headers, catch_response=True) as r:
            # an empty cart is an expected outcome under load
            if r.status_code in (201, 400):
                r.success()

    @task(2)
    def browse(self):
        self.client.get("/api/products", params={"page": random.randint(1, 5)})

"""Checkout load test scenarios.

HotProductBuyer hammers a single scarce product from many users at once,
exercising the conditional stock reservation under contention. Each user
fills a cart and checks out; losing the race for the last units must come
back as a 409 with the offending line, never as an oversold order.

BrowsingShopper spreads load across a wider catalogue with cart edits,
summaries and order history reads between checkouts.
"""

import random

import requests
from locust import HttpUser, SequentialTaskSet, between, events, task

from loadtests.data_generators import cart_item_data, checkout_data, customer_id, product_data
from loadtests.helpers.response import extract_error_detail, is_stock_conflict

HOT_PRODUCT_ID = "prod-lt-hot"
HOT_PRODUCT_STOCK = 100
CATALOGUE_SIZE = 20


@events.test_start.add_listener
def seed_catalogue(environment, **_kwargs):
    """Create the hot product and a small browsing catalogue.

    Re-running against a seeded server is fine: existing products are
    restocked instead.
    """
    seeds = [product_data(HOT_PRODUCT_ID, stock_quantity=HOT_PRODUCT_STOCK)]
    seeds += [product_data(f"prod-lt-{n:03d}", stock_quantity=1000) for n in range(CATALOGUE_SIZE)]
    for payload in seeds:
        resp = requests.post(f"{environment.host}/products", json=payload, timeout=5)
        if resp.status_code == 400:
            requests.put(
                f"{environment.host}/products/{payload['product_id']}/stock",
                json={"stock_quantity": payload["stock_quantity"]},
                timeout=5,
            )


class HotProductCheckout(SequentialTaskSet):
    """Add the hot product -> Check out -> Done.

    A 409 insufficient_stock answer is a correct outcome once the product
    has sold out, so it is recorded as a success.
    """

    def on_start(self):
        self.customer_id = customer_id()

    @task
    def add_hot_product(self):
        with self.client.post(
            f"/carts/{self.customer_id}/items",
            json=cart_item_data(HOT_PRODUCT_ID, max_quantity=2),
            catch_response=True,
            name="POST /carts/{id}/items",
        ) as resp:
            if resp.status_code == 200 or is_stock_conflict(resp):
                resp.success()
                if resp.status_code != 200:
                    self.interrupt()
            else:
                resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def checkout(self):
        with self.client.post(
            f"/carts/{self.customer_id}/checkout",
            json=checkout_data(),
            catch_response=True,
            name="POST /carts/{id}/checkout",
        ) as resp:
            if resp.status_code == 201 or is_stock_conflict(resp):
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class BrowsingJourney(SequentialTaskSet):
    """Add several items -> Change a quantity -> Summary -> Check out -> Order history."""

    def on_start(self):
        self.customer_id = customer_id()
        self.product_ids = random.sample([f"prod-lt-{n:03d}" for n in range(CATALOGUE_SIZE)], 3)

    @task
    def fill_cart(self):
        for product_id in self.product_ids:
            with self.client.post(
                f"/carts/{self.customer_id}/items",
                json=cart_item_data(product_id),
                catch_response=True,
                name="POST /carts/{id}/items",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def change_quantity(self):
        with self.client.put(
            f"/carts/{self.customer_id}/items/{self.product_ids[0]}",
            json={"quantity": random.randint(1, 5)},
            catch_response=True,
            name="PUT /carts/{id}/items/{product_id}",
        ) as resp:
            if resp.status_code != 200 and not is_stock_conflict(resp):
                resp.failure(f"Update quantity failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def view_summary(self):
        self.client.get(f"/carts/{self.customer_id}/summary", name="GET /carts/{id}/summary")

    @task
    def checkout(self):
        with self.client.post(
            f"/carts/{self.customer_id}/checkout",
            json=checkout_data(),
            catch_response=True,
            name="POST /carts/{id}/checkout",
        ) as resp:
            if resp.status_code == 201 or is_stock_conflict(resp):
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def order_history(self):
        self.client.get("/orders", params={"customer_id": self.customer_id}, name="GET /orders")

    @task
    def done(self):
        self.interrupt()


class HotProductBuyer(HttpUser):
    """Many customers competing for one scarce product."""

    tasks = [HotProductCheckout]
    wait_time = between(0.05, 0.2)
    weight = 3


class BrowsingShopper(HttpUser):
    """Customers browsing and buying across the wider catalogue."""

    tasks = [BrowsingJourney]
    wait_time = between(0.5, 2.0)
    weight = 1

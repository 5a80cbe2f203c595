"""Storefront load testing: Locust entry point.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Hot-product contention only:
    locust -f loadtests/locustfile.py HotProductBuyer

    # Headless (CI mode):
    locust -f loadtests/locustfile.py --headless \
           -u 50 -r 10 -t 60s --csv=results/loadtest

Afterwards the hot product must never show a negative stock level, and
the successful checkouts must not have bought more than was seeded.
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.checkout import HOT_PRODUCT_ID, BrowsingShopper, HotProductBuyer  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Stock conflicts (409) are expected under contention and are not logged.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400 and response.status_code != 409:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the hot product's remaining stock when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(f"{environment.host}/products/{HOT_PRODUCT_ID}", timeout=5)
        product = resp.json()
        print(f"[LOADTEST] {HOT_PRODUCT_ID} remaining stock: {product.get('stock_quantity')}")
        if product.get("stock_quantity", 0) < 0:
            print("[LOADTEST] OVERSOLD: stock went negative")
        print()
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch final stock: {e}\n")

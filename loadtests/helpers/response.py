"""Response error extraction for load test observability.

Parses storefront API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Checkout errors (404/409/503): {"error": {"code": "...", "message": "...", ...}}
- Protean validation errors (400): {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON, return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict) and "code" in error:
            detail = f"{error['code']}: {error.get('message', '')}"
            for line in error.get("lines", []):
                detail += f" | {line['product_id']} requested {line['requested']} available {line['available']}"
            return detail
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        return str(error)

    return str(body)[:300]


def is_stock_conflict(response: Response) -> bool:
    """True when the API refused a request because stock ran short."""
    if response.status_code != 409:
        return False
    try:
        return response.json()["error"]["code"] == "insufficient_stock"
    except (ValueError, KeyError, TypeError):
        return False

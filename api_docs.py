"""
API documentation payload served at /api/docs and rendered at /api/docs/html.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from html import escape
from typing import Any, Dict

_TOKEN_HEADERS = {"Authorization": "Bearer <token> (or legacy header `token: <token>`)"}

SECTIONS: Dict[str, Dict[str, Any]] = {
    "dashboard": {
        "title": "Order Dashboard",
        "description": "Filtered, sorted views over the caller's or all orders",
        "endpoints": [
            {
                "method": "GET",
                "path": "/api/dashboard/orders",
                "description": "Orders after search, status/date filters and sort",
                "headers": _TOKEN_HEADERS,
                "query": {
                    "scope": "mine | all (all requires an admin token)",
                    "search": "string (matches id, customer name/email, address names)",
                    "status": "all | pending | confirmed | shipped | delivered | cancelled",
                    "date": "all | today | week | month",
                    "sort": "id | date | amount | status",
                    "direction": "asc | desc",
                },
                "response": {
                    "success": "boolean",
                    "orders": "array",
                    "stats": "object (total_orders, total_revenue, selected, filtered)",
                    "stale": "boolean (true when the order API failed and cached data is shown)",
                },
            },
            {
                "method": "POST",
                "path": "/api/dashboard/invoice",
                "description": "Aggregate selected orders into an invoice",
                "headers": _TOKEN_HEADERS,
                "body": {"orderIds": "array of order ids", "scope": "mine | all"},
                "response": {"success": "boolean", "invoice": "object"},
            },
        ],
    },
    "cart": {
        "title": "Cart",
        "description": "Re-ordering past purchases",
        "endpoints": [
            {
                "method": "POST",
                "path": "/api/dashboard/reorder",
                "description": "Add every item of one of the caller's orders to their cart",
                "headers": _TOKEN_HEADERS,
                "body": {"orderId": "string"},
                "response": {"success": "boolean", "message": "string", "report": "object"},
            },
            {
                "method": "GET",
                "path": "/api/cart",
                "description": "The caller's cart",
                "headers": _TOKEN_HEADERS,
                "response": {"success": "boolean", "cart": "array"},
            },
        ],
    },
}

ERROR_CODES = {
    "401": {"description": "Unauthorized: missing, invalid or expired token"},
    "404": {"description": "Not found: the referenced order does not exist"},
    "422": {"description": "Validation error: malformed request"},
    "500": {"description": "Unknown error"},
    "503": {"description": "Order API unavailable"},
}


def documentation(base_url: str) -> Dict[str, Any]:
    return {
        "title": "Storefront Orders Dashboard API",
        "version": "1.0.0",
        "description": "Order views, invoices and re-ordering on top of the storefront order API",
        "baseUrl": base_url,
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
        "endpoints": SECTIONS,
        "authentication": {
            "tokenFormat": "Bearer <your-jwt-token>",
            "headerName": "Authorization",
            "alternativeHeader": "token: <your-jwt-token>",
        },
        "errorCodes": {
            code: {**info, "example": {"success": False, "message": info["description"]}}
            for code, info in ERROR_CODES.items()
        },
    }


def _pre(value: Any) -> str:
    return f"<pre>{escape(json.dumps(value, indent=2))}</pre>"


def render_html(doc: Dict[str, Any]) -> str:
    parts = [
        "<!DOCTYPE html><html><head><meta charset='utf-8'>",
        f"<title>{escape(doc['title'])}</title></head><body>",
        f"<h1>{escape(doc['title'])} <small>v{escape(doc['version'])}</small></h1>",
        f"<p>{escape(doc['description'])}</p>",
        f"<p>Base URL: <code>{escape(doc['baseUrl'])}</code></p>",
    ]
    for section in doc["endpoints"].values():
        parts.append(f"<div class='section'><h2>{escape(section['title'])}</h2>")
        parts.append(f"<p>{escape(section['description'])}</p>")
        for ep in section["endpoints"]:
            parts.append(
                f"<div class='endpoint'><h3><span class='method'>{ep['method']}</span> "
                f"<code>{escape(ep['path'])}</code></h3><p>{escape(ep['description'])}</p>"
            )
            for label, key in (("Headers", "headers"), ("Query", "query"), ("Request Body", "body")):
                if ep.get(key):
                    parts.append(f"<h4>{label}:</h4>{_pre(ep[key])}")
            parts.append(f"<h4>Response:</h4>{_pre(ep['response'])}</div>")
        parts.append("</div>")

    auth = doc["authentication"]
    parts.append("<div class='section'><h2>Authentication</h2>")
    parts.append(f"<p>Token format: <code>{escape(auth['tokenFormat'])}</code></p>")
    parts.append(f"<p>Alternative header: <code>{escape(auth['alternativeHeader'])}</code></p></div>")

    parts.append("<div class='section'><h2>Error Codes</h2>")
    for code, info in doc["errorCodes"].items():
        parts.append(f"<div class='endpoint'><h3>{code} - {escape(info['description'])}</h3>{_pre(info['example'])}</div>")
    parts.append("</div></body></html>")
    return "\n".join(parts)

#!/usr/bin/env python3
"""
Smoke test for the lead submission backend.

Start the API first (in another terminal), with mock integrations unless you
really want records created in FieldRoutes / Payrix:
  INTEGRATIONS_MODE=mock uvicorn leadflow.api.main:app --host 127.0.0.1 --port 8081

Then run this script:
  python scripts/submit_test_lead.py
  python scripts/submit_test_lead.py --with-payment --base-url http://127.0.0.1:8081

If you see "Connection refused", the API is not running; start uvicorn as above.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, Optional

import requests

# Payrix sandbox test card; never a real card number.
TEST_CARD = "4111 1111 1111 1111"


def post_json(url: str, data: Dict[str, Any], api_key: Optional[str] = None, timeout: int = 60) -> requests.Response:
    headers = {"X-API-KEY": api_key} if api_key else {}
    return requests.post(url, json=data, headers=headers, timeout=timeout)


def build_form(with_payment: bool) -> Dict[str, str]:
    form = {
        "fname": "Jane",
        "lname": "Doe",
        "email": "jane.doe@example.com",
        "phone": "(555) 123-4567",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
    }
    if with_payment:
        form.update({"cardNumber": TEST_CARD, "cvv": "123", "expiry": "12/29"})
    return form


def main() -> int:
    parser = argparse.ArgumentParser(description="Submit a sample lead to the backend")
    parser.add_argument("--base-url", default="http://localhost:8081", help="API base URL")
    parser.add_argument("--api-key", default=None, help="X-API-KEY header value, if the backend requires one")
    parser.add_argument("--with-payment", action="store_true", help="Include test card fields")
    args = parser.parse_args()
    base = args.base_url.rstrip("/")

    print("=== Lead submission smoke test ===\n")
    print(f"Base URL: {base}\n")

    print("1) GET /health")
    try:
        health = requests.get(f"{base}/health", timeout=10)
        health.raise_for_status()
        print(f"   {health.json()}\n")
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        if "Connection refused" in str(e) or "Failed to establish" in str(e):
            print("   → Start the API first: uvicorn leadflow.api.main:app --host 127.0.0.1 --port 8081")
        return 1

    print("2) POST /api/leads/submit")
    body = {"formData": build_form(args.with_payment)}
    try:
        resp = post_json(f"{base}/api/leads/submit", body, api_key=args.api_key)
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        return 1

    print(f"   HTTP {resp.status_code}")
    print(json.dumps(resp.json(), indent=2))
    return 0 if resp.ok else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
run_demo.py - End-to-end demo against a running storefront
- Registers the demo customer (ignores "already registered")
- Logs in to obtain the user id
- Places an order and prints the invoice
- Lists the customer's orders
Confirmation emails go to the customer and OWNER_EMAIL configured on the server.
"""

import requests
import json
import os
import sys
from typing import Any, Dict, List, Optional

class DemoRunner:
    def __init__(self):
        self.base_url = os.getenv("DEMO_BASE_URL", "http://localhost:3000")
        self.api_url = f"{self.base_url}/api"
        self.cust_name = os.getenv("DEMO_CUST_NAME", "Test User")
        self.cust_email = os.getenv("DEMO_CUST_EMAIL", "testuser@example.com")
        self.cust_pass = os.getenv("DEMO_CUST_PASS", "testpassword")
        self.user_id: Optional[int] = None

    # ---------- helpers ----------
    def show_step(self, title: str):
        print(f"\n=== {title} ===")

    def call_api(
        self,
        method: str,
        url: str,
        data: Optional[Any] = None,
        expected_status: List[int] = [200, 201],
        timeout: int = 30,
    ) -> Dict[str, Any]:
        print(f"\n-> {method} {url}")
        if data is not None:
            print(f"   Body: {json.dumps(data, indent=2)}")
        try:
            resp = requests.request(method=method, url=url, json=data, timeout=timeout)
        except requests.exceptions.RequestException as e:
            print(f"   Error: \033[91m{e}\033[0m")
            return {"status": None, "data": None, "error": str(e)}

        status_color = "\033[92m" if resp.status_code in expected_status else "\033[93m"
        print(f"   Status: {status_color}{resp.status_code}\033[0m")
        try:
            js = resp.json()
        except json.JSONDecodeError:
            return {"status": resp.status_code, "data": None}
        print(json.dumps(js, indent=2, ensure_ascii=False))
        return {"status": resp.status_code, "data": js}

    # ---------- flow ----------
    def preflight(self) -> bool:
        self.show_step("Preflight: service health")
        res = self.call_api("GET", f"{self.base_url}/health")
        data = res["data"] if isinstance(res["data"], dict) else {}
        return res["status"] == 200 and data.get("status") == "healthy"

    def register_and_login(self) -> bool:
        self.show_step("Register customer")
        res = self.call_api("POST", f"{self.api_url}/register", {
            "name": self.cust_name, "email": self.cust_email, "password": self.cust_pass,
        }, expected_status=[201, 409])
        if res["status"] == 409:
            print("   User may already exist")

        self.show_step("Login")
        res = self.call_api("POST", f"{self.api_url}/login", {
            "email": self.cust_email, "password": self.cust_pass,
        })
        if res["status"] != 200:
            print("Login failed: Invalid credentials")
            return False
        self.user_id = res["data"]["user"]["id"]
        return True

    def place_order(self) -> bool:
        self.show_step("Place order")
        res = self.call_api("POST", f"{self.api_url}/order", {
            "userId": self.user_id,
            "email": self.cust_email,
            "cart": [
                {"name": "Crystal Necklace", "price": 500, "qty": 1},
                {"name": "Crystal Bracelet", "price": 300, "qty": 2},
            ],
            "total": 1100,
            "shippingInfo": {
                "name": self.cust_name,
                "address": "123 Test Street",
                "city": "Test City",
                "state": "Test State",
                "pincode": "123456",
                "phone": "1234567890",
            },
        })
        if res["status"] != 200:
            return False
        print("\n" + res["data"]["invoice"])
        return True

    def list_orders(self):
        self.show_step("Customer orders")
        self.call_api("GET", f"{self.api_url}/user/{self.user_id}/orders")

    def run(self) -> int:
        if not self.preflight():
            print("Service is not healthy; continuing anyway")
        if not self.register_and_login():
            return 1
        if not self.place_order():
            return 1
        self.list_orders()
        print(f"\nCheck emails for order confirmation. Customer: {self.cust_email}")
        return 0

if __name__ == "__main__":
    sys.exit(DemoRunner().run())

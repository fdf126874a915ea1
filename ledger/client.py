# ledger/client.py
"""Small requests-based client for the ledger HTTP API.

Holds the bearer token the way the browser dashboard did: it is set by
``login`` and dropped as soon as the server answers 401 or 403.
"""
import logging

import requests

logger = logging.getLogger("ledger-backend")

API_BASE = "http://localhost:3000"


class ApiError(Exception):
    def __init__(self, status, message):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return None


class LedgerClient:
    def __init__(self, base_url=API_BASE, token=None, timeout=10, session=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def is_authenticated(self):
        return bool(self.token)

    def logout(self):
        self.token = None

    def api_request(self, method, path, json=None, auth=True):
        headers = {}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = self.base_url + "/api" + path

        try:
            resp = self.session.request(
                method.upper(), url, headers=headers, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Connection to ledger API failed: {e}")
            raise ApiError(0, f"Connection failed: {e}")
        payload = safe_json(resp) or {}

        if auth and resp.status_code in (401, 403):
            self.logout()
        if resp.status_code >= 400:
            raise ApiError(resp.status_code, payload.get("error", "Request failed"))
        return payload

    def signup(self, name, email, password, initial_balance, dob=None, address=None):
        body = {
            "name": name,
            "email": email,
            "password": password,
            "initialBalance": initial_balance,
        }
        if dob:
            body["dob"] = dob
        if address:
            body["address"] = address
        return self.api_request("POST", "/signup", json=body, auth=False)["userId"]

    def login(self, email, password):
        payload = self.api_request("POST", "/login", json={"email": email, "password": password}, auth=False)
        self.token = payload.get("token")
        return payload.get("user")

    def me(self):
        return self.api_request("GET", "/me")

    def balance(self):
        return self.me()["currentBalance"]

    def transactions(self):
        return self.api_request("GET", "/transactions")["transactions"]

    def add_transaction(self, amount, type, reason):
        body = {"amount": amount, "type": type, "reason": reason}
        return self.api_request("POST", "/transactions", json=body)["transaction"]

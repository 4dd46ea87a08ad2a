"""
Python client for the Expenso API.

Keeps the logged-in user and token the way the web dashboard keeps them in
cookies, and turns error responses into ``ApiError`` so a front end can show
them as notifications.
"""

from datetime import date, datetime, timedelta
import json
import logging
import os

import requests

from config import get_settings

logger = logging.getLogger("expenso.client")

STATE_TTL = timedelta(days=7)


class ApiError(Exception):
    def __init__(self, status, code, message):
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message

    def __str__(self):
        return f"{self.code} ({self.status}): {self.message}"


class ClientState:
    """Token and user of the current session, persisted like a cookie."""

    def __init__(self, token=None, user=None):
        self.token = token
        self.user = user

    @property
    def logged_in(self):
        return self.token is not None

    def clear(self):
        self.token = None
        self.user = None

    def save(self, path):
        data = {
            "token": self.token,
            "user": json.dumps(self.user) if self.user is not None else None,
            "expires": (datetime.now() + STATE_TTL).isoformat(),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    @classmethod
    def load(cls, path):
        if not os.path.exists(path):
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if datetime.fromisoformat(data["expires"]) <= datetime.now():
                return cls()
            user = json.loads(data["user"]) if data.get("user") else None
            return cls(token=data.get("token"), user=user)
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Ignoring unreadable client state at %s", path)
            return cls()


class ExpensoClient:
    def __init__(self, base_url=None, session=None, state=None, timeout=10):
        self.base_url = (base_url or get_settings().api_base).rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.state = state if state is not None else ClientState()
        self.timeout = timeout

    def _request(self, method, path, json=None, params=None):
        headers = {}
        if self.state.token:
            headers["Authorization"] = f"Bearer {self.state.token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        response = self.session.request(
            method,
            self.base_url + path,
            json=json,
            params=params or None,
            headers=headers,
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise self._error(response)
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.text

    @staticmethod
    def _error(response):
        try:
            body = response.json()
        except ValueError:
            body = {}
        code = body.get("code", "INTERNAL_SERVER_ERROR")
        detail = body.get("detail", response.text)
        if isinstance(detail, list):
            # validation errors
            detail = "; ".join(str(d.get("msg", d)) for d in detail)
        return ApiError(response.status_code, code, detail)

    # auth / profile

    def _signed_in(self, data):
        self.state.token = data["token"]
        self.state.user = data["user"]
        return data

    def register(self, name, email, password):
        data = self._request(
            "POST", "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return self._signed_in(data)

    def login(self, email, password):
        data = self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        return self._signed_in(data)

    def logout(self):
        data = self._request("POST", "/auth/logout")
        self.state.clear()
        return data

    def reset_password(self, email, new_password):
        return self._request(
            "POST", "/auth/reset-password",
            json={"email": email, "new_password": new_password},
        )

    def profile(self):
        user = self._request("GET", "/api/users/me")["user"]
        self.state.user = user
        return user

    def update_profile(self, name=None, email=None):
        data = self._request(
            "PATCH", "/api/users/me", json={"name": name, "email": email}
        )
        self.state.user = data["user"]
        return data

    def delete_account(self):
        data = self._request("DELETE", "/api/users/me")
        self.state.clear()
        return data

    # transactions

    def expenses(self, q=None, on=None):
        if isinstance(on, date):
            on = on.isoformat()
        return self._request("GET", "/api/expenses", params={"q": q, "on": on})["expenses"]

    def expense(self, expense_id):
        return self._request("GET", f"/api/expenses/{expense_id}")["expense"]

    def add_expense(self, title, amount, category, description=None):
        return self._request(
            "POST", "/api/expenses",
            json={
                "title": title,
                "amount": amount,
                "category": category,
                "description": description,
            },
        )

    def edit_expense(self, expense_id, title, amount, category, description=None):
        return self._request(
            "PUT", f"/api/expenses/{expense_id}",
            json={
                "title": title,
                "amount": amount,
                "category": category,
                "description": description,
            },
        )

    def remove_expense(self, expense_id):
        return self._request("DELETE", f"/api/expenses/{expense_id}")

    def analytics(self, months=None):
        return self._request("GET", "/api/analytics", params={"months": months})

    def category_trends(self, start=None, end=None):
        params = {
            "start": start.isoformat() if isinstance(start, date) else start,
            "end": end.isoformat() if isinstance(end, date) else end,
        }
        return self._request("GET", "/api/analytics/category-trends", params=params)

    def export_report(self):
        return self._request("GET", "/api/export-report")

    # categories / accounts

    def categories(self):
        return self._request("GET", "/api/categories")

    def add_category(self, name):
        return self._request("POST", "/api/categories", json={"name": name})

    def remove_category(self, category_id):
        return self._request("DELETE", f"/api/categories/{category_id}")

    def accounts(self):
        return self._request("GET", "/api/accounts")

    def create_account(self, name):
        return self._request("POST", "/api/accounts", json={"name": name})

"""
Pytest configuration.

Adds the project root to the Python path so tests can import domain,
repositories, services, and api, and provides an in-memory stand-in for the
remote admin service mounted through httpx.MockTransport.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx
import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repositories.client import AdminApiClient, AdminApiSettings  # noqa: E402

TEST_BASE_URL = "http://admin.test/api"
TEST_TOKEN = "test-token"


class FakeAdminBackend:
    """
    Minimal admin service: plans, users, and Authentication Keys in memory.

    Every request is recorded in `calls` as (method, path, json_body, params).

    Failure injection:
    - fail_distribute_at: 1-indexed positions (over all distribute calls) that
      answer with success=false
    - failures: endpoint name -> "network" or (status_code, message), where the
      endpoint name is one of list, stats, generate, distribute,
      distribute-email, users, plans
    """

    def __init__(self, *, bare_lists: bool = False):
        self.bare_lists = bare_lists
        self.plans: Dict[str, Dict[str, Any]] = {
            "plan-p": {"id": "plan-p", "name": "Starter", "amount": "100.00", "isActive": True},
            "plan-q": {"id": "plan-q", "name": "Growth", "amount": "500.00", "isActive": True},
        }
        self.users: List[Dict[str, Any]] = [
            {"id": f"u-{n}", "name": f"User {n}", "email": f"user{n}@example.com",
             "phone": f"55500000{n:02d}", "kycStatus": "APPROVED"}
            for n in range(1, 6)
        ]
        self.keys: List[Dict[str, Any]] = []
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]], Dict[str, str]]] = []
        self.fail_distribute_at: Set[int] = set()
        self.failures: Dict[str, Any] = {}
        self._distribute_count = 0

    # Helpers

    def client(self) -> AdminApiClient:
        settings = AdminApiSettings(base_url=TEST_BASE_URL, token=TEST_TOKEN, timeout_seconds=5)
        return AdminApiClient(settings, transport=httpx.MockTransport(self.handler))

    def add_keys(self, plan_id: str, quantity: int, **overrides: Any) -> List[Dict[str, Any]]:
        plan = self.plans[plan_id]
        created = []
        for _ in range(quantity):
            n = len(self.keys) + 1
            record = {
                "id": f"key-{n}",
                "code": f"AK-{n:06d}",
                "planId": plan_id,
                "plan": {"id": plan_id, "name": plan["name"], "amount": plan["amount"]},
                "generatedBy": "admin-1",
                "distributedTo": None,
                "distributedToUser": None,
                "usedBy": None,
                "usedByUser": None,
                "usedAt": None,
                "status": "ACTIVE",
                "createdAt": "2025-01-01T00:00:00.000Z",
            }
            record.update(overrides)
            self.keys.append(record)
            created.append(record)
        return created

    def calls_to(self, fragment: str) -> List[Tuple[str, str, Optional[Dict[str, Any]], Dict[str, str]]]:
        return [call for call in self.calls if fragment in call[1]]

    @property
    def distribute_calls(self) -> List[Tuple[str, Optional[Dict[str, Any]]]]:
        return [(path, body) for method, path, body, _ in self.calls if "/distribute" in path]

    # Transport

    def _ok(self, data: Any = None, message: str = "OK", pagination: Any = None) -> httpx.Response:
        body: Dict[str, Any] = {"success": True, "message": message}
        if data is not None:
            body["data"] = data
        if pagination is not None:
            body["pagination"] = pagination
        return httpx.Response(200, json=body)

    def _error(self, status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"success": False, "message": message})

    def _injected(self, name: str, request: httpx.Request) -> Optional[httpx.Response]:
        failure = self.failures.get(name)
        if failure is None:
            return None
        if failure == "network":
            raise httpx.ConnectError("connection refused", request=request)
        status, message = failure
        return self._error(status, message)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        body = json.loads(request.content) if request.content else None
        params = dict(request.url.params)
        self.calls.append((request.method, path, body, params))

        if request.headers.get("Authorization") != f"Bearer {TEST_TOKEN}":
            return self._error(401, "Unauthorized")

        parts = [p for p in path.split("/") if p]
        if len(parts) == 4 and parts[:2] == ["admin", "auth-keys"] and parts[3] in ("distribute", "distribute-email"):
            return self._distribute(request, parts[2], parts[3], body or {})

        routes = {
            ("GET", "/admin/auth-keys"): ("list", lambda: self._list_keys(params)),
            ("GET", "/admin/auth-keys/stats"): ("stats", lambda: self._stats(params.get("planId"))),
            ("POST", "/admin/auth-keys/generate"): ("generate", lambda: self._generate(body or {})),
            ("GET", "/admin/users"): ("users", lambda: self._users(params)),
            ("GET", "/admin/plans"): ("plans", lambda: self._ok(list(self.plans.values()))),
        }
        route = routes.get((request.method, "/" + "/".join(parts)))
        if route is None:
            return self._error(404, "Not found")
        name, respond = route
        injected = self._injected(name, request)
        if injected is not None:
            return injected
        return respond()

    def _list_keys(self, params: Dict[str, str]) -> httpx.Response:
        rows = self.keys
        if params.get("planId"):
            rows = [k for k in rows if k["planId"] == params["planId"]]
        if params.get("status"):
            rows = [k for k in rows if k["status"] == params["status"]]
        if params.get("distributedTo"):
            rows = [k for k in rows if k["distributedTo"] == params["distributedTo"]]
        if self.bare_lists:
            return httpx.Response(200, json=rows)
        page = int(params.get("page", 1))
        limit = int(params.get("limit", 20))
        total_pages = max((len(rows) + limit - 1) // limit, 1)
        window = rows[(page - 1) * limit: page * limit]
        return self._ok(
            window,
            pagination={"page": page, "limit": limit, "total": len(rows), "totalPages": total_pages},
        )

    @staticmethod
    def _count(rows: List[Dict[str, Any]]) -> Dict[str, int]:
        distributed = sum(1 for k in rows if k["distributedTo"])
        return {
            "total": len(rows),
            "active": sum(1 for k in rows if k["status"] == "ACTIVE"),
            "used": sum(1 for k in rows if k["status"] == "USED"),
            "distributed": distributed,
            "notDistributed": len(rows) - distributed,
            "remaining": sum(1 for k in rows if k["status"] == "ACTIVE" and not k["distributedTo"]),
        }

    def _stats(self, plan_id: Optional[str]) -> httpx.Response:
        plan_ids = [plan_id] if plan_id else list(self.plans)
        scoped = [k for k in self.keys if k["planId"] in plan_ids]
        payload = self._count(scoped)
        payload["statsByPlan"] = [
            {"planId": pid, "planName": self.plans[pid]["name"],
             **self._count([k for k in self.keys if k["planId"] == pid])}
            for pid in plan_ids
        ]
        return self._ok(payload)

    def _generate(self, body: Dict[str, Any]) -> httpx.Response:
        plan_id = body.get("planId")
        if plan_id not in self.plans:
            return self._error(404, "Plan not found")
        self.add_keys(plan_id, int(body["quantity"]))
        return self._ok(message=f"{body['quantity']} keys generated")

    def _distribute(self, request: httpx.Request, key_id: str, action: str, body: Dict[str, Any]) -> httpx.Response:
        self._distribute_count += 1
        injected = self._injected(action, request)
        if injected is not None:
            return injected
        if self._distribute_count in self.fail_distribute_at:
            return self._error(400, "Failed to send key")

        key = next((k for k in self.keys if k["id"] == key_id), None)
        if key is None:
            return self._error(404, "Authentication Key not found")
        if key["distributedTo"] or key["status"] != "ACTIVE":
            return self._error(400, "Authentication Key already distributed")

        if action == "distribute":
            user = next((u for u in self.users if u["id"] == body.get("userId")), None)
            if user is None:
                return self._error(404, "User not found")
            key["distributedTo"] = user["id"]
            key["distributedToUser"] = {"id": user["id"], "name": user["name"], "email": user["email"]}
        else:
            key["distributedTo"] = body.get("email")
        return self._ok(message="Authentication Key distributed")

    def _users(self, params: Dict[str, str]) -> httpx.Response:
        rows = self.users
        search = params.get("search", "").lower()
        if search:
            rows = [u for u in rows if search in u["name"].lower() or search in u["email"].lower()]
        limit = int(params.get("limit", 100))
        return self._ok(rows[:limit])


@pytest.fixture
def backend() -> FakeAdminBackend:
    return FakeAdminBackend()


@pytest.fixture
def admin_client(backend: FakeAdminBackend) -> AdminApiClient:
    return backend.client()

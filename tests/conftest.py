from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator

import httpx
import pytest

from adapters.http_client import SESSION_HEADER, MetabaseClient, build_client
from core.config import SetupSettings

SETTING_KEYS = (
    "MB_ADMIN_EMAIL",
    "MB_ADMIN_PASSWORD",
    "MB_ENCRYPTION_SECRET_KEY",
    "MB_SITE_NAME",
    "MB_ADMIN_FIRST_NAME",
    "MB_ADMIN_LAST_NAME",
    "MB_REPORT_TIMEZONE",
    "SUPABASE_DB_HOST",
    "SUPABASE_DB_PORT",
    "SUPABASE_DB_NAME",
    "SUPABASE_DB_USER",
    "SUPABASE_DB_PASSWORD",
    "SUPABASE_SSL",
    "SUPABASE_SSLMODE",
    "SUPABASE_DB_DISPLAY_NAME",
    "METABASE_URL",
    "METABASE_MAX_WAIT_SECONDS",
    "METABASE_WAIT_INTERVAL_SECONDS",
    "METABASE_HTTP_TIMEOUT_SECONDS",
    "METABASE_JAR",
    "METABASE_DATA_DIR",
)

REQUIRED_ENV = {
    "MB_ADMIN_EMAIL": "admin@example.com",
    "MB_ADMIN_PASSWORD": "s3cret-admin",
    "MB_ENCRYPTION_SECRET_KEY": "0123456789abcdef",
    "SUPABASE_DB_HOST": "db.example.com",
    "SUPABASE_DB_NAME": "postgres",
    "SUPABASE_DB_USER": "ro_user",
    "SUPABASE_DB_PASSWORD": "secret",
}


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in SETTING_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Nothing in a test may pick up a developer's real `.env`.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_env(tmp_path: Path) -> Callable[..., Path]:
    """Write `KEY=value` lines to `tmp_path/.env` (the working directory)."""

    def _write(values: dict[str, str], name: str = ".env") -> Path:
        path = tmp_path / name
        path.write_text("".join(f"{k}={v}\n" for k, v in values.items()), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings() -> SetupSettings:
    values = {key.lower(): value for key, value in REQUIRED_ENV.items()}
    return SetupSettings(_env_file=None, **values)  # type: ignore[call-arg]


@dataclass
class FakeMetabase:
    """In-memory stand-in for the Metabase REST API.

    Records every request as `(method, path)` in `calls` and the decoded JSON
    bodies in `bodies`.
    """

    setup_token: str | None = None
    databases: list[dict[str, Any]] = field(default_factory=list)
    wrap_database_list: bool = False
    healthy_after: int = 0
    properties_status: int = 200
    setup_status: int = 200
    login_status: int = 200
    create_status: int = 200
    session_id: str = "session-1"
    password: str = REQUIRED_ENV["MB_ADMIN_PASSWORD"]
    calls: list[tuple[str, str]] = field(default_factory=list)
    bodies: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    session_headers: list[str | None] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        self.session_headers.append(request.headers.get(SESSION_HEADER))
        body: dict[str, Any] = {}
        if request.content:
            body = json.loads(request.content)
            self.bodies.append((path, body))

        if path == "/api/health":
            health_calls = sum(1 for _, p in self.calls if p == "/api/health")
            if health_calls > self.healthy_after:
                return httpx.Response(200, json={"status": "ok"})
            return httpx.Response(503, json={"status": "initializing"})

        if path == "/api/session/properties":
            if self.properties_status != 200:
                return httpx.Response(self.properties_status)
            return httpx.Response(200, json={"setup-token": self.setup_token, "version": {"tag": "v0.50.0"}})

        if path == "/api/setup" and request.method == "POST":
            if self.setup_status != 200:
                return httpx.Response(self.setup_status, json={"errors": {"database": "rejected"}})
            self.setup_token = None
            return httpx.Response(200, json={"id": "setup-session"})

        if path == "/api/session" and request.method == "POST":
            if self.login_status != 200 or body.get("password") != self.password:
                return httpx.Response(401, json={"errors": {"password": "did not match stored password"}})
            return httpx.Response(200, json={"id": self.session_id})

        if path == "/api/database":
            if request.headers.get(SESSION_HEADER) != self.session_id:
                return httpx.Response(401, text="Unauthenticated")
            if request.method == "GET":
                if self.wrap_database_list:
                    return httpx.Response(200, json={"data": self.databases, "total": len(self.databases)})
                return httpx.Response(200, json=self.databases)
            if self.create_status != 200:
                return httpx.Response(self.create_status, json={"message": "connection refused"})
            created = {"id": len(self.databases) + 1, "name": body["name"], "engine": body["engine"]}
            self.databases.append(created)
            return httpx.Response(200, json=created)

        return httpx.Response(404, text="Not found")

    @property
    def mutating_calls(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] == "POST" and call[1] != "/api/session"]

    def client(self, settings: SetupSettings) -> MetabaseClient:
        return build_client(settings, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_metabase() -> FakeMetabase:
    return FakeMetabase()


@pytest.fixture
def client(fake_metabase: FakeMetabase, settings: SetupSettings) -> Iterator[MetabaseClient]:
    api = fake_metabase.client(settings)
    yield api
    api.close()

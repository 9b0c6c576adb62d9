"""Wrapper de httpx para la API de Metabase.

Por qué un wrapper:
- Estandariza base URL, timeouts, headers y la cabecera de sesión.
- Traduce fallos de httpx a `HttpError`/`AuthError` con el path que falló.
- Facilita testeo: se inyecta un `httpx.MockTransport` en `build_client`.
"""

from __future__ import annotations

from typing import Any

import httpx

from core.config import SetupSettings
from core.domain.models import LoginRequest, SessionCredential
from core.errors import AuthError, HttpError

SESSION_HEADER = "X-Metabase-Session"
SESSION_PATH = "/api/session"


class MetabaseClient:
    """Cliente síncrono de un solo intento (implementa `MetabaseAPI`)."""

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @property
    def base_url(self) -> str:
        return str(self._http.base_url).rstrip("/")

    def __enter__(self) -> MetabaseClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def login(self, identity: str, secret: str) -> SessionCredential:
        body = LoginRequest(username=identity, password=secret).model_dump()
        try:
            payload = self.mutate(SESSION_PATH, body)
        except HttpError as exc:
            raise AuthError(f"Login failed for {identity}: {exc.detail}") from exc

        session_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(session_id, str) or not session_id:
            raise AuthError(f"Login failed for {identity}: no session id in response")
        return SessionCredential(session_id)

    def ping(self, path: str, *, timeout: float | None = None) -> bool:
        """GET sin decodificar el cuerpo: cualquier 2xx es éxito, nunca lanza.

        `timeout` acota el intento (nunca por encima del timeout del cliente).
        """

        per_request = self._http.timeout
        if timeout is not None:
            configured = per_request.read
            per_request = httpx.Timeout(timeout if configured is None else min(timeout, configured))
        try:
            response = self._http.get(path, timeout=per_request)
        except httpx.HTTPError:
            return False
        return response.is_success

    def query(self, path: str, credential: SessionCredential | None = None) -> Any:
        return self._send("GET", path, credential=credential)

    def mutate(
        self,
        path: str,
        body: dict[str, Any],
        credential: SessionCredential | None = None,
    ) -> Any:
        return self._send("POST", path, body=body, credential=credential)

    def _send(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        credential: SessionCredential | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if credential:
            headers[SESSION_HEADER] = credential

        try:
            response = self._http.request(method, path, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise HttpError(path, f"request failed: {exc}") from exc

        if not response.is_success:
            raise HttpError(
                path,
                f"HTTP {response.status_code} {_short_body(response)}".rstrip(),
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise HttpError(
                path,
                "response is not valid JSON",
                status_code=response.status_code,
            ) from exc


def _short_body(response: httpx.Response, max_chars: int = 200) -> str:
    text = response.text.strip()
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"


def build_client(
    settings: SetupSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> MetabaseClient:
    """Crea un `MetabaseClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las llamadas se comporten igual.
    - `transport` permite sustituir la red en tests.
    """

    http = httpx.Client(
        base_url=settings.metabase_url,
        timeout=httpx.Timeout(settings.metabase_http_timeout_seconds),
        headers={
            "User-Agent": "metabase-setup/0.1",
            "Accept": "application/json",
        },
        transport=transport,
    )
    return MetabaseClient(http)

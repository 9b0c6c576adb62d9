"""Contrato del cliente de la API de Metabase.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- El Core no importa httpx: el adaptador concreto vive en `adapters/`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import SessionCredential


@runtime_checkable
class MetabaseAPI(Protocol):
    """Operaciones mínimas contra la API REST de Metabase.

    Reglas de diseño:
    - Síncrono y de un solo intento: nada de retries aquí.
    - Cualquier no-2xx o fallo de red se lanza como `HttpError`.
    """

    @property
    def base_url(self) -> str:
        ...

    def login(self, identity: str, secret: str) -> SessionCredential:
        """Autentica y devuelve la credencial de sesión (o lanza `AuthError`)."""

        ...

    def ping(self, path: str, *, timeout: float | None = None) -> bool:
        """GET de health: True con cualquier 2xx, sin mirar el cuerpo."""

        ...

    def query(self, path: str, credential: SessionCredential | None = None) -> Any:
        """GET con cabecera de sesión opcional; devuelve el JSON decodificado."""

        ...

    def mutate(
        self,
        path: str,
        body: dict[str, Any],
        credential: SessionCredential | None = None,
    ) -> Any:
        """POST con cuerpo JSON y cabecera de sesión opcional."""

        ...

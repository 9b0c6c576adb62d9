"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Los payloads de la API de Metabase se construyen como objetos tipados y se
  serializan con `model_dump`; nada de interpolar JSON a mano.
- Validan tipos (puerto entero, ssl booleano) antes de salir por la red.

Nota:
- Estos modelos describen *qué* se envía, no *cómo* se envía.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NewType

from pydantic import BaseModel, Field

SessionCredential = NewType("SessionCredential", str)


class SetupState(str, Enum):
    """Estados del reconciliador."""

    UNKNOWN = "unknown"
    NEEDS_SETUP = "needs_setup"
    ALREADY_SETUP = "already_setup"
    RECONCILED = "reconciled"


class ReconcileAction(str, Enum):
    SETUP_PERFORMED = "setup_performed"
    DATABASE_CREATED = "database_created"
    DATABASE_PRESENT = "database_present"


class DatabaseDetails(BaseModel):
    """Detalles de conexión Postgres tal como los espera Metabase."""

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    dbname: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    password: str
    ssl: bool = True
    sslmode: str = "require"


class DatabaseRegistration(BaseModel):
    """Cuerpo de `POST /api/database` (y bloque `database` del setup)."""

    engine: str = Field(default="postgres", min_length=1)
    name: str = Field(..., min_length=1, description="Nombre visible; clave de idempotencia.")
    details: DatabaseDetails


class AdminUser(BaseModel):
    first_name: str
    last_name: str
    email: str = Field(..., min_length=1)
    password: str


class SitePrefs(BaseModel):
    site_name: str
    allow_tracking: bool = False
    report_timezone: str = "UTC"


class SetupRequest(BaseModel):
    """Cuerpo de `POST /api/setup`: token + admin + prefs + base, en una sola llamada."""

    token: str = Field(..., min_length=1)
    user: AdminUser
    prefs: SitePrefs
    database: DatabaseRegistration


class LoginRequest(BaseModel):
    username: str
    password: str


@dataclass(frozen=True)
class ReconcileResult:
    """Resultado final de una reconciliación."""

    state: SetupState
    action: ReconcileAction
    database_name: str
    database_id: int | None = None

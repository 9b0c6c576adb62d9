"""Setup idempotente de Metabase.

Este módulo contiene la máquina de estados del setup:

    UNKNOWN -> (NEEDS_SETUP | ALREADY_SETUP) -> RECONCILED

Cada transición es una función independiente que recibe el cliente y la
configuración y devuelve el siguiente estado (o el resultado final). Los
efectos visibles (logs de color) se delegan en `SetupHooks`, así el Core no
imprime nada y puede reutilizarse desde tests u otros entry-points.

Garantías y límites:
- Con setup-token: una única llamada `POST /api/setup`; el token es de un
  solo uso, así que un fallo es fatal y no se reintenta.
- Sin setup-token: login, listado y, solo si falta, alta de la base.
- La idempotencia se decide por nombre exacto. Dos registros con nombres
  distintos que apuntan a la misma base se conservan ambos.
- No hay check-and-set: dos ejecuciones simultáneas pueden duplicar el alta.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from core.config import SetupSettings
from core.domain.models import (
    AdminUser,
    DatabaseDetails,
    DatabaseRegistration,
    ReconcileAction,
    ReconcileResult,
    SetupRequest,
    SetupState,
    SitePrefs,
)
from core.errors import HttpError
from core.interfaces import MetabaseAPI

PROPERTIES_PATH = "/api/session/properties"
SETUP_PATH = "/api/setup"
DATABASE_PATH = "/api/database"


@dataclass
class SetupHooks:
    """Optional callbacks for UI layers (info/warning lines)."""

    info: Callable[[str], None] | None = None
    warning: Callable[[str], None] | None = None

    def emit_info(self, message: str) -> None:
        if self.info:
            self.info(message)

    def emit_warning(self, message: str) -> None:
        if self.warning:
            self.warning(message)


def build_database_registration(settings: SetupSettings) -> DatabaseRegistration:
    return DatabaseRegistration(
        engine="postgres",
        name=settings.supabase_db_display_name,
        details=DatabaseDetails(
            host=settings.supabase_db_host,
            port=settings.supabase_db_port,
            dbname=settings.supabase_db_name,
            user=settings.supabase_db_user,
            password=settings.supabase_db_password.get_secret_value(),
            ssl=settings.supabase_ssl,
            sslmode=settings.supabase_sslmode,
        ),
    )


def build_setup_request(settings: SetupSettings, token: str) -> SetupRequest:
    return SetupRequest(
        token=token,
        user=AdminUser(
            first_name=settings.mb_admin_first_name,
            last_name=settings.mb_admin_last_name,
            email=settings.mb_admin_email,
            password=settings.mb_admin_password.get_secret_value(),
        ),
        prefs=SitePrefs(
            site_name=settings.mb_site_name,
            allow_tracking=False,
            report_timezone=settings.mb_report_timezone,
        ),
        database=build_database_registration(settings),
    )


def extract_setup_token(properties: Any) -> str | None:
    """Devuelve el setup-token si existe, no está vacío y no es `null`."""

    if not isinstance(properties, dict):
        return None
    token = properties.get("setup-token")
    if not isinstance(token, str):
        return None
    token = token.strip()
    if not token or token == "null":
        return None
    return token


def find_registration(databases: Any, name: str) -> dict[str, Any] | None:
    """Busca un registro por nombre exacto.

    Acepta tanto un array (Metabase antiguo) como `{"data": [...]}`.
    """

    if isinstance(databases, dict):
        databases = databases.get("data")
    if not isinstance(databases, list):
        return None
    for item in databases:
        if isinstance(item, dict) and item.get("name") == name:
            return item
    return None


def detect_setup_state(
    api: MetabaseAPI,
    hooks: SetupHooks | None = None,
) -> tuple[SetupState, str | None]:
    """UNKNOWN -> NEEDS_SETUP | ALREADY_SETUP.

    Si la consulta falla se asume instancia ya inicializada: el login
    posterior dirá si no es así.
    """

    try:
        properties = api.query(PROPERTIES_PATH)
    except HttpError as exc:
        (hooks or SetupHooks()).emit_warning(
            f"Could not read session properties ({exc.detail}), assuming Metabase is already set up"
        )
        return SetupState.ALREADY_SETUP, None

    token = extract_setup_token(properties)
    if token is None:
        return SetupState.ALREADY_SETUP, None
    return SetupState.NEEDS_SETUP, token


def perform_setup(
    api: MetabaseAPI,
    settings: SetupSettings,
    token: str,
    hooks: SetupHooks | None = None,
) -> ReconcileResult:
    """NEEDS_SETUP -> RECONCILED (admin + prefs + base en una sola llamada)."""

    hooks = hooks or SetupHooks()
    hooks.emit_info("Performing initial Metabase setup...")

    request = build_setup_request(settings, token)
    api.mutate(SETUP_PATH, request.model_dump(mode="json"))

    hooks.emit_info("Setup completed successfully")
    return ReconcileResult(
        state=SetupState.RECONCILED,
        action=ReconcileAction.SETUP_PERFORMED,
        database_name=request.database.name,
    )


def ensure_database(
    api: MetabaseAPI,
    settings: SetupSettings,
    hooks: SetupHooks | None = None,
) -> ReconcileResult:
    """ALREADY_SETUP -> RECONCILED: login, listar y dar de alta solo si falta."""

    hooks = hooks or SetupHooks()
    name = settings.supabase_db_display_name

    hooks.emit_info("Logging in...")
    credential = api.login(
        settings.mb_admin_email,
        settings.mb_admin_password.get_secret_value(),
    )

    existing = find_registration(api.query(DATABASE_PATH, credential), name)
    if existing is not None:
        hooks.emit_info(f"{name} database already exists")
        return ReconcileResult(
            state=SetupState.RECONCILED,
            action=ReconcileAction.DATABASE_PRESENT,
            database_name=name,
            database_id=_as_id(existing.get("id")),
        )

    hooks.emit_info(f"Adding {name} database...")
    registration = build_database_registration(settings)
    created = api.mutate(DATABASE_PATH, registration.model_dump(mode="json"), credential)
    hooks.emit_info("Database added successfully")

    created_id = created.get("id") if isinstance(created, dict) else None
    return ReconcileResult(
        state=SetupState.RECONCILED,
        action=ReconcileAction.DATABASE_CREATED,
        database_name=name,
        database_id=_as_id(created_id),
    )


def _as_id(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def reconcile(
    api: MetabaseAPI,
    settings: SetupSettings,
    hooks: SetupHooks | None = None,
) -> ReconcileResult:
    """Lleva la instancia de UNKNOWN a RECONCILED."""

    hooks = hooks or SetupHooks()
    state = SetupState.UNKNOWN
    token: str | None = None

    while True:
        if state is SetupState.UNKNOWN:
            state, token = detect_setup_state(api, hooks)
        elif state is SetupState.NEEDS_SETUP and token is not None:
            return perform_setup(api, settings, token, hooks)
        else:
            hooks.emit_info("Metabase already configured, checking database...")
            return ensure_database(api, settings, hooks)

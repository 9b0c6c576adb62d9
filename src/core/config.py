"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Los componentes reciben un `SetupSettings` ya validado; nadie lee
  `os.environ` por su cuenta.
"""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigurationError

DEFAULT_ENV_FILE = Path(".env")

_SettingsT = TypeVar("_SettingsT", bound=BaseSettings)


class SetupSettings(BaseSettings):
    """Configuración del setup idempotente.

    Orden de los campos requeridos = orden en que se reportan si faltan.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        # `VAR=` cuenta como no definida: los opcionales caen a su default.
        env_ignore_empty=True,
        frozen=True,
    )

    # Requeridas
    mb_admin_email: str = Field(..., min_length=1, description="Email del admin de Metabase.")
    mb_admin_password: SecretStr = Field(..., description="Password del admin.")
    mb_encryption_secret_key: SecretStr = Field(
        ...,
        description="Clave con la que Metabase cifra credenciales guardadas.",
    )
    supabase_db_host: str = Field(..., min_length=1)
    supabase_db_name: str = Field(..., min_length=1)
    supabase_db_user: str = Field(..., min_length=1)
    supabase_db_password: SecretStr

    # Opcionales
    mb_site_name: str = Field(default="Local Metabase", min_length=1)
    supabase_db_port: int = Field(default=5432, ge=1, le=65535)
    supabase_ssl: bool = Field(default=True)
    supabase_sslmode: str = Field(default="require", min_length=1)

    supabase_db_display_name: str = Field(
        default="Supabase",
        min_length=1,
        description="Nombre con el que se registra (y se busca) la base en Metabase.",
    )
    mb_admin_first_name: str = Field(default="Local", min_length=1)
    mb_admin_last_name: str = Field(default="Admin", min_length=1)
    mb_report_timezone: str = Field(default="UTC", min_length=1)

    metabase_url: str = Field(default="http://localhost:3000", min_length=8)
    metabase_max_wait_seconds: float = Field(default=120.0, gt=0)
    metabase_wait_interval_seconds: float = Field(default=5.0, gt=0)
    metabase_http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )


def _describe_validation_error(exc: ValidationError) -> ConfigurationError:
    first = exc.errors()[0]
    key = str(first["loc"][0]).upper() if first.get("loc") else "<unknown>"
    if first.get("type") == "missing":
        return ConfigurationError(f"Required environment variable {key} is not set", key=key)
    return ConfigurationError(f"Invalid value for {key}: {first.get('msg')}", key=key)


def load_from_env_file(settings_cls: type[_SettingsT], env_file: Path = DEFAULT_ENV_FILE) -> _SettingsT:
    """Construye `settings_cls` desde `env_file` + entorno del proceso.

    Falla con `ConfigurationError` si el fichero no existe o no se puede
    leer como UTF-8, o si pydantic rechaza algún valor (se reporta la
    primera variable en orden de campos).
    """

    if not env_file.is_file():
        raise ConfigurationError(
            f"{env_file} file not found. Copy .env.example to .env and configure it."
        )
    try:
        return settings_cls(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as exc:
        raise _describe_validation_error(exc) from None
    except (UnicodeDecodeError, OSError) as exc:
        raise ConfigurationError(f"{env_file} could not be read: {exc}") from exc


def load_settings(env_file: Path = DEFAULT_ENV_FILE) -> SetupSettings:
    return load_from_env_file(SetupSettings, env_file)

"""Arranque local de Metabase (`java -jar metabase.jar`).

Responsabilidad:
- Validar que `java` y el jar existen antes de lanzar nada.
- Construir el entorno del proceso hijo: base de aplicación H2 embebida,
  tracking desactivado, la clave de cifrado del `.env` y el puerto de
  `METABASE_URL`.
- Ejecutar Metabase en primer plano y devolver su código de salida.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Mapping
from urllib.parse import urlsplit

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.config import DEFAULT_ENV_FILE
from core.errors import DependencyMissingError

JAVA_BINARY = "java"
H2_DB_FILENAME = "metabase.db"
DEFAULT_JETTY_PORT = 3000


class LauncherSettings(BaseSettings):
    """Subconjunto del `.env` que necesita el arranque."""

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        frozen=True,
    )

    mb_encryption_secret_key: SecretStr
    mb_admin_email: str | None = None
    metabase_url: str = Field(default="http://localhost:3000", min_length=8)
    metabase_jar: Path = Field(default=Path("metabase.jar"))
    metabase_data_dir: Path = Field(default=Path("metabase-data"))


def check_dependencies(settings: LauncherSettings) -> None:
    missing: list[str] = []
    if shutil.which(JAVA_BINARY) is None:
        missing.append(JAVA_BINARY)
    if not settings.metabase_jar.is_file():
        missing.append(str(settings.metabase_jar))
    if missing:
        raise DependencyMissingError(
            missing,
            hint="Install a Java runtime and download metabase.jar from https://www.metabase.com/start/oss/jar",
        )


def build_environment(settings: LauncherSettings, base_env: Mapping[str, str]) -> dict[str, str]:
    env = dict(base_env)
    env.update(
        {
            "MB_DB_TYPE": "h2",
            "MB_DB_FILE": str(settings.metabase_data_dir / H2_DB_FILENAME),
            "MB_ANON_TRACKING_OPTOUT": "true",
            "MB_ENCRYPTION_SECRET_KEY": settings.mb_encryption_secret_key.get_secret_value(),
            # Metabase escucha donde METABASE_URL dice que estará.
            "MB_JETTY_PORT": str(urlsplit(settings.metabase_url).port or DEFAULT_JETTY_PORT),
        }
    )
    return env


def launch(settings: LauncherSettings, *, base_env: Mapping[str, str] | None = None) -> int:
    """Lanza Metabase en primer plano; bloquea hasta que el proceso termina."""

    check_dependencies(settings)
    settings.metabase_data_dir.mkdir(parents=True, exist_ok=True)
    env = build_environment(settings, os.environ if base_env is None else base_env)
    completed = subprocess.run(
        [JAVA_BINARY, "-jar", str(settings.metabase_jar)],
        env=env,
        check=False,
    )
    return completed.returncode

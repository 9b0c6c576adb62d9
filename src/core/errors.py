"""Taxonomía de errores del setup.

Por qué una jerarquía propia:
- El Core y los adaptadores solo lanzan; la CLI es la única capa que captura
  `SetupError`, imprime el mensaje y traduce a código de salida.
- Cada tipo lleva su `exit_code` para que scripts de orquestación distingan
  la causa sin parsear texto.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base de todos los errores fatales del setup."""

    exit_code: int = 1


class ConfigurationError(SetupError):
    """Falta el `.env` o una variable requerida está vacía/inválida."""

    exit_code = 2

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class DependencyMissingError(SetupError):
    """Falta una herramienta externa (p.ej. `java`) o el jar de Metabase."""

    exit_code = 3

    def __init__(self, missing: list[str], *, hint: str | None = None) -> None:
        message = f"Missing dependencies: {' '.join(missing)}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)
        self.missing = missing


class ReadinessTimeoutError(SetupError):
    """El endpoint de health nunca respondió 2xx dentro del tiempo máximo."""

    exit_code = 4

    def __init__(self, url: str, elapsed: float) -> None:
        super().__init__(f"Metabase at {url} failed to start within {elapsed:.0f} seconds")
        self.url = url
        self.elapsed = elapsed


class AuthError(SetupError):
    """Login rechazado o respuesta sin credencial de sesión."""

    exit_code = 5


class HttpError(SetupError):
    """Respuesta no-2xx o fallo de red en una llamada concreta."""

    exit_code = 6

    def __init__(self, path: str, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{path}: {detail}")
        self.path = path
        self.detail = detail
        self.status_code = status_code

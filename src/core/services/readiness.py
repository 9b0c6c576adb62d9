"""Espera bloqueante hasta que Metabase responde en `/api/health`."""

from __future__ import annotations

import time
from typing import Callable

from core.errors import ReadinessTimeoutError
from core.interfaces import MetabaseAPI

HEALTH_PATH = "/api/health"
DEFAULT_MAX_WAIT_SECONDS = 120.0
DEFAULT_INTERVAL_SECONDS = 5.0


def wait_until_ready(
    api: MetabaseAPI,
    *,
    max_wait: float = DEFAULT_MAX_WAIT_SECONDS,
    interval: float = DEFAULT_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> float:
    """Sondea el health check hasta un 2xx y devuelve los segundos transcurridos.

    Todo cuelga de un único deadline (`start + max_wait`): cada intento usa
    como timeout el tiempo restante y la pausa entre intentos tampoco lo
    supera. Al agotarse se lanza `ReadinessTimeoutError` (120/5 = 24
    intentos con los valores por defecto).
    """

    start = clock()
    deadline = start + max_wait
    while True:
        remaining = deadline - clock()
        if remaining <= 0:
            break
        if api.ping(HEALTH_PATH, timeout=remaining):
            return clock() - start

        remaining = deadline - clock()
        if remaining <= 0:
            break
        sleep(min(interval, remaining))

    raise ReadinessTimeoutError(api.base_url, clock() - start)

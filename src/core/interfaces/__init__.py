"""Contratos del Core.

`MetabaseAPI` es lo único que el reconciliador y el poller saben del cliente
HTTP; los tests pueden sustituirlo por cualquier objeto con la misma forma.
"""

from core.interfaces.metabase import MetabaseAPI

__all__ = ["MetabaseAPI"]

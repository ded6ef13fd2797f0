"""
Taxonomía de errores del pipeline
"""
from typing import Optional


class DwsError(Exception):
    def __init__(self, kind: str, detail: str = "", context: Optional[str] = None):
        self.kind = kind
        self.detail = detail
        self.context = context
        msg = f"{kind}: {detail}" if detail else kind
        if context:
            msg = f"{msg} [{context}]"
        super().__init__(msg)


class SourceFormatError(DwsError):
    """El texto/HTML de origen ya no coincide con la estructura asumida."""


class NetworkFetchError(DwsError):
    """La descarga de la página de estaciones falló. Siempre fatal."""

    def __init__(self, kind: str, detail: str = "", context: Optional[str] = None,
                 status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(kind, detail, context)


class GeometryError(DwsError):
    """Polígono degenerado o distancia imposible de calcular."""


class MatchAmbiguityWarning(UserWarning):
    pass


class DataIntegrityWarning(UserWarning):
    pass

"""
Contratos de los colaboradores externos del pipeline.
"""
from typing import List, Protocol

from .types import RawPage


class PageTextSource(Protocol):
    """Extrae el texto plano de un PDF, una cadena por página."""

    def __call__(self, pdf_path: str) -> List[RawPage]:
        ...


class StationRowSource(Protocol):
    """Descarga la tabla HTML de estaciones, una cadena por fila."""

    def __call__(self, url: str) -> List[str]:
        ...

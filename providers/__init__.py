"""
Tipos y contratos de las fuentes de datos.
"""
from .types import DailyTableBlock, RawPage, RegionGeometry
from .base import PageTextSource, StationRowSource

__all__ = [
    "DailyTableBlock",
    "RawPage",
    "RegionGeometry",
    "PageTextSource",
    "StationRowSource",
]

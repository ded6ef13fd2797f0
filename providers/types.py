"""
Tipos de dominio para las fuentes de datos del pipeline.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from models.geometry import polygon_centroid

Ring = Sequence[Tuple[float, float]]
Polygon = Sequence[Ring]


@dataclass(frozen=True)
class RawPage:
    """Texto plano de una página del PDF."""
    page_index: int
    text: str


@dataclass(frozen=True)
class DailyTableBlock:
    """Texto de una tabla diaria y la línea donde aparece su fecha."""
    page_index: int
    text: str
    date_line: Optional[str] = None


@dataclass(frozen=True)
class RegionGeometry:
    """
    Región administrativa con nombre.

    polygons sigue la convención GeoJSON: cada polígono es una lista de
    anillos (el primero exterior, el resto huecos) de puntos (lon, lat).
    """
    region_id: str
    name: str
    polygons: Tuple[Polygon, ...]

    def centroid(self) -> Tuple[float, float]:
        """Devuelve (lat, lon). Lanza GeometryError si el polígono es degenerado."""
        return polygon_centroid(self.polygons)

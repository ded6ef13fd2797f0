"""
Cálculos geográficos: distancias, centroides y estación más cercana

Todas las coordenadas de entrada son geográficas (grados, WGS84). Los
centroides se calculan sobre una proyección equirectangular local y se
devuelven de nuevo en grados, así que nunca se mezclan unidades.
"""
import math
from typing import Iterable, Optional, Sequence, Tuple

from config import EARTH_RADIUS_KM
from errors import GeometryError

_MIN_AREA = 1e-12  # rad² - por debajo el polígono se considera degenerado


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calcula distancia en km entre dos coordenadas usando fórmula de Haversine

    Args:
        lat1, lon1: Coordenadas del primer punto
        lat2, lon2: Coordenadas del segundo punto

    Returns:
        Distancia en kilómetros
    """
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(a)))

    return EARTH_RADIUS_KM * c


def _as_point(point) -> Tuple[float, float]:
    try:
        lon, lat = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        raise GeometryError("bad_point", f"punto no válido: {point!r}")
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise GeometryError("bad_point", f"coordenada no finita: {point!r}")
    return lon, lat


def _ring_moments(ring: Sequence[Tuple[float, float]]) -> Tuple[float, float, float]:
    """Área (valor absoluto) y centroide de un anillo ya proyectado."""
    n = len(ring)
    if n < 3:
        return 0.0, 0.0, 0.0

    cross_sum = 0.0
    cx = 0.0
    cy = 0.0
    for i in range(n):
        x0, y0 = ring[i]
        x1, y1 = ring[(i + 1) % n]
        cross = x0 * y1 - x1 * y0
        cross_sum += cross
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross

    signed_area = cross_sum / 2.0
    if abs(signed_area) < _MIN_AREA:
        return 0.0, 0.0, 0.0
    return abs(signed_area), cx / (6.0 * signed_area), cy / (6.0 * signed_area)


def polygon_centroid(polygons: Iterable) -> Tuple[float, float]:
    """
    Centroide ponderado por área de un (multi)polígono GeoJSON.

    Returns:
        (lat, lon) en grados

    Raises:
        GeometryError: sin anillos, coordenadas no válidas o área nula
    """
    polygons = [[[_as_point(p) for p in ring] for ring in poly] for poly in polygons]
    exterior_lats = [lat for poly in polygons if poly for _, lat in poly[0]]
    if not exterior_lats:
        raise GeometryError("empty", "polígono sin anillo exterior")

    lat0 = math.radians(sum(exterior_lats) / len(exterior_lats))
    scale = math.cos(lat0)
    if scale <= 0.0:
        raise GeometryError("degenerate", "latitud media en el polo")

    total_area = 0.0
    sum_x = 0.0
    sum_y = 0.0
    for poly in polygons:
        for k, ring in enumerate(poly):
            projected = [(math.radians(lon) * scale, math.radians(lat)) for lon, lat in ring]
            area, cx, cy = _ring_moments(projected)
            # Los anillos interiores son huecos
            sign = 1.0 if k == 0 else -1.0
            total_area += sign * area
            sum_x += sign * area * cx
            sum_y += sign * area * cy

    if not math.isfinite(total_area) or total_area < _MIN_AREA:
        raise GeometryError("degenerate", "área nula, no se puede calcular el centroide")

    lat = math.degrees(sum_y / total_area)
    lon = math.degrees(sum_x / total_area / scale)
    return lat, lon


def nearest_station(lat: float, lon: float,
                    stations: Iterable[Tuple[str, float, float]]) -> Tuple[Optional[str], float]:
    """
    Estación más cercana a un punto.

    En caso de empate gana la primera en el orden de entrada.

    Returns:
        (nombre, distancia_km); (None, nan) si no hay estaciones
    """
    best_name = None
    best_dist = float("nan")
    for name, s_lat, s_lon in stations:
        dist = haversine_distance(lat, lon, s_lat, s_lon)
        if not math.isfinite(dist):
            raise GeometryError("distance", f"distancia no finita a {name}")
        if best_name is None or dist < best_dist:
            best_name = name
            best_dist = dist
    return best_name, best_dist

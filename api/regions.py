"""
Carga de límites administrativos desde GeoJSON
"""
import json
import logging
from typing import Any, Dict, List, Optional

from config import REGION_ID_PROPERTY, REGION_NAME_PROPERTY
from providers.types import RegionGeometry

logger = logging.getLogger(__name__)


def load_geojson(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _feature_polygons(geometry: Optional[Dict[str, Any]]):
    if not isinstance(geometry, dict):
        return None
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if kind == "Polygon":
        return (coords,)
    if kind == "MultiPolygon":
        return tuple(coords)
    return None


def regions_from_geojson(
    payload: Dict[str, Any],
    id_property: str = REGION_ID_PROPERTY,
    name_property: str = REGION_NAME_PROPERTY,
    report=None,
) -> List[RegionGeometry]:
    """
    Regiones de una FeatureCollection (Polygon o MultiPolygon).

    Las features sin geometría utilizable se registran en el informe.
    """
    regions: List[RegionGeometry] = []
    for idx, feature in enumerate(payload.get("features", [])):
        props = feature.get("properties") or {}
        region_id = str(props.get(id_property, feature.get("id", idx)))
        polygons = _feature_polygons(feature.get("geometry"))
        if not polygons:
            if report is not None:
                report.region_error(region_id, "geometría ausente o no poligonal")
            continue
        name = str(props.get(name_property, region_id))
        regions.append(RegionGeometry(region_id=region_id, name=name, polygons=polygons))
    logger.info(f"Regiones cargadas: {len(regions)}")
    return regions


def load_regions_geojson(path: str, id_property: str = REGION_ID_PROPERTY,
                         name_property: str = REGION_NAME_PROPERTY, report=None) -> List[RegionGeometry]:
    return regions_from_geojson(load_geojson(path), id_property, name_property, report)

"""
Listado de ubicaciones de estaciones obtenido por scraping.

Cada fila de la tabla HTML llega como una cadena con 4 campos lógicos
separados por saltos de línea: nombre, país, "lat,lon" y tipo.
"""
import logging
from typing import Dict, List, Sequence

import pandas as pd

from config import LOCATION_FIELDS, MAX_LAT, MAX_LON, MIN_LAT, MIN_LON, RELEVANT_STATION_TYPE
from errors import SourceFormatError
from services.report import RunReport
from utils.helpers import normalize_text_input

logger = logging.getLogger(__name__)

LOCATION_COLUMNS = ["station_name", "country", "station_type", "latitude", "longitude"]


def parse_coordinates(raw: str):
    """'51.52,-2.58' -> (51.52, -2.58), validando rangos"""
    parts = [p.strip() for p in str(raw).split(",")]
    if len(parts) != 2:
        raise SourceFormatError("coordinates", "se esperaba 'lat,lon'", context=raw)
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError:
        raise SourceFormatError("coordinates", "coordenadas no numéricas", context=raw)
    if not (MIN_LAT <= lat <= MAX_LAT and MIN_LON <= lon <= MAX_LON):
        raise SourceFormatError("coordinates", "coordenadas fuera de rango", context=raw)
    return lat, lon


def parse_location_row(raw: str) -> Dict:
    fields = [normalize_text_input(f) for f in str(raw).split("\n")]
    fields = [f for f in fields if f]
    if len(fields) != LOCATION_FIELDS:
        raise SourceFormatError("location_row", f"{len(fields)} campos, se esperaban {LOCATION_FIELDS}", context=raw)
    name, country, coords, station_type = fields
    lat, lon = parse_coordinates(coords)
    return {
        "station_name": name,
        "country": country,
        "station_type": station_type,
        "latitude": lat,
        "longitude": lon,
    }


def parse_location_rows(rows: Sequence[str], report: RunReport) -> pd.DataFrame:
    """Construye el dataset de ubicaciones; las filas mal formadas se registran y se saltan"""
    records: List[Dict] = []
    for idx, raw in enumerate(rows):
        try:
            records.append(parse_location_row(raw))
        except SourceFormatError as exc:
            report.skip_location(f"fila {idx}", str(exc))
    logger.info(f"Ubicaciones válidas: {len(records)} de {len(rows)} filas")
    frame = pd.DataFrame(records, columns=LOCATION_COLUMNS)
    return frame.astype({"latitude": float, "longitude": float})


def _type_key(series: pd.Series) -> pd.Series:
    return series.fillna("").astype(str).str.strip().str.lower()


def dedupe_locations(locations: pd.DataFrame, prefer_type: str = RELEVANT_STATION_TYPE) -> pd.DataFrame:
    """
    Una sola fila por par de coordenadas idéntico.

    Entre duplicados gana la primera del tipo preferido; si ninguna lo es,
    la primera del listado. El orden original se mantiene.
    """
    rank = (_type_key(locations["station_type"]) != prefer_type.strip().lower()).astype(int)
    kept = (
        locations.assign(_rank=rank)
        .sort_values("_rank", kind="mergesort")
        .drop_duplicates(subset=["latitude", "longitude"], keep="first")
        .index
    )
    deduped = locations.loc[sorted(kept)]
    dropped = len(locations) - len(deduped)
    if dropped:
        logger.info(f"Ubicaciones duplicadas eliminadas: {dropped}")
    return deduped.reset_index(drop=True)


def filter_station_type(locations: pd.DataFrame, station_type: str = RELEVANT_STATION_TYPE) -> pd.DataFrame:
    wanted = station_type.strip().lower()
    mask = _type_key(locations["station_type"]) == wanted
    return locations[mask].reset_index(drop=True)

"""
Asignación de estación más cercana a cada región y agregados diarios.
"""
import logging
from typing import List, Sequence

import numpy as np
import pandas as pd

from errors import GeometryError
from models.geometry import nearest_station
from providers.types import RegionGeometry
from services.report import RunReport

logger = logging.getLogger(__name__)

ASSIGNMENT_COLUMNS = ["region_id", "region_name", "centroid_lat", "centroid_lon", "closest_station", "distance_km"]
DAILY_COLUMNS = ["station_name", "day", "value"]
AGGREGATE_COLUMNS = ["region_id", "closest_station", "day", "aggregated_value"]


def assign_closest_stations(
    regions: Sequence[RegionGeometry],
    stations: pd.DataFrame,
    report: RunReport,
) -> pd.DataFrame:
    """
    region -> estación resuelta más cercana a su centroide (haversine, km).

    Solo cuentan las estaciones con coordenadas; los empates se quedan con
    la primera en el orden de `stations`. Una región con geometría
    degenerada queda sin estación y se registra.
    """
    located = stations.dropna(subset=["latitude", "longitude"])
    candidates = list(zip(located["station_name"], located["latitude"], located["longitude"]))

    rows = []
    for region in regions:
        row = {
            "region_id": region.region_id,
            "region_name": region.name,
            "centroid_lat": np.nan,
            "centroid_lon": np.nan,
            "closest_station": None,
            "distance_km": np.nan,
        }
        try:
            lat, lon = region.centroid()
            row["centroid_lat"], row["centroid_lon"] = lat, lon
            name, dist = nearest_station(lat, lon, candidates)
        except GeometryError as exc:
            report.region_error(region.region_id, str(exc))
        else:
            if name is None:
                report.region_error(region.region_id, "ninguna estación con coordenadas")
            row["closest_station"] = name
            row["distance_km"] = dist
        rows.append(row)

    assignments = pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)
    logger.info(f"Regiones con estación asignada: {assignments['closest_station'].notna().sum()} de {len(assignments)}")
    return assignments


def daily_station_means(observations: pd.DataFrame, measurement: str) -> pd.DataFrame:
    """
    Media diaria de una medida por estación sobre las horas disponibles.

    Los valores ausentes no cuentan; si faltan todos, el resultado es NaN.
    """
    if measurement not in observations.columns:
        raise KeyError(f"Medida desconocida: {measurement}")
    values = pd.to_numeric(observations[measurement], errors="coerce")
    frame = pd.DataFrame({
        "station_name": observations["station_name"],
        "day": pd.to_datetime(observations["date"]).dt.normalize(),
        "value": values,
    })
    daily = frame.groupby(["station_name", "day"], sort=True)["value"].mean().reset_index()
    return daily[DAILY_COLUMNS]


def region_daily_aggregates(assignments: pd.DataFrame, daily: pd.DataFrame) -> pd.DataFrame:
    """
    region -> estación -> media diaria. Una fila por región y día.

    Las regiones sin estación reciben NaN en todos los días.
    """
    days: List = sorted(daily["day"].unique())
    links = assignments[["region_id", "closest_station"]]
    grid = links.merge(pd.DataFrame({"day": days}), how="cross")
    result = grid.merge(
        daily.rename(columns={"station_name": "closest_station", "value": "aggregated_value"}),
        on=["closest_station", "day"],
        how="left",
    )
    result["day"] = pd.to_datetime(result["day"])
    return result[AGGREGATE_COLUMNS].sort_values(["region_id", "day"], kind="mergesort").reset_index(drop=True)

"""
Mapas de coropletas por región: figura estática de un día y animación
de todo el mes.

Solo consume el dataset (region_id, day, aggregated_value) y el GeoJSON.
"""
import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go

from config import REGION_ID_PROPERTY

logger = logging.getLogger(__name__)

COLORSCALE = "Blues"
FRAME_DURATION_MS = 500


def _day_label(day) -> str:
    return pd.Timestamp(day).strftime("%Y-%m-%d")


def _value_range(aggregates: pd.DataFrame):
    values = pd.to_numeric(aggregates["aggregated_value"], errors="coerce")
    if values.notna().any():
        return float(values.min()), float(values.max())
    return 0.0, 1.0


def _choropleth(day_rows: pd.DataFrame, geojson: Dict[str, Any], id_property: str,
                zmin: float, zmax: float, title: str) -> go.Choropleth:
    return go.Choropleth(
        geojson=geojson,
        featureidkey=f"properties.{id_property}",
        locations=day_rows["region_id"].astype(str),
        z=day_rows["aggregated_value"],
        zmin=zmin,
        zmax=zmax,
        colorscale=COLORSCALE,
        marker_line_width=0.3,
        colorbar=dict(title=title),
        customdata=day_rows[["closest_station"]].fillna("—").values,
        hovertemplate="%{location}<br>%{customdata[0]}: %{z:.1f}<extra></extra>",
    )


def _base_layout(fig: go.Figure, title: str) -> None:
    fig.update_geos(fitbounds="locations", visible=False)
    fig.update_layout(
        title=title,
        margin=dict(l=0, r=0, t=40, b=0),
        height=700,
    )


def build_region_map(aggregates: pd.DataFrame, geojson: Dict[str, Any], day=None,
                     id_property: str = REGION_ID_PROPERTY, measurement: str = "") -> go.Figure:
    """Mapa de un día (por defecto el primero disponible)"""
    days = sorted(aggregates["day"].unique())
    if not days:
        raise ValueError("Sin agregados que dibujar")
    target = pd.Timestamp(day) if day is not None else pd.Timestamp(days[0])
    rows = aggregates[pd.to_datetime(aggregates["day"]) == target]
    zmin, zmax = _value_range(aggregates)

    fig = go.Figure(_choropleth(rows, geojson, id_property, zmin, zmax, measurement))
    _base_layout(fig, f"{measurement} {_day_label(target)}".strip())
    return fig


def build_region_animation(aggregates: pd.DataFrame, geojson: Dict[str, Any],
                           id_property: str = REGION_ID_PROPERTY, measurement: str = "") -> go.Figure:
    """Un frame por día con botón de reproducción y slider"""
    days = sorted(aggregates["day"].unique())
    if not days:
        raise ValueError("Sin agregados que dibujar")
    zmin, zmax = _value_range(aggregates)
    day_series = pd.to_datetime(aggregates["day"])

    frames: List[go.Frame] = []
    for day in days:
        rows = aggregates[day_series == pd.Timestamp(day)]
        frames.append(go.Frame(
            data=[_choropleth(rows, geojson, id_property, zmin, zmax, measurement)],
            name=_day_label(day),
        ))

    fig = go.Figure(data=frames[0].data, frames=frames)
    _base_layout(fig, measurement)
    play_args = [None, {"frame": {"duration": FRAME_DURATION_MS, "redraw": True}, "fromcurrent": True}]
    fig.update_layout(
        updatemenus=[dict(type="buttons", showactive=False,
                          buttons=[dict(label="▶", method="animate", args=play_args)])],
        sliders=[dict(
            currentvalue=dict(prefix="Día: "),
            steps=[
                dict(label=frame.name, method="animate",
                     args=[[frame.name], {"mode": "immediate", "frame": {"duration": 0, "redraw": True}}])
                for frame in frames
            ],
        )],
    )
    return fig


def write_figure(fig: go.Figure, path: str) -> str:
    folder: Optional[str] = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    fig.write_html(path, include_plotlyjs="cdn", auto_play=False)
    logger.info(f"Figura guardada en {path}")
    return path

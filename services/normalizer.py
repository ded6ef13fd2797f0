"""
Normalización de las tablas diarias.

Cada tabla llega en formato ancho (una fila por estación, columnas
medida_hora) y sale con una fila por (estación, hora) y una columna por
medida, con la fecha de la tabla en todas las filas.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from config import COLUMN_SLOT_SEPARATOR, DWS_DATE_FORMAT, DWS_DATE_PATTERN, DWS_ID_COLUMNS, TIME_SLOTS
from errors import SourceFormatError
from providers.types import DailyTableBlock
from services.report import RunReport
from services.tables import TableLayout, parse_table
from utils.helpers import is_missing_token

logger = logging.getLogger(__name__)

ID_COLUMNS = ["station_id", "station_name"]
BASE_COLUMNS = ID_COLUMNS + ["date", "time"]


def parse_table_date(date_line: Optional[str], pattern: str = DWS_DATE_PATTERN) -> pd.Timestamp:
    """
    Fecha de la tabla a partir de una línea tipo "... for 1 January 2020".

    Raises:
        SourceFormatError: la línea no existe o no sigue el patrón
    """
    if not date_line:
        raise SourceFormatError("date", "tabla sin línea de fecha")
    match = re.search(pattern, date_line)
    if match is None:
        raise SourceFormatError("date", "la línea no sigue el patrón de fecha", context=date_line)
    day, month, year = match.groups()
    try:
        parsed = datetime.strptime(f"{day} {month} {year}", DWS_DATE_FORMAT)
    except ValueError:
        raise SourceFormatError("date", "fecha imposible", context=date_line)
    return pd.Timestamp(parsed)


def split_measure_column(column: str) -> Tuple[str, str]:
    """'TEMP_0000' -> ('TEMP', '0000')"""
    name, sep, slot = str(column).rpartition(COLUMN_SLOT_SEPARATOR)
    if not sep or not name or slot not in TIME_SLOTS:
        raise SourceFormatError("column", f"columna sin hora de observación reconocible: {column!r}")
    return name, slot


def coerce_measurement(series: pd.Series) -> pd.Series:
    """Tokens de "sin dato" a NaN; numérico si todos los valores presentes lo son"""
    cleaned = series.map(lambda v: np.nan if is_missing_token(v) else str(v).strip())
    present = cleaned.dropna()
    if pd.to_numeric(present, errors="coerce").notna().all():
        return pd.to_numeric(cleaned, errors="coerce")
    return cleaned.astype(object)


def normalize_table(
    wide: pd.DataFrame,
    date: pd.Timestamp,
    id_columns: int = DWS_ID_COLUMNS,
    coerce: bool = True,
) -> pd.DataFrame:
    """
    Pasa una tabla ancha a una fila por (estación, hora).

    Con coerce=False las medidas quedan como texto (se convierten después,
    una vez unidas todas las tablas del mes).

    Raises:
        SourceFormatError: columnas no descomponibles, identificadores vacíos
            o repetidos, o número de filas distinto de estaciones x horas
    """
    source_ids = list(wide.columns[:id_columns])
    renamed = dict(zip(source_ids[:2], ID_COLUMNS))
    id_vars = ID_COLUMNS + source_ids[2:]
    frame = wide.rename(columns=renamed)

    frame = frame.assign(
        station_id=frame["station_id"].map(lambda v: "" if is_missing_token(v) else str(v).strip()),
        station_name=frame["station_name"].map(lambda v: "" if is_missing_token(v) else " ".join(str(v).split())),
    )
    if (frame["station_id"] == "").any():
        raise SourceFormatError("station_id", "fila sin número de estación")
    duplicated = frame["station_id"][frame["station_id"].duplicated()].tolist()
    if duplicated:
        raise SourceFormatError("station_id", f"estaciones repetidas: {duplicated}")

    measure_columns = list(wide.columns[id_columns:])
    measures: List[str] = []
    for column in measure_columns:
        name, _ = split_measure_column(column)
        if name not in measures:
            measures.append(name)

    narrow = frame.melt(id_vars=id_vars, value_vars=measure_columns, var_name="column", value_name="value")
    parts = narrow["column"].map(split_measure_column)
    narrow = narrow.assign(measurement=parts.map(lambda p: p[0]), time=parts.map(lambda p: p[1]))

    table = (
        narrow.pivot(index=id_vars + ["time"], columns="measurement", values="value")
        .reset_index()
    )
    table.columns.name = None

    expected_rows = len(frame) * len(TIME_SLOTS)
    if len(table) != expected_rows or table.duplicated(subset=["station_id", "time"]).any():
        raise SourceFormatError("shape", f"{len(table)} filas normalizadas, se esperaban {expected_rows}")

    order = {sid: pos for pos, sid in enumerate(frame["station_id"])}
    table = (
        table.assign(_pos=table["station_id"].map(order))
        .sort_values(["_pos", "time"], kind="mergesort")
        .drop(columns=["_pos"])
        .reset_index(drop=True)
    )
    if coerce:
        for name in measures:
            table[name] = coerce_measurement(table[name])
    table.insert(2, "date", pd.Series(pd.Timestamp(date), index=table.index).astype("datetime64[ns]"))
    extra_ids = [c for c in id_vars if c not in ID_COLUMNS]
    return table[BASE_COLUMNS + extra_ids + measures]


def normalize_blocks(blocks: Sequence[DailyTableBlock], layout: TableLayout, report: RunReport) -> pd.DataFrame:
    """
    Parsea y normaliza cada tabla diaria.

    Un fallo de formato descarta solo esa tabla (queda en el informe).
    """
    frames: List[pd.DataFrame] = []
    seen_dates = set()
    reference_columns = None

    for block in blocks:
        subject = f"página {block.page_index}"
        try:
            date = parse_table_date(block.date_line)
            if date in seen_dates:
                raise SourceFormatError("date", f"fecha repetida {date.date()}")
            table = normalize_table(parse_table(block.text, layout), date, layout.id_columns, coerce=False)
            if reference_columns is None:
                reference_columns = list(table.columns)
            elif list(table.columns) != reference_columns:
                raise SourceFormatError("columns", f"columnas distintas a las de la primera tabla: {list(table.columns)}")
        except SourceFormatError as exc:
            report.skip_table(subject, str(exc))
            continue
        seen_dates.add(date)
        frames.append(table)
        logger.info(f"Tabla {date.date()}: {len(table)} filas")

    if not frames:
        return pd.DataFrame(columns=BASE_COLUMNS)

    observations = pd.concat(frames, ignore_index=True)
    # Un único tipo por medida para todo el mes
    first_measure = len(BASE_COLUMNS) + max(layout.id_columns - len(ID_COLUMNS), 0)
    for name in reference_columns[first_measure:]:
        observations[name] = coerce_measurement(observations[name])
    return observations.sort_values(["date", "station_id", "time"], kind="mergesort").reset_index(drop=True)

"""
Parser de tablas de anchura fija extraídas del PDF.

La disposición (línea de cabecera, líneas a descartar, número de columnas)
es un supuesto rígido del formato DWS. Se agrupa en TableLayout y se
valida al arrancar para fallar pronto con SourceFormatError.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence

import pandas as pd

from config import (
    DWS_HEADER_LINE, DWS_ID_COLUMNS, DWS_MIN_ROWS, DWS_N_COLUMNS,
    DWS_SKIP_BOTTOM, DWS_SKIP_TOP, FIELD_SEPARATOR, COLUMN_SLOT_SEPARATOR, TIME_SLOTS,
)
from errors import SourceFormatError


@dataclass(frozen=True)
class TableLayout:
    n_columns: int = DWS_N_COLUMNS
    header_line: int = DWS_HEADER_LINE
    skip_top: int = DWS_SKIP_TOP
    skip_bottom: int = DWS_SKIP_BOTTOM
    min_rows: int = DWS_MIN_ROWS
    id_columns: int = DWS_ID_COLUMNS

    @property
    def n_measurements(self) -> int:
        return (self.n_columns - self.id_columns) // len(TIME_SLOTS)

    def validate(self) -> "TableLayout":
        if self.id_columns < 2:
            raise SourceFormatError("layout", "se necesitan columnas de número y nombre de estación")
        data_columns = self.n_columns - self.id_columns
        if data_columns <= 0 or data_columns % len(TIME_SLOTS) != 0:
            raise SourceFormatError(
                "layout",
                f"{data_columns} columnas de medida no se reparten entre {len(TIME_SLOTS)} horas",
            )
        if self.skip_top < 0 or self.skip_bottom < 0:
            raise SourceFormatError("layout", "número de líneas a descartar negativo")
        if not 0 <= self.header_line < self.skip_top:
            raise SourceFormatError(
                "layout", f"la cabecera (línea {self.header_line}) debe estar antes de los datos ({self.skip_top})"
            )
        if self.min_rows < 1:
            raise SourceFormatError("layout", "min_rows debe ser positivo")
        return self


def split_fields(line: str, n_columns: int) -> List[str]:
    """Separa una línea en exactamente n_columns campos (relleno con "")"""
    fields = [f for f in re.split(FIELD_SEPARATOR, line.strip()) if f != ""]
    if len(fields) < n_columns:
        fields.extend([""] * (n_columns - len(fields)))
    return fields[:n_columns]


def header_columns(lines: Sequence[str], layout: TableLayout) -> List[str]:
    """
    Nombres de columna a partir de la línea de cabecera.

    Las medidas aparecen una sola vez en la cabecera; la primera mitad de
    las columnas de datos es la de las 0000 y la segunda la de las 1200.
    """
    if layout.header_line >= len(lines):
        raise SourceFormatError("header", f"no existe la línea de cabecera {layout.header_line}")
    names = [f for f in re.split(FIELD_SEPARATOR, lines[layout.header_line].strip()) if f]
    ids = names[:layout.id_columns]
    measures = names[layout.id_columns:]
    if len(ids) < layout.id_columns or len(measures) != layout.n_measurements:
        raise SourceFormatError(
            "header",
            f"cabecera con {len(measures)} medidas, se esperaban {layout.n_measurements}",
            context=lines[layout.header_line].strip(),
        )
    columns = list(ids)
    for slot in TIME_SLOTS:
        columns.extend(f"{name}{COLUMN_SLOT_SEPARATOR}{slot}" for name in measures)
    if len(set(columns)) != len(columns):
        raise SourceFormatError("header", "nombres de columna repetidos", context=str(columns))
    return columns


def parse_table(text: str, layout: TableLayout) -> pd.DataFrame:
    """
    Convierte el texto de una tabla en una rejilla rectangular de cadenas.

    Raises:
        SourceFormatError: cabecera inesperada o menos filas que layout.min_rows
    """
    lines = text.split("\n")
    columns = header_columns(lines, layout)

    end = len(lines) - layout.skip_bottom
    body = [line for line in lines[layout.skip_top:end] if line.strip()]
    if len(body) < layout.min_rows:
        raise SourceFormatError(
            "too_few_rows",
            f"{len(body)} filas de datos, mínimo {layout.min_rows} (¿ha cambiado el formato?)",
        )

    grid = [split_fields(line, layout.n_columns) for line in body]
    return pd.DataFrame(grid, columns=columns, dtype=object)

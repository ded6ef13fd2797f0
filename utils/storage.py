"""
Caches CSV intermedias entre ejecuciones
"""
import logging
import os
from typing import Callable

import pandas as pd

logger = logging.getLogger(__name__)

# Columnas que deben leerse como texto aunque parezcan números ("0000", "03917")
_OBSERVATION_STR_COLUMNS = {"station_id": str, "station_name": str, "time": str}


def save_frame_csv(frame: pd.DataFrame, path: str) -> str:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    frame.to_csv(path, index=False, encoding="utf-8")
    logger.info(f"💾 {len(frame)} filas guardadas en {path}")
    return path


def load_observations_csv(path: str) -> pd.DataFrame:
    """Carga observaciones con los mismos tipos con que se guardaron"""
    frame = pd.read_csv(path, dtype=_OBSERVATION_STR_COLUMNS, parse_dates=["date"], keep_default_na=False,
                        na_values=[""])
    return frame.astype({"date": "datetime64[ns]"})


def load_locations_csv(path: str) -> pd.DataFrame:
    return pd.read_csv(path, dtype={"station_name": str, "country": str, "station_type": str})


def cached_frame(
    path: str,
    builder: Callable[[], pd.DataFrame],
    loader: Callable[[str], pd.DataFrame],
    refresh: bool = False,
) -> pd.DataFrame:
    """Reutiliza la cache si existe; si no, construye y guarda"""
    if path and not refresh and os.path.exists(path):
        logger.info(f"Usando cache {path}")
        return loader(path)
    frame = builder()
    if path:
        save_frame_csv(frame, path)
    return frame

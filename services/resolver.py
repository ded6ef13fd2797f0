"""
Resolución de nombres de estación contra el listado de ubicaciones.

Niveles de coincidencia, en orden:
    exact       nombre idéntico
    normalized  igual sin mayúsculas, acentos, espacios ni puntuación
    substring   un nombre normalizado contiene al otro (palabras completas)
    similar     mejor ratio de difflib por encima de MATCH_MIN_SIMILARITY

Gana el primer nivel con candidatos. Dentro de un nivel se elige el primer
candidato en el orden del listado de ubicaciones (tras deduplicar y
filtrar); si hay más de uno se registra como ambiguo.
"""
from __future__ import annotations

import difflib
import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from config import CORRECTIONS_PATH, MATCH_MIN_SIMILARITY
from errors import SourceFormatError
from services.report import RunReport
from utils.helpers import normalize_station_name, normalize_text_input

logger = logging.getLogger(__name__)

TIERS = ("exact", "normalized", "substring", "similar")
RESOLVED_COLUMNS = ["station_name", "latitude", "longitude", "matched_name", "match_tier"]


@dataclass(frozen=True)
class MatchResult:
    name: str
    matched_name: Optional[str]
    latitude: float
    longitude: float
    tier: Optional[str]
    candidates: Tuple[str, ...] = ()

    @property
    def is_matched(self) -> bool:
        return self.matched_name is not None


def load_corrections(path: str = CORRECTIONS_PATH) -> Dict[str, str]:
    """
    Tabla de correcciones nombre_observación -> nombre_listado.

    Un fichero inexistente equivale a una tabla vacía.
    """
    if not os.path.exists(path):
        logger.warning(f"Sin tabla de correcciones en {path}")
        return {}
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise SourceFormatError("corrections", "se esperaba un objeto JSON", context=path)
    return {normalize_text_input(k): normalize_text_input(v) for k, v in payload.items() if k and v}


class StationMatcher:
    def __init__(self, locations: pd.DataFrame, min_similarity: float = MATCH_MIN_SIMILARITY):
        self.min_similarity = min_similarity
        self._entries = [
            (str(row.station_name), normalize_station_name(row.station_name), float(row.latitude), float(row.longitude))
            for row in locations.itertuples(index=False)
        ]

    def candidates(self, name: str) -> Tuple[Optional[str], List[int]]:
        """Primer nivel con candidatos y sus posiciones en el listado"""
        exact = [i for i, e in enumerate(self._entries) if e[0] == name]
        if exact:
            return "exact", exact

        key = normalize_station_name(name)
        if not key:
            return None, []

        normalized = [i for i, e in enumerate(self._entries) if e[1] == key]
        if normalized:
            return "normalized", normalized

        padded = f" {key} "
        substring = [
            i for i, e in enumerate(self._entries)
            if e[1] and (f" {e[1]} " in padded or padded in f" {e[1]} ")
        ]
        if substring:
            return "substring", substring

        ratios = [difflib.SequenceMatcher(None, key, e[1]).ratio() for e in self._entries]
        best = max(ratios, default=0.0)
        if best >= self.min_similarity:
            return "similar", [i for i, r in enumerate(ratios) if r == best]
        return None, []

    def match(self, name: str, lookup: Optional[str] = None) -> MatchResult:
        tier, idxs = self.candidates(lookup if lookup is not None else name)
        if not idxs:
            return MatchResult(name, None, float("nan"), float("nan"), None)
        chosen = self._entries[idxs[0]]
        return MatchResult(
            name=name,
            matched_name=chosen[0],
            latitude=chosen[2],
            longitude=chosen[3],
            tier=tier,
            candidates=tuple(self._entries[i][0] for i in idxs),
        )


def distinct_names(names: Iterable) -> List[str]:
    out: List[str] = []
    seen = set()
    for raw in names:
        name = normalize_text_input(raw)
        if name and name not in seen:
            seen.add(name)
            out.append(name)
    return out


def resolve_stations(
    names: Iterable,
    locations: pd.DataFrame,
    report: RunReport,
    corrections: Optional[Dict[str, str]] = None,
    min_similarity: float = MATCH_MIN_SIMILARITY,
) -> pd.DataFrame:
    """
    Una fila por nombre distinto de estación observada.

    Los nombres sin candidato se conservan con coordenadas NaN.
    """
    corrections = corrections or {}
    matcher = StationMatcher(locations, min_similarity=min_similarity)
    rows = []
    for name in distinct_names(names):
        result = matcher.match(name, lookup=corrections.get(name))
        if not result.is_matched:
            report.unmatched(name)
        elif len(result.candidates) > 1:
            report.ambiguous(name, result.candidates, result.matched_name)
        rows.append(
            {
                "station_name": result.name,
                "latitude": result.latitude,
                "longitude": result.longitude,
                "matched_name": result.matched_name,
                "match_tier": result.tier,
            }
        )

    resolved = pd.DataFrame(rows, columns=RESOLVED_COLUMNS).astype({"latitude": float, "longitude": float})
    matched = int(resolved["latitude"].notna().sum())
    logger.info(f"Estaciones resueltas: {matched} de {len(resolved)}")
    return resolved

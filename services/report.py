"""
Registro de incidencias de una ejecución.

Cada elemento saltado, ambiguo o sin resolver queda anotado aquí y se
resume al final del pipeline; ningún fallo por unidad se descarta en
silencio.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import List, Sequence

from errors import DataIntegrityWarning, MatchAmbiguityWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportEntry:
    category: str
    subject: str
    detail: str


@dataclass
class RunReport:
    skipped_tables: List[ReportEntry] = field(default_factory=list)
    skipped_locations: List[ReportEntry] = field(default_factory=list)
    ambiguous_matches: List[ReportEntry] = field(default_factory=list)
    unmatched_stations: List[ReportEntry] = field(default_factory=list)
    region_errors: List[ReportEntry] = field(default_factory=list)
    integrity_warnings: List[ReportEntry] = field(default_factory=list)

    def skip_table(self, subject: str, detail: str) -> None:
        logger.warning(f"Tabla descartada ({subject}): {detail}")
        self.skipped_tables.append(ReportEntry("skipped_table", subject, detail))

    def skip_location(self, subject: str, detail: str) -> None:
        logger.warning(f"Fila de estación descartada ({subject}): {detail}")
        self.skipped_locations.append(ReportEntry("skipped_location", subject, detail))

    def ambiguous(self, name: str, candidates: Sequence[str], chosen: str) -> None:
        detail = f"{len(candidates)} candidatos {list(candidates)}, elegido '{chosen}'"
        warnings.warn(f"{name}: {detail}", MatchAmbiguityWarning, stacklevel=2)
        self.ambiguous_matches.append(ReportEntry("ambiguous_match", name, detail))

    def unmatched(self, name: str) -> None:
        warnings.warn(f"{name}: sin candidatos de ubicación", MatchAmbiguityWarning, stacklevel=2)
        self.unmatched_stations.append(ReportEntry("unmatched_station", name, "sin candidatos"))

    def region_error(self, region_id: str, detail: str) -> None:
        logger.warning(f"Región {region_id} sin agregado: {detail}")
        self.region_errors.append(ReportEntry("region_error", region_id, detail))

    def integrity(self, subject: str, detail: str) -> None:
        warnings.warn(f"{subject}: {detail}", DataIntegrityWarning, stacklevel=2)
        logger.warning(f"Integridad de datos ({subject}): {detail}")
        self.integrity_warnings.append(ReportEntry("integrity", subject, detail))

    def entries(self) -> List[ReportEntry]:
        return (
            self.integrity_warnings
            + self.skipped_tables
            + self.skipped_locations
            + self.ambiguous_matches
            + self.unmatched_stations
            + self.region_errors
        )

    def is_clean(self) -> bool:
        return not self.entries()

    def summary(self) -> str:
        lines = [
            "=== RESUMEN DE INCIDENCIAS ===",
            f"Avisos de integridad: {len(self.integrity_warnings)}",
            f"Tablas descartadas: {len(self.skipped_tables)}",
            f"Filas de estación descartadas: {len(self.skipped_locations)}",
            f"Coincidencias ambiguas: {len(self.ambiguous_matches)}",
            f"Estaciones sin ubicación: {len(self.unmatched_stations)}",
            f"Regiones sin agregado: {len(self.region_errors)}",
        ]
        for entry in self.entries():
            lines.append(f"  • [{entry.category}] {entry.subject}: {entry.detail}")
        return "\n".join(lines)

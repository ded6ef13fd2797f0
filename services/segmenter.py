"""
Selección de las páginas con tabla diaria dentro del PDF mensual.
"""
import calendar
import logging
import re
from typing import Callable, List, Optional, Sequence

from config import DWS_DATE_PATTERN, DWS_MARKER, DWS_MAX_TABLES
from errors import SourceFormatError
from providers.types import DailyTableBlock, RawPage
from services.report import RunReport

logger = logging.getLogger(__name__)


def select_table_pages(
    pages: Sequence[RawPage],
    marker: str = DWS_MARKER,
    predicate: Optional[Callable[[str], bool]] = None,
) -> List[RawPage]:
    """
    Devuelve las páginas que contienen la frase marcadora, en su orden original.

    Args:
        pages: Páginas del PDF
        marker: Texto que identifica una tabla diaria
        predicate: Criterio alternativo sobre el texto de la página

    Returns:
        Nueva lista con las páginas seleccionadas
    """
    if predicate is None:
        predicate = lambda text: marker in text  # noqa: E731
    selected = [page for page in pages if predicate(page.text)]
    logger.info(f"Páginas con tabla diaria: {len(selected)} de {len(pages)}")
    return selected


def check_structure(selected: Sequence[RawPage]) -> None:
    """Supuestos sobre el fichero completo; si fallan se aborta."""
    if not selected:
        raise SourceFormatError("no_tables", f"ninguna página contiene '{DWS_MARKER}'")
    if len(selected) > DWS_MAX_TABLES:
        raise SourceFormatError(
            "too_many_tables",
            f"{len(selected)} tablas diarias, un mes tiene como máximo {DWS_MAX_TABLES}",
        )


def check_day_count(selected: Sequence, year: int, month: int, report: RunReport) -> bool:
    """
    Compara el número de tablas con los días del mes.

    Una discrepancia se registra como aviso de integridad; la lista no se
    recorta ni se rellena.
    """
    expected = calendar.monthrange(year, month)[1]
    if len(selected) != expected:
        report.integrity(
            f"{year:04d}-{month:02d}",
            f"{len(selected)} tablas diarias, se esperaban {expected}",
        )
        return False
    return True


def find_date_line(text: str, pattern: str = DWS_DATE_PATTERN) -> Optional[str]:
    regex = re.compile(pattern)
    for line in text.splitlines():
        if regex.search(line):
            return line.strip()
    return None


def build_blocks(pages: Sequence[RawPage], pattern: str = DWS_DATE_PATTERN) -> List[DailyTableBlock]:
    """Una DailyTableBlock por página seleccionada, con su línea de fecha si existe."""
    return [
        DailyTableBlock(page_index=page.page_index, text=page.text, date_line=find_date_line(page.text, pattern))
        for page in pages
    ]

"""
Extracción de texto del PDF mensual del Daily Weather Summary
"""
import logging
import os
from typing import List

import pdfplumber

from errors import SourceFormatError
from providers.types import RawPage

logger = logging.getLogger(__name__)


def extract_pages(pdf_path: str) -> List[RawPage]:
    """
    Texto plano de cada página, conservando la disposición en columnas.

    Args:
        pdf_path: Ruta al PDF

    Returns:
        Una RawPage por página, en orden
    """
    if not os.path.exists(pdf_path):
        raise SourceFormatError("pdf", "fichero no encontrado", context=pdf_path)

    pages: List[RawPage] = []
    try:
        with pdfplumber.open(pdf_path) as pdf:
            for i, page in enumerate(pdf.pages):
                # layout=True mantiene las rachas de espacios entre columnas
                text = page.extract_text(layout=True) or ""
                pages.append(RawPage(page_index=i, text=text))
    except Exception as exc:
        raise SourceFormatError("pdf", f"no se pudo leer el PDF: {exc}", context=pdf_path) from exc

    logger.info(f"PDF {pdf_path}: {len(pages)} páginas")
    return pages

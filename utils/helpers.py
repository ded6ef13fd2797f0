"""
Funciones auxiliares generales
"""
import re
import unicodedata

from config import MISSING_TOKENS

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def is_nan(x):
    """Verifica si un valor es NaN"""
    if x is None:
        return True
    return x != x


def normalize_text_input(value) -> str:
    """Normaliza entrada de texto a string sin espacios sobrantes"""
    if value is None or is_nan(value):
        return ""
    return " ".join(str(value).split())


def normalize_station_name(value) -> str:
    """
    Clave de comparación para nombres de estación.

    Minúsculas, sin acentos y con cualquier secuencia de espacios o
    puntuación reducida a un único espacio.
    """
    text = unicodedata.normalize("NFKD", normalize_text_input(value))
    text = "".join(c for c in text if not unicodedata.combining(c))
    return _NON_ALNUM.sub(" ", text.lower()).strip()


def is_missing_token(value) -> bool:
    """True si la celda representa "sin dato" en el PDF"""
    if is_nan(value):
        return True
    return str(value).strip() in MISSING_TOKENS

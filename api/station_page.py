"""
Descarga del listado de estaciones (una única petición, sin reintentos)
"""
import logging
from typing import List

import requests
from bs4 import BeautifulSoup

from config import HTTP_TIMEOUT_SECONDS, HTTP_USER_AGENT, LOCATION_FIELDS
from errors import NetworkFetchError

logger = logging.getLogger(__name__)


def fetch_station_html(url: str, timeout: float = HTTP_TIMEOUT_SECONDS) -> str:
    headers = {"User-Agent": HTTP_USER_AGENT}
    logger.info(f"Descargando listado de estaciones: {url}")
    try:
        r = requests.get(url, headers=headers, timeout=timeout)
    except requests.Timeout:
        raise NetworkFetchError("timeout", context=url)
    except requests.RequestException as exc:
        raise NetworkFetchError("network", str(exc), context=url)

    if r.status_code in (401, 403):
        raise NetworkFetchError("forbidden", "el sitio no permite acceso automatizado", context=url,
                                status_code=r.status_code)
    if r.status_code == 429:
        raise NetworkFetchError("ratelimit", context=url, status_code=r.status_code)
    if r.status_code != 200:
        raise NetworkFetchError("http", f"HTTP {r.status_code}", context=url, status_code=r.status_code)
    return r.text


def extract_table_rows(html: str, min_cells: int = LOCATION_FIELDS) -> List[str]:
    """
    Filas de la primera tabla con datos, cada una con sus celdas separadas
    por saltos de línea. Se saltan las filas de cabecera (th).
    """
    soup = BeautifulSoup(html, "html.parser")
    table = None
    for candidate in soup.find_all("table"):
        if any(len(tr.find_all("td")) >= min_cells for tr in candidate.find_all("tr")):
            table = candidate
            break
    if table is None:
        return []

    rows: List[str] = []
    for tr in table.find_all("tr"):
        cells = tr.find_all("td")
        if not cells:
            continue
        rows.append("\n".join(td.get_text(" ", strip=True) for td in cells))
    return rows


def fetch_station_rows(url: str) -> List[str]:
    """
    Raises:
        NetworkFetchError: fallo de red/HTTP o página sin tabla de estaciones
    """
    rows = extract_table_rows(fetch_station_html(url))
    if not rows:
        raise NetworkFetchError("no_table", "la página no contiene la tabla de estaciones", context=url)
    logger.info(f"Filas de estaciones descargadas: {len(rows)}")
    return rows

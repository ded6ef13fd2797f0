"""
Configuración global de dwsmap
"""
import os

# ============================================================
# PDF DEL DAILY WEATHER SUMMARY (DWS)
# ============================================================
DWS_MARKER = "Selected UK readings at"  # Texto que identifica las páginas con tabla diaria
DWS_MAX_TABLES = 31  # Un mes nunca tiene más tablas diarias que días

# Línea auxiliar con la fecha de cada tabla, p.ej. "... for 1 January 2020"
DWS_DATE_PATTERN = r"for\s+(\d{1,2})\s+([A-Za-z]+)\s+(\d{4})"
DWS_DATE_FORMAT = "%d %B %Y"

# ============================================================
# DISPOSICIÓN DE LA TABLA (números mágicos del formato)
# ============================================================
DWS_N_COLUMNS = 14  # NO, SITE + 6 medidas x 2 horas
DWS_ID_COLUMNS = 2  # Columnas identificadoras al principio de cada fila
DWS_HEADER_LINE = 2  # Índice de la línea con los nombres de columna
DWS_SKIP_TOP = 4  # Líneas de cabecera antes de los datos
DWS_SKIP_BOTTOM = 1  # Líneas de pie tras los datos
DWS_MIN_ROWS = 20  # Mínimo de estaciones esperadas en una tabla válida

FIELD_SEPARATOR = r"\s{2,}"  # Dos o más espacios separan campos
COLUMN_SLOT_SEPARATOR = "_"

# ============================================================
# HORAS DE OBSERVACIÓN (UTC)
# ============================================================
TIME_SLOTS = ("0000", "1200")

# Tokens que el PDF usa para "sin dato"
MISSING_TOKENS = frozenset({"", "-", "--", "n/a", "N/A", "x", "X", "M"})

# ============================================================
# LISTADO DE ESTACIONES (scraping)
# ============================================================
STATIONS_URL = os.getenv(
    "DWS_STATIONS_URL",
    "https://www.metoffice.gov.uk/research/climate/maps-and-data/uk-synoptic-and-climate-stations",
)
HTTP_TIMEOUT_SECONDS = float(os.getenv("DWS_HTTP_TIMEOUT", "30"))
HTTP_USER_AGENT = os.getenv("DWS_USER_AGENT", "Mozilla/5.0 (compatible; dwsmap/1.0)")
LOCATION_FIELDS = 4  # nombre, país, "lat,lon", tipo
RELEVANT_STATION_TYPE = "Automatic"

# ============================================================
# RESOLUCIÓN DE NOMBRES DE ESTACIÓN
# ============================================================
# Se instala como package data junto a services/resolver.py
CORRECTIONS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "services", "data_station_corrections.json")
MATCH_MIN_SIMILARITY = 0.85  # Ratio mínimo (difflib) para el último nivel de matching

# ============================================================
# REGIONES Y AGREGADOS
# ============================================================
EARTH_RADIUS_KM = 6371.0
REGION_ID_PROPERTY = "id"
REGION_NAME_PROPERTY = "name"
DEFAULT_MEASUREMENT = "CLOUD"

# ============================================================
# VALIDACIÓN DE COORDENADAS
# ============================================================
MIN_LAT, MAX_LAT = -90.0, 90.0
MIN_LON, MAX_LON = -180.0, 180.0

# ============================================================
# CACHES CSV Y SALIDAS
# ============================================================
# {stem}: nombre del PDF sin extensión, cada mes tiene su propia cache
OBSERVATIONS_CSV = "dws_observations_{stem}.csv"
AGGREGATES_CSV = "region_daily_aggregates_{stem}.csv"
REGION_MAP_HTML = "region_map_{stem}.html"
REGION_ANIMATION_HTML = "region_animation_{stem}.html"
# El listado de estaciones no depende del PDF
LOCATIONS_CSV = "station_locations.csv"

"""
Módulo API: colaboradores externos (PDF, web, GeoJSON)
"""
from .pdf_text import extract_pages
from .station_page import fetch_station_rows, extract_table_rows
from .regions import load_geojson, load_regions_geojson, regions_from_geojson

__all__ = [
    'extract_pages',
    'fetch_station_rows',
    'extract_table_rows',
    'load_geojson',
    'load_regions_geojson',
    'regions_from_geojson',
]

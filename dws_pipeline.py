#!/usr/bin/env python3
"""
Pipeline completo del Daily Weather Summary:
PDF mensual -> observaciones; listado web -> ubicaciones; regiones ->
estación más cercana -> agregado diario por región -> mapa y animación.

Uso:
  python3 dws_pipeline.py --pdf DWS_2020_01.pdf --regions counties.geojson
  python3 dws_pipeline.py --pdf DWS_2020_01.pdf --regions counties.geojson --measurement TEMP --refresh
"""
import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from api import extract_pages, fetch_station_rows, load_geojson, regions_from_geojson
from config import (
    AGGREGATES_CSV, DEFAULT_MEASUREMENT, LOCATIONS_CSV, OBSERVATIONS_CSV, REGION_ANIMATION_HTML,
    REGION_ID_PROPERTY, REGION_MAP_HTML, REGION_NAME_PROPERTY, RELEVANT_STATION_TYPE, STATIONS_URL,
)
from errors import DwsError, SourceFormatError
from providers.base import PageTextSource, StationRowSource
from services.locations import dedupe_locations, filter_station_type, parse_location_rows
from services.normalizer import normalize_blocks
from services.regions import assign_closest_stations, daily_station_means, region_daily_aggregates
from services.render import build_region_animation, build_region_map, write_figure
from services.report import RunReport
from services.resolver import load_corrections, resolve_stations
from services.segmenter import build_blocks, check_day_count, check_structure, select_table_pages
from services.tables import TableLayout
from utils.storage import (
    cached_frame, load_locations_csv, load_observations_csv, save_frame_csv,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineSettings:
    pdf_path: str
    output_dir: str = "output"
    stations_url: str = STATIONS_URL
    regions_path: Optional[str] = None
    region_id_property: str = REGION_ID_PROPERTY
    region_name_property: str = REGION_NAME_PROPERTY
    measurement: str = DEFAULT_MEASUREMENT
    station_type: str = RELEVANT_STATION_TYPE
    month: Optional[Tuple[int, int]] = None
    layout: TableLayout = field(default_factory=TableLayout)
    corrections_path: Optional[str] = None
    refresh: bool = False
    render: bool = True

    def out(self, name: str) -> str:
        return os.path.join(self.output_dir, name.format(stem=self.source_stem))

    @property
    def source_stem(self) -> str:
        """Nombre del PDF sin extensión; separa las caches de cada mes"""
        return os.path.splitext(os.path.basename(self.pdf_path))[0]


@dataclass
class PipelineResult:
    observations: pd.DataFrame
    locations: pd.DataFrame
    resolved: pd.DataFrame
    assignments: Optional[pd.DataFrame] = None
    aggregates: Optional[pd.DataFrame] = None
    figures: List[str] = field(default_factory=list)
    report: RunReport = field(default_factory=RunReport)


def parse_month(value: str) -> Tuple[int, int]:
    match = re.fullmatch(r"(\d{4})-(\d{1,2})", value.strip())
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise argparse.ArgumentTypeError(f"mes no válido: {value!r} (formato YYYY-MM)")
    return int(match.group(1)), int(match.group(2))


def build_observations(settings: PipelineSettings, extract: PageTextSource, report: RunReport) -> pd.DataFrame:
    pages = extract(settings.pdf_path)
    selected = select_table_pages(pages)
    check_structure(selected)

    observations = normalize_blocks(build_blocks(selected), settings.layout, report)
    if observations.empty:
        raise SourceFormatError("no_tables", "todas las tablas diarias fueron descartadas")

    if settings.month is not None:
        year, month = settings.month
    else:
        first = pd.Timestamp(observations["date"].min())
        year, month = first.year, first.month
    check_day_count(selected, year, month, report)
    return observations


def build_locations(settings: PipelineSettings, fetch_rows: StationRowSource, report: RunReport) -> pd.DataFrame:
    return parse_location_rows(fetch_rows(settings.stations_url), report)


def run_pipeline(
    settings: PipelineSettings,
    extract: PageTextSource = extract_pages,
    fetch_rows: StationRowSource = fetch_station_rows,
    report: Optional[RunReport] = None,
) -> PipelineResult:
    report = report if report is not None else RunReport()
    settings.layout.validate()

    observations = cached_frame(
        settings.out(OBSERVATIONS_CSV),
        lambda: build_observations(settings, extract, report),
        load_observations_csv,
        refresh=settings.refresh,
    )
    if settings.measurement not in observations.columns:
        raise SourceFormatError("measurement", f"la medida {settings.measurement!r} no está en las tablas")

    locations = cached_frame(
        settings.out(LOCATIONS_CSV),
        lambda: build_locations(settings, fetch_rows, report),
        load_locations_csv,
        refresh=settings.refresh,
    )
    relevant = filter_station_type(dedupe_locations(locations, settings.station_type), settings.station_type)
    logger.info(f"Ubicaciones de tipo {settings.station_type}: {len(relevant)}")

    corrections = load_corrections(settings.corrections_path) if settings.corrections_path else load_corrections()
    resolved = resolve_stations(observations["station_name"], relevant, report, corrections)
    result = PipelineResult(observations=observations, locations=locations, resolved=resolved, report=report)

    if settings.regions_path:
        geojson = load_geojson(settings.regions_path)
        regions = regions_from_geojson(geojson, settings.region_id_property, settings.region_name_property, report)
        result.assignments = assign_closest_stations(regions, resolved, report)
        daily = daily_station_means(observations, settings.measurement)
        result.aggregates = region_daily_aggregates(result.assignments, daily)
        save_frame_csv(result.aggregates, settings.out(AGGREGATES_CSV))

        if settings.render and not result.aggregates.empty:
            static = build_region_map(result.aggregates, geojson, id_property=settings.region_id_property,
                                      measurement=settings.measurement)
            animated = build_region_animation(result.aggregates, geojson, id_property=settings.region_id_property,
                                              measurement=settings.measurement)
            result.figures.append(write_figure(static, settings.out(REGION_MAP_HTML)))
            result.figures.append(write_figure(animated, settings.out(REGION_ANIMATION_HTML)))

    logger.info(report.summary())
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Extrae el Daily Weather Summary y lo agrega por región")
    parser.add_argument("--pdf", required=True, help="PDF mensual del Daily Weather Summary")
    parser.add_argument("--regions", default=None, help="GeoJSON con los polígonos de las regiones")
    parser.add_argument("--stations-url", default=STATIONS_URL)
    parser.add_argument("--output-dir", default="output")
    parser.add_argument("--measurement", default=DEFAULT_MEASUREMENT)
    parser.add_argument("--station-type", default=RELEVANT_STATION_TYPE)
    parser.add_argument("--region-id-property", default=REGION_ID_PROPERTY)
    parser.add_argument("--region-name-property", default=REGION_NAME_PROPERTY)
    parser.add_argument("--corrections", default=None, help="JSON nombre_observación -> nombre_listado")
    parser.add_argument("--month", type=parse_month, default=None, help="YYYY-MM (por defecto, el de la primera tabla)")
    parser.add_argument("--refresh", action="store_true", help="Ignora las caches CSV")
    parser.add_argument("--no-render", dest="render", action="store_false")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = PipelineSettings(
        pdf_path=args.pdf,
        output_dir=args.output_dir,
        stations_url=args.stations_url,
        regions_path=args.regions,
        region_id_property=args.region_id_property,
        region_name_property=args.region_name_property,
        measurement=args.measurement,
        station_type=args.station_type,
        month=args.month,
        corrections_path=args.corrections,
        refresh=args.refresh,
        render=args.render,
    )

    print("=" * 60)
    print("🗺️  DAILY WEATHER SUMMARY POR REGIÓN")
    print("=" * 60)
    try:
        result = run_pipeline(settings)
    except KeyboardInterrupt:
        print("\n\n⚠️  Cancelado por el usuario")
        sys.exit(130)
    except DwsError as e:
        print(f"\n❌ ERROR ({type(e).__name__}): {e}")
        sys.exit(1)

    print(f"\n✅ Observaciones: {len(result.observations)} filas")
    print(f"✅ Estaciones resueltas: {int(result.resolved['latitude'].notna().sum())}/{len(result.resolved)}")
    if result.aggregates is not None:
        print(f"✅ Agregados región/día: {len(result.aggregates)} filas")
    for path in result.figures:
        print(f"🖼️  {path}")
    if not result.report.is_clean():
        print()
        print(result.report.summary())


if __name__ == "__main__":
    main()

import json

import numpy as np
import pandas as pd
import pytest

from api.regions import load_regions_geojson, regions_from_geojson
from providers.types import RegionGeometry
from services.regions import assign_closest_stations, daily_station_means, region_daily_aggregates

STATIONS = pd.DataFrame({
    "station_name": ["A", "B", "Ghost"],
    "latitude": [51.0, 56.0, np.nan],
    "longitude": [-2.0, -3.0, np.nan],
})


def square(x0, y0, x1, y1):
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)]


def regions():
    return [
        RegionGeometry("north", "North", ([square(-2.3, 51.0, -2.1, 51.2)],)),
        RegionGeometry("south", "South", ([square(-2.0, 50.8, -1.8, 51.0)],)),
        RegionGeometry("highlands", "Highlands", ([square(-3.5, 55.8, -2.8, 56.4)],)),
    ]


def observations():
    return pd.DataFrame({
        "station_id": ["1", "1", "2", "2", "1", "1", "2", "2"],
        "station_name": ["A", "A", "B", "B", "A", "A", "B", "B"],
        "date": pd.to_datetime(["2020-01-01"] * 4 + ["2020-01-02"] * 4),
        "time": ["0000", "1200"] * 4,
        "CLOUD": [5, np.nan, 8, 6, np.nan, np.nan, 2, 4],
    })


def test_regions_nearer_a_get_a(report):
    assignments = assign_closest_stations(regions(), STATIONS, report)
    mapping = dict(zip(assignments["region_id"], assignments["closest_station"]))
    assert mapping == {"north": "A", "south": "A", "highlands": "B"}
    assert report.region_errors == []


def test_assignment_is_deterministic(report):
    first = assign_closest_stations(regions(), STATIONS, report)
    second = assign_closest_stations(regions(), STATIONS, report)
    pd.testing.assert_frame_equal(first, second)


def test_degenerate_region_is_reported_not_fatal(report):
    bad = RegionGeometry("line", "Line", ([[(0, 0), (1, 1), (2, 2)]],))
    assignments = assign_closest_stations(regions() + [bad], STATIONS, report)
    row = assignments.set_index("region_id").loc["line"]
    assert pd.isna(row["closest_station"])
    assert [e.subject for e in report.region_errors] == ["line"]


def test_daily_mean_excludes_missing():
    daily = daily_station_means(observations(), "CLOUD").set_index(["station_name", "day"])["value"]
    assert daily[("A", pd.Timestamp("2020-01-01"))] == 5
    assert np.isnan(daily[("A", pd.Timestamp("2020-01-02"))])
    assert daily[("B", pd.Timestamp("2020-01-01"))] == 7
    assert daily[("B", pd.Timestamp("2020-01-02"))] == 3


def test_daily_mean_unknown_measurement():
    with pytest.raises(KeyError):
        daily_station_means(observations(), "SUNSHINE")


def test_region_day_aggregates(report):
    bad = RegionGeometry("line", "Line", ([[(0, 0), (1, 1), (2, 2)]],))
    assignments = assign_closest_stations(regions() + [bad], STATIONS, report)
    daily = daily_station_means(observations(), "CLOUD")
    aggregates = region_daily_aggregates(assignments, daily)

    assert list(aggregates.columns) == ["region_id", "closest_station", "day", "aggregated_value"]
    assert len(aggregates) == 4 * 2
    values = aggregates.set_index(["region_id", "day"])["aggregated_value"]
    assert values[("north", pd.Timestamp("2020-01-01"))] == 5
    assert values[("south", pd.Timestamp("2020-01-01"))] == 5
    assert values[("highlands", pd.Timestamp("2020-01-02"))] == 3
    assert np.isnan(values[("north", pd.Timestamp("2020-01-02"))])
    assert aggregates[aggregates["region_id"] == "line"]["aggregated_value"].isna().all()


def test_regions_from_geojson(report):
    payload = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"id": "E1", "name": "Avon"},
             "geometry": {"type": "Polygon", "coordinates": [square(-3, 51, -2, 52)]}},
            {"type": "Feature", "properties": {"id": "E2", "name": "Isles"},
             "geometry": {"type": "MultiPolygon",
                          "coordinates": [[square(-7, 57, -6, 58)], [square(-6, 58, -5, 59)]]}},
            {"type": "Feature", "properties": {"id": "E3"},
             "geometry": {"type": "Point", "coordinates": [0, 0]}},
        ],
    }
    loaded = regions_from_geojson(payload, report=report)
    assert [r.region_id for r in loaded] == ["E1", "E2"]
    assert len(loaded[1].polygons) == 2
    assert loaded[0].name == "Avon"
    assert [e.subject for e in report.region_errors] == ["E3"]


def test_load_regions_geojson_custom_properties(tmp_path):
    payload = {"type": "FeatureCollection", "features": [
        {"type": "Feature", "properties": {"CTYUA": "E06000023", "NAME": "Bristol"},
         "geometry": {"type": "Polygon", "coordinates": [square(-2.7, 51.4, -2.5, 51.55)]}},
    ]}
    path = tmp_path / "counties.geojson"
    path.write_text(json.dumps(payload), encoding="utf-8")
    loaded = load_regions_geojson(str(path), id_property="CTYUA", name_property="NAME")
    assert [(r.region_id, r.name) for r in loaded] == [("E06000023", "Bristol")]

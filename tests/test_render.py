import pandas as pd
import pytest

from services.render import build_region_animation, build_region_map, write_figure

GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {"type": "Feature", "properties": {"id": "north"},
         "geometry": {"type": "Polygon", "coordinates": [[[-3, 52], [-2, 52], [-2, 53], [-3, 53], [-3, 52]]]}},
        {"type": "Feature", "properties": {"id": "south"},
         "geometry": {"type": "Polygon", "coordinates": [[[-3, 51], [-2, 51], [-2, 52], [-3, 52], [-3, 51]]]}},
    ],
}

AGGREGATES = pd.DataFrame({
    "region_id": ["north", "north", "north", "south", "south", "south"],
    "closest_station": ["A", "A", "A", None, None, None],
    "day": pd.to_datetime(["2020-01-01", "2020-01-02", "2020-01-03"] * 2),
    "aggregated_value": [5.0, 6.0, float("nan"), float("nan"), float("nan"), float("nan")],
})


def test_static_map_for_one_day():
    fig = build_region_map(AGGREGATES, GEOJSON, day="2020-01-02", measurement="CLOUD")
    trace = fig.data[0]
    assert list(trace.locations) == ["north", "south"]
    assert trace.z[0] == 6.0
    assert "2020-01-02" in fig.layout.title.text


def test_animation_has_one_frame_per_day():
    fig = build_region_animation(AGGREGATES, GEOJSON, measurement="CLOUD")
    assert [f.name for f in fig.frames] == ["2020-01-01", "2020-01-02", "2020-01-03"]
    assert len(fig.layout.sliders[0].steps) == 3


def test_empty_aggregates_cannot_be_drawn():
    with pytest.raises(ValueError):
        build_region_map(AGGREGATES.iloc[0:0], GEOJSON)


def test_write_figure(tmp_path):
    fig = build_region_map(AGGREGATES, GEOJSON)
    path = write_figure(fig, str(tmp_path / "maps" / "map.html"))
    with open(path, encoding="utf-8") as f:
        assert "plotly" in f.read().lower()

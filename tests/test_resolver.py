import json
import math
import os

import pandas as pd
import pytest

from config import CORRECTIONS_PATH
from errors import MatchAmbiguityWarning
from services.resolver import StationMatcher, load_corrections, resolve_stations

LOCATIONS = pd.DataFrame(
    [
        ("Filton", "England", "Automatic", 51.521, -2.576),
        ("Lerwick", "Scotland", "Automatic", 60.139, -1.183),
        ("Aberdeen Dyce", "Scotland", "Automatic", 57.206, -2.202),
        ("Aberdeen Airport", "Scotland", "Automatic", 57.204, -2.200),
        ("St. Athan", "Wales", "Automatic", 51.405, -3.440),
        ("Loch Glascarnoch", "Scotland", "Automatic", 57.725, -4.896),
    ],
    columns=["station_name", "country", "station_type", "latitude", "longitude"],
)


def test_exact_match():
    result = StationMatcher(LOCATIONS).match("Lerwick")
    assert result.tier == "exact"
    assert (result.latitude, result.longitude) == (60.139, -1.183)


def test_normalized_match_ignores_case_and_punctuation():
    result = StationMatcher(LOCATIONS).match("ST  ATHAN")
    assert result.tier == "normalized"
    assert result.matched_name == "St. Athan"


def test_substring_match_either_direction():
    matcher = StationMatcher(LOCATIONS)
    assert matcher.match("Filton and Almondsbury").matched_name == "Filton"
    assert matcher.match("Glascarnoch").matched_name == "Loch Glascarnoch"


def test_substring_needs_whole_words():
    assert not StationMatcher(LOCATIONS).match("Lerw").is_matched


def test_similar_match_for_typos():
    result = StationMatcher(LOCATIONS).match("Loch Glascarnoc")
    assert result.tier == "similar"
    assert result.matched_name == "Loch Glascarnoch"


def test_filton_resolves_after_correction(report):
    resolved = resolve_stations(["Filton and Almondsbury"], LOCATIONS, report,
                                corrections={"Filton and Almondsbury": "Filton"})
    row = resolved.iloc[0]
    assert row["station_name"] == "Filton and Almondsbury"
    assert row["match_tier"] == "exact"
    assert (row["latitude"], row["longitude"]) == (51.521, -2.576)


def test_ambiguous_match_takes_first_and_is_reported(report):
    with pytest.warns(MatchAmbiguityWarning):
        resolved = resolve_stations(["Aberdeen"], LOCATIONS, report)
    assert resolved.iloc[0]["matched_name"] == "Aberdeen Dyce"
    assert report.ambiguous_matches[0].subject == "Aberdeen"


def test_unmatched_names_keep_a_null_row(report):
    with pytest.warns(MatchAmbiguityWarning):
        resolved = resolve_stations(["Lerwick", "Atlantis"], LOCATIONS, report)
    assert resolved["station_name"].tolist() == ["Lerwick", "Atlantis"]
    assert math.isnan(resolved.iloc[1]["latitude"])
    assert pd.isna(resolved.iloc[1]["match_tier"])
    assert [e.subject for e in report.unmatched_stations] == ["Atlantis"]


def test_resolution_is_deterministic_and_in_range(report):
    names = ["Lerwick", "Filton and Almondsbury", "Lerwick", "st athan", "Aberdeen"]
    first = resolve_stations(names, LOCATIONS, report)
    second = resolve_stations(list(reversed(names)), LOCATIONS, report)
    assert first["station_name"].tolist() == ["Lerwick", "Filton and Almondsbury", "st athan", "Aberdeen"]
    merged = first.merge(second, on="station_name", suffixes=("_a", "_b"))
    assert (merged["latitude_a"] == merged["latitude_b"]).all()
    assert (merged["longitude_a"] == merged["longitude_b"]).all()
    assert first["latitude"].between(-90, 90).all()
    assert first["longitude"].between(-180, 180).all()


def test_load_corrections(tmp_path):
    path = tmp_path / "corrections.json"
    path.write_text(json.dumps({" Filton  and Almondsbury ": "Filton", "": "x"}), encoding="utf-8")
    assert load_corrections(str(path)) == {"Filton and Almondsbury": "Filton"}
    assert load_corrections(str(tmp_path / "missing.json")) == {}


def test_bundled_corrections_table():
    assert load_corrections()["Filton and Almondsbury"] == "Filton"


def test_corrections_table_ships_inside_services_package():
    import services.resolver as resolver

    assert os.path.dirname(CORRECTIONS_PATH) == os.path.dirname(os.path.abspath(resolver.__file__))
    assert os.path.exists(CORRECTIONS_PATH)

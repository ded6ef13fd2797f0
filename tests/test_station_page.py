import pytest
import requests

import api.station_page as station_page
from errors import NetworkFetchError

HTML = """
<html><body>
<table><tr><td>menu</td></tr></table>
<table>
  <tr><th>Station</th><th>Country</th><th>Location</th><th>Type</th></tr>
  <tr><td>Filton</td><td>England</td><td>51.521,-2.576</td><td>Automatic</td></tr>
  <tr><td>Lerwick</td><td>Scotland</td><td>60.139, -1.183</td><td>Manual</td></tr>
</table>
</body></html>
"""


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


def test_extract_table_rows():
    rows = station_page.extract_table_rows(HTML)
    assert rows == [
        "Filton\nEngland\n51.521,-2.576\nAutomatic",
        "Lerwick\nScotland\n60.139, -1.183\nManual",
    ]


def test_fetch_station_rows(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None):
        seen["url"] = url
        seen["headers"] = headers
        return FakeResponse(200, HTML)

    monkeypatch.setattr(station_page.requests, "get", fake_get)
    rows = station_page.fetch_station_rows("https://example.org/stations")
    assert len(rows) == 2
    assert seen["url"] == "https://example.org/stations"
    assert "User-Agent" in seen["headers"]


@pytest.mark.parametrize("status,kind", [(403, "forbidden"), (429, "ratelimit"), (500, "http")])
def test_http_errors_are_fatal(monkeypatch, status, kind):
    monkeypatch.setattr(station_page.requests, "get", lambda *a, **k: FakeResponse(status))
    with pytest.raises(NetworkFetchError) as exc:
        station_page.fetch_station_rows("https://example.org/stations")
    assert exc.value.kind == kind
    assert exc.value.status_code == status


def test_network_failure(monkeypatch):
    def boom(*a, **k):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(station_page.requests, "get", boom)
    with pytest.raises(NetworkFetchError) as exc:
        station_page.fetch_station_rows("https://example.org/stations")
    assert exc.value.kind == "network"


def test_page_without_table(monkeypatch):
    monkeypatch.setattr(station_page.requests, "get", lambda *a, **k: FakeResponse(200, "<p>moved</p>"))
    with pytest.raises(NetworkFetchError) as exc:
        station_page.fetch_station_rows("https://example.org/stations")
    assert exc.value.kind == "no_table"

import pytest

from services.report import RunReport
from services.tables import TableLayout

STATIONS = [
    ("3002", "Baltasound"),
    ("3005", "Lerwick"),
    ("3066", "Kinloss"),
    ("3162", "Eskdalemuir"),
    ("3628", "Filton and Almondsbury"),
]
MEASURES = ("TEMP", "CLOUD")


def make_table_text(stations=STATIONS, measures=MEASURES,
                    date_line="Daily Weather Summary for 1 January 2020", rows=None):
    """Texto con la forma de una página DWS: 4 líneas de cabecera y 1 de pie"""
    lines = [
        date_line,
        "Selected UK readings at (L) 0000 and (R) 1200 UTC",
        "  ".join(["NO", "SITE", *measures]),
        "",
    ]
    for i, (sid, name) in enumerate(stations):
        cells = rows[i] if rows is not None else [str(10 + i), "5", str(11 + i), "-"]
        lines.append("  ".join([sid, name, *cells]))
    lines.append("(c) Crown copyright")
    return "\n".join(lines)


@pytest.fixture
def layout():
    return TableLayout(n_columns=6, header_line=2, skip_top=4, skip_bottom=1, min_rows=5)


@pytest.fixture
def report():
    return RunReport()

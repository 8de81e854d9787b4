"""Shared test fixtures for streamgraph tests."""

import pytest

from streamgraph.data import parse_csv

SAMPLE_CSV = "Date,A,B\n2024-01-01,1,2\n2024-02-01,3,4\n"

SEASONAL_CSV = """Date,Coffee,Tea,Juice
2024-01-01,10,5,2
2024-02-01,12,4,3
2024-03-01,8,6,7
2024-04-01,15,3,1
2024-05-01,9,9,4
"""


@pytest.fixture()
def sample_dataset():
    """Two records, two categories: {A:1,B:2} then {A:3,B:4}."""
    return parse_csv(SAMPLE_CSV)


@pytest.fixture()
def seasonal_dataset():
    return parse_csv(SEASONAL_CSV)


@pytest.fixture()
def seven_category_csv():
    keys = [f"K{i}" for i in range(7)]
    rows = [",".join(["Date", *keys])]
    for month in range(1, 4):
        rows.append(",".join([f"2024-{month:02d}-01", *[str(month + i) for i in range(7)]]))
    return "\n".join(rows) + "\n"

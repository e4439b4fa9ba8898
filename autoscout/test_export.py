"""
Tests for CSV/XLSX export of extracted vehicles.
"""
import pandas as pd

from .export import EXPORT_COLUMNS, save_vehicles, save_logs, vehicle_to_row, vehicles_to_frame
from .models import VehicleRecord


def _vehicle(**kw):
    values = dict(
        url="https://www.autoscout24.be/fr/offres/bmw-320-diesel-1",
        page=1,
        title="BMW 320d Touring",
        brand="BMW",
        model="320d Touring",
        price="€ 20 000",
        year="04/2018",
        mileage="125 000 km",
        power="110 kW (150 CH)",
        phone="0498 12 34 56",
    )
    values.update(kw)
    return VehicleRecord(**values)


def test_row_has_parsed_numeric_columns():
    row = vehicle_to_row(_vehicle())
    assert row["price_value"] == 20000
    assert row["year_value"] == 2018
    assert row["mileage_km"] == 125000
    assert row["power_value"] == 110
    assert row["phone"] == "32498123456"
    assert row["price"] == "€ 20 000"


def test_row_with_missing_values():
    row = vehicle_to_row(_vehicle(price="", year="", mileage="", power="", phone=""))
    assert row["price_value"] is None
    assert row["year_value"] is None
    assert row["mileage_km"] is None
    assert row["phone"] == ""


def test_frame_column_order():
    df = vehicles_to_frame([_vehicle(), _vehicle(url="https://x/offres/2", page=2)])
    assert list(df.columns) == EXPORT_COLUMNS
    assert len(df) == 2


def test_empty_frame_keeps_columns():
    df = vehicles_to_frame([])
    assert df.empty
    assert list(df.columns) == EXPORT_COLUMNS


def test_save_csv(tmp_path):
    out = tmp_path / "vehicles.csv"
    count = save_vehicles([_vehicle(), _vehicle(url="https://x/offres/2", note="navigation impossible")], str(out))
    assert count == 2

    df = pd.read_csv(out, dtype={"phone": str})
    assert df.loc[0, "brand"] == "BMW"
    assert df.loc[0, "phone"] == "32498123456"
    assert df.loc[1, "note"] == "navigation impossible"


def test_save_logs(tmp_path):
    out = tmp_path / "run.log"
    save_logs(["Starting extraction...", "=== Scraping complete ==="], str(out))
    assert out.read_text(encoding="utf-8").splitlines() == [
        "Starting extraction...",
        "=== Scraping complete ===",
    ]

"""
Export utilities for extracted vehicles and run logs.
"""
import logging
from typing import Iterable, List

import pandas as pd

from .models import VehicleRecord
from .utils import normalize_phone, parse_int_value, parse_year

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "title", "brand", "model", "price", "price_value", "year", "year_value",
    "mileage", "mileage_km", "fuel_type", "transmission", "power", "power_value",
    "location", "seller", "phone", "image_url", "url", "page", "note", "extracted_at",
]


def vehicle_to_row(vehicle: VehicleRecord, country_prefix: str = "32") -> dict:
    """Flatten a record, adding parsed numeric columns next to the raw strings."""
    row = vehicle.to_dict()
    row.update({
        "price_value": parse_int_value(vehicle.price),
        "year_value": parse_year(vehicle.year),
        "mileage_km": parse_int_value(vehicle.mileage),
        "power_value": parse_int_value(vehicle.power),
        "phone": normalize_phone(vehicle.phone, country_prefix),
    })
    return row


def vehicles_to_frame(vehicles: Iterable[VehicleRecord], country_prefix: str = "32") -> pd.DataFrame:
    rows = [vehicle_to_row(v, country_prefix) for v in vehicles]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def save_vehicles(vehicles: Iterable[VehicleRecord], out_path: str, country_prefix: str = "32") -> int:
    """Save vehicles to CSV or Excel file; returns the row count."""
    df = vehicles_to_frame(vehicles, country_prefix)
    if out_path.lower().endswith(".xlsx"):
        df.to_excel(out_path, index=False)
    else:
        df.to_csv(out_path, index=False)

    logger.info(">>> Saved %d rows to %s", len(df), out_path)
    return len(df)


def save_logs(lines: List[str], out_path: str) -> None:
    """Write the run's log messages, one per line."""
    with open(out_path, "w", encoding="utf-8") as fh:
        fh.write("\n".join(lines))
    logger.info(">>> Saved %d log lines to %s", len(lines), out_path)

import logging
from typing import List, Optional

import pandas as pd

from cricket_predictor.config import VENUES_CSV_PATH
from cricket_predictor.models import VenueProfile

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["ground", "ground_long", "country", "width", "height"]


def load_grounds(path: str = VENUES_CSV_PATH) -> pd.DataFrame:
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Venue file {path} is missing columns: {missing}")

    for col in ["ground", "ground_long", "country", "city", "batting_record", "bowling_record", "notes"]:
        if col in df.columns:
            df[col] = df[col].astype("string").str.strip()
    if "odi_only" in df.columns:
        df["odi_only"] = df["odi_only"].fillna(False).astype(str).str.lower().isin(["1", "true", "yes"])
    else:
        df["odi_only"] = False

    df = df.dropna(subset=["ground", "ground_long", "country", "width", "height"])
    logger.info("Loaded %d cricket grounds from %s", len(df), path)
    return df.sort_values("ground_long").reset_index(drop=True)


def _optional(row, col: str) -> Optional[str]:
    value = row.get(col)
    if value is None or pd.isna(value) or value == "":
        return None
    return str(value)


def _to_profile(row) -> VenueProfile:
    return VenueProfile(
        name=str(row["ground_long"]),
        country=str(row["country"]),
        width_meters=float(row["width"]),
        height_meters=float(row["height"]),
        is_odi_only=bool(row["odi_only"]),
        short_name=_optional(row, "ground"),
        city=_optional(row, "city"),
        batting_record=_optional(row, "batting_record"),
        bowling_record=_optional(row, "bowling_record"),
        notes=_optional(row, "notes"),
    )


class VenueDirectory:
    """Read-only venue reference data."""

    def __init__(self, grounds: Optional[pd.DataFrame] = None, path: str = VENUES_CSV_PATH):
        self._grounds = grounds if grounds is not None else load_grounds(path)

    def lookup(self, name: str) -> Optional[VenueProfile]:
        """Exact (case-insensitive) match on the full or short ground name."""
        key = (name or "").strip().lower()
        if not key:
            return None
        df = self._grounds
        hits = df[(df["ground_long"].str.lower() == key) | (df["ground"].str.lower() == key)]
        if hits.empty:
            return None
        return _to_profile(hits.iloc[0])

    def list(self, country: Optional[str] = None) -> List[VenueProfile]:
        df = self._grounds
        if country:
            df = df[df["country"].str.lower() == country.strip().lower()]
        return [_to_profile(row) for _, row in df.iterrows()]

    def search(self, query: str, country: Optional[str] = None) -> List[VenueProfile]:
        term = (query or "").strip().lower()
        return [
            v for v in self.list(country)
            if not term or term in v.name.lower() or term in (v.short_name or "").lower()
        ]

    def countries(self) -> List[str]:
        return sorted(self._grounds["country"].dropna().unique().tolist())

"""Load the country metrics table and the boundary collection, and join them by code."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np
import pandas as pd
import requests

import settings
from metrics import METRICS

log = logging.getLogger(__name__)

NUMERIC_COLUMNS = list(METRICS) + [settings.CONTEXT_COL, settings.FEMALE_COL, settings.MALE_COL]
REQUIRED_COLUMNS = [settings.CODE_COL, settings.NAME_COL] + list(METRICS)


class DataLoadError(RuntimeError):
    """Either input could not be fetched or parsed; nothing should be rendered."""


@dataclass(frozen=True)
class CountryRecord:
    code: str
    name: str
    metrics: Mapping[str, float | None]
    digital_context: float | None = None
    female: float | None = None
    male: float | None = None
    ratio: float | None = None

    def value(self, key: str) -> float | None:
        if key == settings.RATIO_COL:
            return self.ratio
        return self.metrics.get(key)

    @property
    def wass(self) -> float | None:
        return self.metrics.get("wass")


@dataclass(frozen=True, eq=False)
class Dataset:
    records: tuple[CountryRecord, ...]
    by_code: Mapping[str, CountryRecord]
    frame: pd.DataFrame
    geojson: dict[str, Any]
    unmatched_shapes: tuple[str, ...] = field(default=())
    unmatched_rows: tuple[str, ...] = field(default=())

    @property
    def known_codes(self) -> frozenset[str]:
        return frozenset(self.by_code)

    def get(self, code: str | None) -> CountryRecord | None:
        if code is None:
            return None
        return self.by_code.get(code)


# -----------------------------
# HELPERS
# -----------------------------
def absent(v) -> float | None:
    """``None`` for missing or non-finite values, the float otherwise."""
    if v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if np.isfinite(f) else None


def clean_numeric_column(series: pd.Series) -> pd.Series:
    """Numeric view of ``series``; anything unparsable or non-finite becomes NaN."""
    if series.dtype != object:
        return pd.to_numeric(series, errors="coerce").replace([np.inf, -np.inf], np.nan)
    s = series.astype(str).str.replace(",", "", regex=False).str.replace("%", "", regex=False)
    s = s.str.strip().replace({"NA": np.nan, "": np.nan, "nan": np.nan})
    return pd.to_numeric(s, errors="coerce").replace([np.inf, -np.inf], np.nan)


def compute_ratio(numerator, denominator) -> float | None:
    num, den = absent(numerator), absent(denominator)
    if num is None or den is None or den <= 0:
        return None
    return num / den


def add_ratio(df: pd.DataFrame, num_col: str = settings.FEMALE_COL,
              den_col: str = settings.MALE_COL) -> pd.DataFrame:
    out = df.copy()
    if num_col not in out.columns or den_col not in out.columns:
        log.warning("Ratio columns %s/%s missing; ratio is absent for every country", num_col, den_col)
        out[settings.RATIO_COL] = np.nan
        return out
    ratios = [compute_ratio(n, d) for n, d in zip(out[num_col], out[den_col])]
    out[settings.RATIO_COL] = pd.Series(ratios, index=out.index, dtype=float)
    return out


def color_domain(frame: pd.DataFrame, metric: str) -> tuple[float, float] | None:
    """[min, max] over present values of ``metric``; ``None`` when all are absent.

    Always computed from the whole frame, never cached per metric.
    """
    if metric not in frame.columns:
        return None
    values = pd.to_numeric(frame[metric], errors="coerce")
    values = values[np.isfinite(values)]
    if values.empty:
        return None
    return float(values.min()), float(values.max())


# -----------------------------
# METRICS TABLE
# -----------------------------
def read_metrics_table(path: Path | str) -> pd.DataFrame:
    path = Path(path)
    try:
        df = pd.read_csv(path, dtype={settings.CODE_COL: str}, keep_default_na=True)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Could not read metrics table {path}: {exc}") from exc

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DataLoadError(f"Metrics table {path} lacks required columns: {', '.join(missing)}")

    df[settings.CODE_COL] = df[settings.CODE_COL].fillna("").astype(str).str.strip().str.upper()
    for c in NUMERIC_COLUMNS:
        if c in df.columns:
            df[c] = clean_numeric_column(df[c])
        else:
            df[c] = np.nan

    no_code = df[settings.CODE_COL] == ""
    if no_code.any():
        log.warning("Dropping %d rows without a country code", int(no_code.sum()))
        df = df[~no_code]
    dupes = df[settings.CODE_COL].duplicated(keep="first")
    if dupes.any():
        log.warning("Dropping duplicate codes: %s", ", ".join(df.loc[dupes, settings.CODE_COL]))
        df = df[~dupes]

    df = add_ratio(df.reset_index(drop=True))
    names = df[settings.NAME_COL]
    df[settings.NAME_COL] = names.where(names.notna(), df[settings.CODE_COL]).astype(str).str.strip()
    return df[[settings.CODE_COL, settings.NAME_COL] + NUMERIC_COLUMNS + [settings.RATIO_COL]]


# -----------------------------
# BOUNDARY COLLECTION
# -----------------------------
def load_geojson(source: Path | str) -> dict[str, Any]:
    src = str(source)
    if src.startswith(("http://", "https://")):
        try:
            r = requests.get(src, timeout=settings.REQUEST_TIMEOUT)
            r.raise_for_status()
            geo = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise DataLoadError(f"Could not fetch boundaries from {src}: {exc}") from exc
    else:
        try:
            with open(src, encoding="utf-8") as fh:
                geo = json.load(fh)
        except (OSError, ValueError) as exc:
            raise DataLoadError(f"Could not read boundaries {src}: {exc}") from exc

    if not isinstance(geo, dict) or geo.get("type") != "FeatureCollection" \
            or not isinstance(geo.get("features"), list):
        raise DataLoadError(f"Boundary source {src} is not a GeoJSON FeatureCollection")
    return geo


def feature_code(feature: Mapping[str, Any]) -> str | None:
    code = (feature.get("properties") or {}).get(settings.FEATURE_CODE_KEY)
    if not code or not isinstance(code, str):
        return None
    return code.strip().upper()


def feature_codes(geojson: Mapping[str, Any]) -> list[str]:
    codes = (feature_code(f) for f in geojson.get("features", []))
    return [c for c in codes if c]


# -----------------------------
# JOIN
# -----------------------------
def to_record(row: Mapping[str, Any]) -> CountryRecord:
    return CountryRecord(
        code=row[settings.CODE_COL],
        name=row[settings.NAME_COL],
        metrics=MappingProxyType({k: absent(row.get(k)) for k in METRICS}),
        digital_context=absent(row.get(settings.CONTEXT_COL)),
        female=absent(row.get(settings.FEMALE_COL)),
        male=absent(row.get(settings.MALE_COL)),
        ratio=absent(row.get(settings.RATIO_COL)),
    )


def build_dataset(frame: pd.DataFrame, geojson: dict[str, Any]) -> Dataset:
    # views and records share one notion of absent
    numeric = frame.select_dtypes(include="number").columns
    frame = frame.copy()
    frame[numeric] = frame[numeric].replace([np.inf, -np.inf], np.nan)
    records = tuple(to_record(row) for row in frame.to_dict("records"))
    by_code = MappingProxyType({r.code: r for r in records})

    shape_codes = feature_codes(geojson)
    shape_set = set(shape_codes)
    unmatched_shapes = tuple(c for c in dict.fromkeys(shape_codes) if c not in by_code)
    unmatched_rows = tuple(r.code for r in records if r.code not in shape_set)
    if unmatched_shapes:
        log.info("%d shapes have no metrics row (drawn as no data): %s",
                 len(unmatched_shapes), ", ".join(unmatched_shapes[:10]))
    if unmatched_rows:
        log.warning("%d metrics rows have no boundary shape: %s",
                    len(unmatched_rows), ", ".join(unmatched_rows))

    return Dataset(records=records, by_code=by_code, frame=frame, geojson=geojson,
                   unmatched_shapes=unmatched_shapes, unmatched_rows=unmatched_rows)


def load_dataset(csv_path: Path | str | None = None,
                 geojson_source: Path | str | None = None) -> Dataset:
    """Load both inputs; any failure raises :class:`DataLoadError` before anything is built."""
    csv_path = csv_path or settings.CSV_PATH
    geojson_source = geojson_source or settings.GEOJSON_SOURCE
    frame = read_metrics_table(csv_path)
    geojson = load_geojson(geojson_source)
    ds = build_dataset(frame, geojson)
    log.info("Loaded %d countries, %d shapes", len(ds.records), len(geojson["features"]))
    return ds

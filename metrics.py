"""Metric registry: the fixed set of indicators the dashboard can map."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    HIGHER_BETTER = "higher_better"
    HIGHER_WORSE = "higher_worse"


@dataclass(frozen=True)
class MetricDescriptor:
    key: str
    label: str
    direction: Direction
    help_text: str

    @property
    def higher_is_better(self) -> bool:
        return self.direction is Direction.HIGHER_BETTER

    @property
    def direction_hint(self) -> str:
        return "Higher = better" if self.higher_is_better else "Higher = worse"


# Order matters: the first metric is the default selection.
METRICS: dict[str, MetricDescriptor] = {
    "derviw": MetricDescriptor(
        key="derviw",
        label="DERVIW (Risk Index)",
        direction=Direction.HIGHER_WORSE,
        help_text=(
            "Digital exclusion risk for people with visual impairment. Combines web "
            "accessibility severity with the national digital context."
        ),
    ),
    "idfdv": MetricDescriptor(
        key="idfdv",
        label="IDFDV (Inclusion Index)",
        direction=Direction.HIGHER_BETTER,
        help_text=(
            "Digital inclusion index for people with visual impairment. Rewards "
            "accessible public websites and a strong digital context."
        ),
    ),
    "wass": MetricDescriptor(
        key="wass",
        label="WASS (Web Accessibility Severity)",
        direction=Direction.HIGHER_WORSE,
        help_text=(
            "Severity of the accessibility barriers found on a sample of national "
            "websites. Zero means no barriers were detected."
        ),
    ),
}

DEFAULT_METRIC = next(iter(METRICS))
METRIC_OPTIONS = [{"label": m.label, "value": m.key} for m in METRICS.values()]


def get_metric(key: str | None) -> MetricDescriptor:
    """Descriptor for ``key``, falling back to the default metric."""
    return METRICS.get(key or "", METRICS[DEFAULT_METRIC])


# -----------------------------
# FORMATTING HELPERS
# -----------------------------
def _as_number(x) -> float | None:
    if x is None or isinstance(x, bool):
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(v) else v


def fmt(x, digits: int = 3) -> str:
    v = _as_number(x)
    return "NA" if v is None else f"{v:.{digits}f}"


def fmt_int(x) -> str:
    v = _as_number(x)
    return "NA" if v is None else f"{v:,.0f}"

"""Plotly figures for the four linked views.

Every builder takes the loaded dataset, the metric key and the active code,
and marks exactly the marks whose code equals the active code.
"""
from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.graph_objects as go

import settings
from data_loader import CountryRecord, Dataset, color_domain, feature_codes
from metrics import fmt, fmt_int, get_metric

CODE, NAME = settings.CODE_COL, settings.NAME_COL
ACTIVE_TRACE = "active"


def _style(fig: go.Figure, **layout) -> go.Figure:
    fig.update_layout(
        margin=dict(l=10, r=10, t=10, b=10),
        paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=settings.TEXT, family=settings.FONT_FAMILY, size=12),
        **layout,
    )
    return fig


def empty_figure(title: str = "") -> go.Figure:
    fig = go.Figure()
    _style(fig, title=title)
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return fig


def _marker_colors(codes: pd.Series, active: str | None, base: str) -> list[str]:
    return [settings.HILITE if c == active else base for c in codes]


# -----------------------------
# MAP
# -----------------------------
def map_figure(ds: Dataset, metric_key: str, active: str | None) -> go.Figure:
    metric = get_metric(metric_key)
    frame = ds.frame
    shapes = set(feature_codes(ds.geojson))
    fig = go.Figure()

    # Shapes without a metrics row: neutral and silent
    no_data = [c for c in dict.fromkeys(feature_codes(ds.geojson)) if c not in ds.by_code]
    if no_data:
        fig.add_trace(go.Choropleth(
            geojson=ds.geojson, featureidkey=f"properties.{settings.FEATURE_CODE_KEY}",
            locations=no_data, z=[0] * len(no_data), name="no data",
            colorscale=[[0, settings.NO_DATA_COLOR], [1, settings.NO_DATA_COLOR]],
            showscale=False, hoverinfo="skip",
            marker_line_color=settings.SHAPE_LINE, marker_line_width=1,
        ))

    drawn = frame[frame[CODE].isin(shapes)]
    values = pd.to_numeric(drawn[metric.key], errors="coerce")
    missing = drawn[values.isna()]
    present = drawn[values.notna()]
    hover = ("<b>%{customdata[1]} (%{customdata[0]})</b><br>"
             + metric.label + ": %{customdata[2]}<extra></extra>")

    if not missing.empty:
        fig.add_trace(go.Choropleth(
            geojson=ds.geojson, featureidkey=f"properties.{settings.FEATURE_CODE_KEY}",
            locations=missing[CODE], z=[0] * len(missing), name="missing",
            colorscale=[[0, settings.MISSING_COLOR], [1, settings.MISSING_COLOR]],
            showscale=False,
            customdata=np.column_stack([missing[CODE], missing[NAME], ["NA"] * len(missing)]),
            hovertemplate=hover,
            marker_line_color=settings.SHAPE_LINE, marker_line_width=1,
        ))

    domain = color_domain(frame, metric.key)
    if domain is None:
        fig.add_annotation(text=f"No data for {metric.label}", showarrow=False,
                           x=0.5, y=0.5, xref="paper", yref="paper",
                           font=dict(color=settings.TEXT_DIM, size=14))
    elif not present.empty:
        zmin, zmax = domain
        fig.add_trace(go.Choropleth(
            geojson=ds.geojson, featureidkey=f"properties.{settings.FEATURE_CODE_KEY}",
            locations=present[CODE], z=pd.to_numeric(present[metric.key]), name="value",
            zmin=zmin, zmax=zmax, colorscale=settings.COLOR_SCALE,
            customdata=np.column_stack([present[CODE], present[NAME],
                                        [fmt(v) for v in present[metric.key]]]),
            hovertemplate=hover,
            marker_line_color=settings.SHAPE_LINE, marker_line_width=1,
            colorbar=dict(title=dict(text=f"{metric.label}<br>{metric.direction_hint}",
                                     font=dict(color=settings.TEXT)),
                          tickfont=dict(color=settings.TEXT)),
        ))

    # overlay for the active country (outline, transparent fill)
    if active is not None and active in ds.by_code and active in shapes:
        fig.add_trace(go.Choropleth(
            geojson=ds.geojson, featureidkey=f"properties.{settings.FEATURE_CODE_KEY}",
            locations=[active], z=[1], name=ACTIVE_TRACE, showscale=False,
            colorscale=[[0, "rgba(0,0,0,0)"], [1, "rgba(0,0,0,0)"]],
            marker_line_width=2.5, marker_line_color=settings.HILITE,
            hoverinfo="skip",
        ))

    _style(fig, uirevision="map", geo_bgcolor="rgba(0,0,0,0)")
    fig.update_geos(fitbounds="geojson", visible=False, projection_type="mercator")
    return fig


# -----------------------------
# RANKING
# -----------------------------
def rank_figure(ds: Dataset, metric_key: str, active: str | None) -> go.Figure:
    metric = get_metric(metric_key)
    df = ds.frame[[CODE, NAME, metric.key]].dropna(subset=[metric.key])
    if df.empty:
        return empty_figure(f"No data for {metric.label}")
    # best country on top
    df = df.sort_values(metric.key, ascending=not metric.higher_is_better, kind="mergesort")
    fig = go.Figure(go.Bar(
        x=df[metric.key], y=df[NAME], orientation="h",
        marker_color=_marker_colors(df[CODE], active, settings.ACCENT),
        customdata=df[CODE],
        hovertemplate="%{y}: %{x:.3f}<extra></extra>",
    ))
    _style(fig, yaxis=dict(autorange="reversed"), uirevision="rank")
    fig.update_xaxes(title_text=f"{metric.label} ({metric.direction_hint.lower()})")
    return fig


# -----------------------------
# SCATTER
# -----------------------------
def scatter_figure(ds: Dataset, metric_key: str, active: str | None) -> go.Figure:
    metric = get_metric(metric_key)
    x_col = settings.CONTEXT_COL
    df = ds.frame[[CODE, NAME, x_col, metric.key]].dropna(subset=[x_col, metric.key])
    if df.empty:
        return empty_figure(f"No data for {metric.label}")
    is_sel = df[CODE] == active
    fig = go.Figure(go.Scatter(
        x=df[x_col], y=df[metric.key], mode="markers+text",
        text=df[CODE], textposition="top center", textfont=dict(color=settings.TEXT_DIM, size=10),
        marker=dict(size=[13 if s else 9 for s in is_sel], opacity=0.85,
                    color=_marker_colors(df[CODE], active, settings.ACCENT_ALT),
                    line=dict(color=[settings.HILITE if s else "rgba(0,0,0,0)" for s in is_sel],
                              width=[2 if s else 0 for s in is_sel])),
        customdata=df[CODE], hovertext=df[NAME],
        hovertemplate="<b>%{hovertext}</b><br>Digital context: %{x:.3f}<br>"
                      + metric.label + ": %{y:.3f}<extra></extra>",
    ))
    _style(fig, uirevision="scatter", showlegend=False)
    fig.update_xaxes(title_text="Digital context", gridcolor=settings.BORDER)
    fig.update_yaxes(title_text=metric.label, gridcolor=settings.BORDER)
    return fig


# -----------------------------
# GENDER RATIO
# -----------------------------
def gender_figure(ds: Dataset, active: str | None) -> go.Figure:
    df = ds.frame[[CODE, NAME, settings.RATIO_COL, settings.FEMALE_COL, settings.MALE_COL]]
    df = df.dropna(subset=[settings.RATIO_COL])
    if df.empty:
        return empty_figure("No gender ratio data")
    df = df.sort_values(settings.RATIO_COL, ascending=False, kind="mergesort")
    fig = go.Figure(go.Bar(
        x=df[CODE], y=df[settings.RATIO_COL],
        marker_color=_marker_colors(df[CODE], active, settings.ACCENT),
        customdata=np.column_stack([df[CODE], df[NAME],
                                    [fmt_int(v) for v in df[settings.FEMALE_COL]],
                                    [fmt_int(v) for v in df[settings.MALE_COL]]]),
        hovertemplate="<b>%{customdata[1]}</b><br>Female/male: %{y:.3f}"
                      "<br>Female: %{customdata[2]} · Male: %{customdata[3]}<extra></extra>",
    ))
    fig.add_hline(y=1, line_dash="dot", line_color=settings.TEXT_DIM)
    _style(fig, uirevision="gender")
    fig.update_yaxes(title_text="Female / male visual impairment", gridcolor=settings.BORDER)
    return fig


# -----------------------------
# DETAIL CARD
# -----------------------------
def detail_lines(record: CountryRecord, metric_key: str) -> list[str]:
    metric = get_metric(metric_key)
    return [
        f"{record.name} ({record.code})",
        f"{metric.label}: {fmt(record.value(metric.key))}",
        f"WASS: {fmt(record.wass)} · Digital context: {fmt(record.digital_context)}",
        f"Female VI (abs): {fmt_int(record.female)}",
        f"Female/male ratio: {fmt(record.ratio)}",
    ]


def build_views(ds: Dataset, metric_key: str, active: str | None) -> dict[str, go.Figure]:
    """All four views for one (metric, active code) pair."""
    return {
        "map": map_figure(ds, metric_key, active),
        "rank": rank_figure(ds, metric_key, active),
        "scatter": scatter_figure(ds, metric_key, active),
        "gender": gender_figure(ds, active),
    }

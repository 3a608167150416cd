"""Utilities for parsing model output into renderer-ready chart data.

The model is asked for one JSON object.  This module extracts it,
adapts legacy key names to the canonical schema, validates the fields
the renderer depends on and normalises the result:

* pie records are reduced to ``{"segment", "value"}`` pairs,
* every ``chartConfig`` series gets a positional palette colour.

The parsed payload is never modified; normalisation works on a copy.
"""

from __future__ import annotations

import copy
import json
import re
from dataclasses import dataclass
from typing import Any, Mapping

from loguru import logger

from ..models.enums import ChartType
from .error_handler import ChartParseFailure, InvalidChartStructureError

PALETTE_TEMPLATE = "hsl(var(--chart-{slot}))"
PIE_SEGMENT_KEY = "segment"
PIE_VALUE_KEY = "value"
SEGMENT_FALLBACK_KEYS = ("segment", "category", "name")

CHART_FIELDS = frozenset({"chartType", "chart_type", "config", "data", "chartConfig", "chart_config"})
LEGACY_KEYS = {"chart_type": "chartType", "chart_config": "chartConfig", "txt_response": "txtResponse"}

_FENCED_JSON = re.compile(r"```(?:json)?\s*\n(.*?)\n?```", re.DOTALL)
_KNOWN_CHART_TYPES = {member.value for member in ChartType}


@dataclass
class ChartNormalization:
    """Outcome of processing one model reply."""

    narrative: str
    tool_use: dict[str, Any] | None = None
    chart_data: dict[str, Any] | None = None
    parse_error: str | None = None

    @property
    def has_tool_use(self) -> bool:
        return self.tool_use is not None


def palette_ref(slot: int) -> str:
    """Return the colour token of the 1-based palette ``slot``."""
    return PALETTE_TEMPLATE.format(slot=slot)


def extract_json_payload(raw: str) -> dict[str, Any]:
    """Parse the model reply into a JSON object.

    A bare object is expected; an object wrapped in a fenced ``json``
    code block is accepted as well.

    Raises
    ------
    ChartParseFailure
        If no JSON object can be recovered from ``raw``.
    """
    text = raw.strip()
    candidates = [text]
    fenced = _FENCED_JSON.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        if isinstance(parsed, dict):
            return parsed
        last_error = ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    raise ChartParseFailure(str(last_error))


def adapt_legacy_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``payload`` with snake_case chart keys renamed to camelCase."""
    adapted = dict(payload)
    for legacy, canonical in LEGACY_KEYS.items():
        if legacy in adapted and canonical not in adapted:
            adapted[canonical] = adapted.pop(legacy)
    return adapted


def has_chart_fields(payload: Mapping[str, Any]) -> bool:
    return any(key in payload for key in CHART_FIELDS)


def validate_chart_structure(payload: Mapping[str, Any]) -> None:
    """Check the fields the normaliser and renderer rely on."""
    chart_type = payload.get("chartType")
    if not isinstance(chart_type, str) or not chart_type:
        raise InvalidChartStructureError("Invalid chart data structure", details="chartType is required")
    if not isinstance(payload.get("data"), list):
        raise InvalidChartStructureError("Invalid chart data structure", details="data must be an array")

    config = payload.get("config")
    if config is not None and not isinstance(config, dict):
        raise InvalidChartStructureError("Invalid chart data structure", details="config must be an object")
    x_axis_key = (config or {}).get("xAxisKey")
    if x_axis_key is not None and not isinstance(x_axis_key, str):
        raise InvalidChartStructureError(
            "Invalid chart data structure", details="config.xAxisKey must be a string"
        )

    chart_config = payload.get("chartConfig")
    if chart_config is not None:
        if not isinstance(chart_config, dict):
            raise InvalidChartStructureError(
                "Invalid chart data structure", details="chartConfig must be an object"
            )
        for key, entry in chart_config.items():
            if not isinstance(entry, dict):
                raise InvalidChartStructureError(
                    "Invalid chart data structure",
                    details=f"chartConfig entry {key!r} must be an object",
                )

    if chart_type not in _KNOWN_CHART_TYPES:
        logger.warning("Unknown chart type {!r}; passing data through unchanged", chart_type)


def _first_present(record: Mapping[str, Any], keys: tuple[str | None, ...]) -> Any:
    for key in keys:
        if key is not None and record.get(key) is not None:
            return record[key]
    return None


def remap_pie_records(
    records: list[Any],
    segment_key: str | None,
    value_key: str | None,
) -> list[dict[str, Any]]:
    """Reduce every pie record to exactly ``segment`` and ``value``."""
    remapped: list[dict[str, Any]] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise InvalidChartStructureError(
                "Invalid chart data structure", details=f"data[{index}] must be an object"
            )
        segment = _first_present(record, (segment_key, *SEGMENT_FALLBACK_KEYS))
        if segment is None:
            logger.warning("Pie record {} has no segment field: {}", index, record)
        remapped.append(
            {
                PIE_SEGMENT_KEY: segment,
                PIE_VALUE_KEY: _first_present(record, (value_key, PIE_VALUE_KEY)),
            }
        )
    return remapped


def apply_palette(chart_config: Mapping[str, Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    """Return a new ``chartConfig`` with positional palette colours."""
    return {
        key: {**entry, "color": palette_ref(position)}
        for position, (key, entry) in enumerate(chart_config.items(), start=1)
    }


def normalize_chart(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and normalise a parsed chart description.

    Raises
    ------
    InvalidChartStructureError
        If ``chartType`` is missing or empty, ``data`` is not an array,
        or ``config``/``chartConfig`` have the wrong shape.
    """
    chart = copy.deepcopy(adapt_legacy_keys(payload))
    validate_chart_structure(chart)
    chart_config = chart.get("chartConfig") or {}

    if chart["chartType"] == ChartType.PIE.value:
        config = chart.get("config") or {}
        value_key = next(iter(chart_config), None)
        chart["data"] = remap_pie_records(chart["data"], config.get("xAxisKey"), value_key)
        chart["config"] = {**config, "xAxisKey": PIE_SEGMENT_KEY}

    chart["chartConfig"] = apply_palette(chart_config)
    return chart


def normalize_chart_response(raw: str) -> ChartNormalization:
    """Process one model reply.

    Unparseable output is not an error: the raw text is returned as the
    narrative and no chart is attached.  A parsed object without chart
    fields is a plain answer.  A parsed object with chart fields that
    fail validation raises :class:`InvalidChartStructureError`.
    """
    try:
        payload = extract_json_payload(raw)
    except ChartParseFailure as exc:
        logger.warning("Model output is not a JSON object, returning text only: {}", exc)
        return ChartNormalization(narrative=raw, parse_error=str(exc))

    narrative = payload.get("txtResponse") or payload.get("txt_response")
    if not isinstance(narrative, str) or not narrative:
        narrative = raw

    if not has_chart_fields(payload):
        logger.debug("Model answered without a chart")
        return ChartNormalization(narrative=narrative)

    chart_data = normalize_chart(payload)
    logger.info(
        "Normalised {} chart with {} records and {} series",
        chart_data["chartType"],
        len(chart_data["data"]),
        len(chart_data["chartConfig"]),
    )
    return ChartNormalization(narrative=narrative, tool_use=payload, chart_data=chart_data)

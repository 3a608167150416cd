"""Pydantic description of the chart payload the model is asked to emit.

The normaliser itself works on plain dictionaries because the model's
output is untrusted and has to keep whatever extra keys it carries.
These models document the canonical schema and provide the JSON schema
embedded in the system prompt.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import ChartType, TrendDirection


class ChartTrend(BaseModel):
    percentage: float = Field(..., description="Change expressed as a percentage.")
    direction: TrendDirection


class ChartSettings(BaseModel):
    """Presentation settings of a chart (the ``config`` object)."""

    model_config = ConfigDict(extra="allow")

    title: str
    description: str
    trend: Optional[ChartTrend] = None
    footer: Optional[str] = None
    totalLabel: Optional[str] = None
    xAxisKey: Optional[str] = Field(
        default=None,
        description="Name of the record field used for the x axis or pie segments.",
    )


class SeriesConfig(BaseModel):
    """Styling of a single data series in ``chartConfig``."""

    model_config = ConfigDict(extra="allow")

    label: str
    stacked: Optional[bool] = None
    color: Optional[str] = None


class ChartDescription(BaseModel):
    """Structured chart answer produced by the model."""

    model_config = ConfigDict(extra="allow")

    chartType: ChartType = Field(..., description="The type of chart to generate.")
    config: ChartSettings
    data: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Ordered records; every record maps field names to values.",
    )
    chartConfig: Dict[str, SeriesConfig] = Field(
        default_factory=dict,
        description="Series key to styling. Keys must match numeric fields in data.",
    )
    txtResponse: str = Field(
        ...,
        description="Narrative answer shown to the user next to the chart.",
    )


def chart_description_schema() -> dict[str, Any]:
    """Return the JSON schema of :class:`ChartDescription`."""
    return ChartDescription.model_json_schema()

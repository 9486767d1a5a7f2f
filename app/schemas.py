"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Any, List

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_serializer,
    field_validator,
)

from models.durations import MINUTE, check_duration_range, format_duration, parse_duration


class ChartConfig(BaseModel):
    """Which sensor series one chart shows and how they are smoothed.

    ``duration`` is held in nanoseconds; zero means the whole history. On the
    wire it is a time-span string such as ``"5m0s"``, and a raw integer
    nanosecond count is accepted as input too.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    type: str = ""
    filter: List[str] = Field(default_factory=list, description="Labels to leave out.")
    avg_period: int = Field(0, alias="avgPeriod", strict=True, description="Moving average window in samples.")
    duration: int = Field(0, description="Time window in nanoseconds, 0 for everything.")

    @field_validator("filter", mode="before")
    @classmethod
    def _null_filter(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("name", "type", "avg_period", mode="before")
    @classmethod
    def _null_to_zero(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return 0 if info.field_name == "avg_period" else ""
        return value

    @field_validator("duration", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> int:
        if isinstance(value, str):
            return parse_duration(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return check_duration_range(value)
        raise ValueError("duration must be a time-span string or an integer nanosecond count")

    @field_serializer("duration")
    def _format_duration(self, value: int) -> str:
        return format_duration(value)

    def query(self) -> str:
        """Compact JSON used in ``/chart`` URLs."""
        return self.model_dump_json(by_alias=True)


ChartConfigList = TypeAdapter(List[ChartConfig])


def parse_configs(text: str) -> List[ChartConfig]:
    return ChartConfigList.validate_json(text)


def configs_query(configs: List[ChartConfig]) -> str:
    return ChartConfigList.dump_json(configs, by_alias=True).decode("utf-8")


def configs_text(configs: List[ChartConfig]) -> str:
    """Indented JSON shown in the configuration editor."""
    return ChartConfigList.dump_json(configs, by_alias=True, indent=1).decode("utf-8")


def default_chart_configs() -> List[ChartConfig]:
    return [
        ChartConfig(
            name="Temperatures",
            type="temperature",
            filter=["AUXTIN0", "AUXTIN1", "AUXTIN2", "AUXTIN3"],
            avg_period=8,
            duration=5 * MINUTE,
        ),
        ChartConfig(
            name="Fan speeds",
            type="fanspeed",
            avg_period=8,
            duration=5 * MINUTE,
        ),
    ]


class SensorInfo(BaseModel):
    """A known sensor series and how many points it holds."""

    adapter: str
    name: str
    label: str
    type: str
    source: str
    points: int = Field(..., ge=0)


class HealthStatus(BaseModel):
    status: str
    series: int = Field(..., ge=0, description="Number of sensor series collected so far.")

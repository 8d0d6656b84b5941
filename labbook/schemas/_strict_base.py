# labbook/schemas/_strict_base.py
"""Strict schema baselines: unknown fields are rejected everywhere."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Value objects passed between services."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Request payloads; whitespace is trimmed so blank strings can be caught."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)


class StrictResponseModel(StrictModel):
    """Response DTOs built straight from ORM rows."""

    model_config = ConfigDict(extra="forbid", from_attributes=True, validate_assignment=False)

"""Pydantic models for coordinates, pass windows and upstream payloads."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class Coordinates(BaseModel):
    """Approximate position of the caller, in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(allow_inf_nan=False)
    longitude: float = Field(allow_inf_nan=False)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _reject_bool(cls, value: object) -> object:
        # bool is an int subclass and would otherwise coerce to 0.0/1.0
        if isinstance(value, bool):
            raise ValueError("coordinate must be numeric, not a boolean")
        return value


class PassWindow(BaseModel):
    """A predicted overhead pass: unix rise time plus duration in seconds."""

    model_config = ConfigDict(frozen=True)

    risetime: StrictInt
    duration: StrictInt

    @property
    def rise_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.risetime, tz=timezone.utc)

    def as_dict(self) -> Dict[str, int]:
        return {"risetime": self.risetime, "duration": self.duration}


class IPEchoPayload(BaseModel):
    """Body returned by the IP echo endpoint."""

    ip: str = Field(min_length=1)


class GeoPayload(BaseModel):
    """Body returned by the geolocation endpoint; only `data` is used."""

    data: Coordinates


class PassTimesPayload(BaseModel):
    """Body returned by the pass prediction endpoint."""

    response: List[PassWindow]

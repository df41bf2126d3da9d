from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class DetectRequest(_Model):
    sample_rate: int = Field(alias="sampleRate", gt=0, le=384_000)
    samples: list[float] = Field(min_length=2, max_length=1 << 16)
    min_hz: float = Field(alias="minHz", default=20.0, ge=0.0)
    max_hz: float | None = Field(alias="maxHz", default=None, gt=0.0)
    noise_floor: float = Field(alias="noiseFloor", default=1e-4, ge=0.0)
    window: str = "hann"
    refinement: str = "parabolic_log"


class DetectResponse(_Model):
    hz: float | None
    reason: str | None = None
    bin_index: int | None = Field(alias="binIndex", default=None)
    bin_hz: float | None = Field(alias="binHz", default=None)
    magnitude: float | None = None
    note: str | None = None
    cents: float | None = None


class BlockEstimate(_Model):
    t: float
    hz: float | None


class FileDetectResponse(_Model):
    sample_rate: int = Field(alias="sampleRate")
    window_size: int = Field(alias="windowSize")
    blocks: list[BlockEstimate]

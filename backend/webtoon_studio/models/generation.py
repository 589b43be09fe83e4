"""Scenario generation data models."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from webtoon_studio.models.character import CamelModel, ImagePart


class ProviderMode(str, Enum):
    """Known provider modes. Any other value sent by a client means no provider."""

    gemini = "nano-banana"
    default = "default"
    mock = "mock"


class PlaceholderVariant(str, Enum):
    """Kinds of placeholder image produced when the provider path yields nothing."""

    disabled = "disabled"
    failed = "failed"


class FailureKind(str, Enum):
    """Why the provider did not produce an image."""

    unavailable = "unavailable"
    timeout = "timeout"
    transport = "transport"
    http_error = "http_error"
    refusal = "refusal"


class GenerateRequest(CamelModel):
    """Request model for POST /api/generate."""

    scenario_text: str
    character_ids: list[str] = Field(default_factory=list)
    provider_mode: str = ProviderMode.default.value

    @property
    def wants_gemini(self) -> bool:
        return self.provider_mode == ProviderMode.gemini.value


class GenerateResponse(CamelModel):
    """Outcome of one generation run returned to the caller."""

    success: bool = True
    image_reference: str
    assembled_prompt: str
    diagnostic: str = ""


class GenerateFailure(CamelModel):
    """Body returned when a generation could not be recorded."""

    success: bool = False
    error: str = "Generation failed"


class AssembledPrompt(BaseModel):
    """Final prompt text and the image parts sent after it."""

    text: str
    images: list[ImagePart] = Field(default_factory=list)


class ProviderOutcome(BaseModel):
    """Result of one provider call: an image or a failure reason, never both."""

    image: Optional[ImagePart] = None
    error: Optional[str] = None
    failure_kind: Optional[FailureKind] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "ProviderOutcome":
        if (self.image is None) == (self.error is None):
            raise ValueError("ProviderOutcome needs exactly one of image or error")
        if self.error is not None and self.failure_kind is None:
            raise ValueError("failure_kind is required when error is set")
        return self

    @classmethod
    def success(cls, data: bytes, mime_type: str) -> "ProviderOutcome":
        return cls(image=ImagePart(data=data, mime_type=mime_type))

    @classmethod
    def failure(cls, kind: FailureKind, reason: str) -> "ProviderOutcome":
        return cls(error=reason, failure_kind=kind)

    @property
    def ok(self) -> bool:
        return self.image is not None


class ScenarioRecord(CamelModel):
    """Persisted scenario. The prompt is a snapshot of character data at generation time."""

    id: str
    content: str
    character_id: Optional[str] = None
    character_ids: list[str] = Field(default_factory=list)
    prompt: str = ""
    created_at: datetime


class GenerationRecord(CamelModel):
    """Persisted generation outcome linked to exactly one scenario."""

    id: str
    scenario_id: str
    image_url: str = Field(..., min_length=1)
    created_at: datetime


class GenerationHistoryItem(GenerationRecord):
    """Generation joined with its scenario for the history listing."""

    scenario: Optional[ScenarioRecord] = None

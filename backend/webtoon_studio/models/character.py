"""Character registry and character reference data models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CharacterCreate(CamelModel):
    """Request body for creating or replacing a character."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    image_url: Optional[str] = None


class Character(CamelModel):
    """A character stored in the registry."""

    id: str
    name: str
    description: str = ""
    image_url: Optional[str] = None
    created_at: datetime


class ImagePart(BaseModel):
    """Binary image payload with its media type, used only for outgoing requests."""

    data: bytes
    mime_type: str = "image/png"


class ResolvedCharacter(BaseModel):
    """Character text captured at generation time."""

    id: str
    name: str
    description: str


class CharacterContext(BaseModel):
    """Output of the character reference loader, in request order."""

    characters: list[ResolvedCharacter] = Field(default_factory=list)
    images: list[ImagePart] = Field(default_factory=list)

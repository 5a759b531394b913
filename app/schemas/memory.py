"""Memory schemas. Attached files are a tagged union on "type"."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from app.schemas.auth import CamelModel


class ImageFile(BaseModel):
    type: Literal["image"] = "image"
    name: str


class VideoFile(BaseModel):
    type: Literal["video"] = "video"
    name: str


class AudioFile(BaseModel):
    type: Literal["audio"] = "audio"
    name: str


MemoryFile = Annotated[Union[ImageFile, VideoFile, AudioFile], Field(discriminator="type")]

FILE_KINDS = ("image", "video", "audio")


def file_kind_for_mime(mime_type: str | None) -> str:
    """Kind of an uploaded file from its MIME type; anything not video/audio counts as image."""
    mime = (mime_type or "").lower()
    if mime.startswith("video/"):
        return "video"
    if mime.startswith("audio/"):
        return "audio"
    return "image"


class MemoryCreate(CamelModel):
    # Presence of title/position is checked in the route so both report the same message.
    title: str | None = None
    description: str | None = ""
    position: list[float] | None = None
    files: list[MemoryFile] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    @field_validator("position")
    @classmethod
    def position_pair(cls, v: list[float] | None) -> list[float] | None:
        if v is None:
            return v
        if len(v) != 2:
            raise ValueError("Position must be a [latitude, longitude] pair.")
        lat, lng = v
        if not -90 <= lat <= 90:
            raise ValueError("Latitude must be between -90 and 90.")
        if not -180 <= lng <= 180:
            raise ValueError("Longitude must be between -180 and 180.")
        return v


class MemoryResponse(CamelModel):
    id: str
    title: str
    description: str
    position: list[float]
    files: list[MemoryFile]
    author: str

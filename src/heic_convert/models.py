"""
Pydantic models for conversion options, decoded images and output plans.

Defines both input models (options, selections, destinations) and output
models (conversion records and container info reports).
"""

import io
import os
from enum import Enum
from typing import Callable, List, Literal, Optional, Union

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .errors import InputError, ValidationError

# Selection value on the command line meaning "every image in the container"
ALL_IMAGES = -1

# Token in an output path that is replaced with the image index
PLACEHOLDER = "%s"

STREAM_SENTINEL = "-"

DEFAULT_QUALITY = 1.0


class ImageFormat(str, Enum):
    """Output raster formats."""
    JPG = "jpg"
    PNG = "png"

    @property
    def pillow_format(self) -> str:
        return PILLOW_FORMATS[self]


PILLOW_FORMATS = {
    ImageFormat.JPG: "JPEG",
    ImageFormat.PNG: "PNG",
}

FORMAT_ALIASES = {
    "jpeg": "jpg",
}


def normalize_format(value: str) -> str:
    """Lower-case a format name and map known aliases to the short name."""
    value = value.strip().lower()
    return FORMAT_ALIASES.get(value, value)


# ==================== Options Models (Input) ====================


class ConvertOptions(BaseModel):
    """Encoder settings, validated once before any image is decoded."""
    format: ImageFormat = Field(default=ImageFormat.JPG, description="Output format")
    quality: float = Field(
        default=DEFAULT_QUALITY,
        gt=0,
        le=1,
        description="Compression quality in (0, 1]; ignored for PNG",
    )

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, value):
        if isinstance(value, str):
            return normalize_format(value)
        return value


class SelectionSpec(BaseModel):
    """Images requested by the user, before the container size is known."""
    all_images: bool = Field(default=False, description="Select every image")
    indices: List[int] = Field(default_factory=lambda: [0], min_length=1)

    @classmethod
    def everything(cls) -> "SelectionSpec":
        return cls(all_images=True)


class ResolvedSelection(BaseModel):
    """Selection checked against the number of decoded images."""
    indices: List[int] = Field(description="Image indices in output order")
    total_count: int = Field(description="Number of images in the container")

    @property
    def is_single(self) -> bool:
        return len(self.indices) == 1


# ==================== Decoded Images ====================


class ImageHandle(BaseModel):
    """
    One decoded frame of the input container.

    The index is assigned by the decoder and never changes. Pixel data is
    loaded on demand by ``encode``.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="Zero-based position in the container")
    width: int = Field(ge=0)
    height: int = Field(ge=0)

    _loader: Callable[[], Image.Image] = PrivateAttr()

    def __init__(self, *, loader: Callable[[], Image.Image], **data):
        super().__init__(**data)
        self._loader = loader

    def encode(self, image_format: ImageFormat, quality: float = DEFAULT_QUALITY) -> bytes:
        """Encode this frame into the target format and return the bytes."""
        try:
            image = self._loader()
        except (ValueError, RuntimeError, OSError) as e:
            raise InputError(f"could not decode image {self.index}: {e}") from e

        options = {}
        if image_format is ImageFormat.JPG:
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            options["quality"] = max(1, min(100, round(quality * 100)))

        buffer = io.BytesIO()
        try:
            image.save(buffer, format=image_format.pillow_format, **options)
        except ValueError as e:
            raise InputError(f"could not encode image {self.index}: {e}") from e
        return buffer.getvalue()


# ==================== Destinations ====================


class StreamDestination(BaseModel):
    """The process standard output stream."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["stream"] = "stream"

    def label(self) -> str:
        return "<stdout>"


class PathDestination(BaseModel):
    """A file path, optionally containing the index placeholder."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["path"] = "path"
    path: str = Field(min_length=1)

    @property
    def has_placeholder(self) -> bool:
        return PLACEHOLDER in self.path

    def label(self) -> str:
        return self.path


Destination = Union[StreamDestination, PathDestination]


def parse_destination(value: Optional[str]) -> Destination:
    """Map the command-line output value onto a destination variant."""
    if value is None or value == STREAM_SENTINEL:
        return StreamDestination()
    if not value.strip():
        raise ValidationError("output path must not be empty; use - for stdout")
    if value.endswith(("/", os.sep)) or os.path.isdir(value):
        raise ValidationError(
            f"output path {value} is a directory; give a file name such as "
            f"{os.path.join(value, 'out-%s.jpg')}"
        )
    return PathDestination(path=value)


class PlannedWrite(BaseModel):
    """One image bound to one concrete destination."""
    handle: ImageHandle
    target: Destination = Field(discriminator="kind")


class OutputPlan(BaseModel):
    """Ordered writes produced by routing a selection."""
    writes: List[PlannedWrite] = Field(default_factory=list)

    def targets(self) -> List[str]:
        return [write.target.label() for write in self.writes]


# ==================== Report Models (Output) ====================


class ConversionRecord(BaseModel):
    """
    Result of one completed write.

    One record per written image, stored in the optional manifest CSV.
    """
    index: int = Field(description="Source image index")
    destination: str = Field(description="Output path or <stdout>")
    width: int = Field(description="Image width in pixels")
    height: int = Field(description="Image height in pixels")
    format: ImageFormat = Field(description="Output format")
    quality: float = Field(description="Quality passed to the encoder")
    size_bytes: int = Field(description="Number of bytes written")

    def to_csv_row(self) -> dict:
        """Convert to dictionary for CSV export."""
        return {
            "index": self.index,
            "destination": self.destination,
            "width": self.width,
            "height": self.height,
            "format": self.format.value,
            "quality": self.quality,
            "size_bytes": self.size_bytes,
        }


class ImageInfo(BaseModel):
    """Dimensions of one image in the container."""
    index: int
    width: int
    height: int


class ContainerInfo(BaseModel):
    """Summary printed by the info command."""
    count: int = Field(description="Number of images in the container")
    images: List[ImageInfo] = Field(default_factory=list)

"""
heic-convert - HEIC to JPEG/PNG Converter

Decodes every image in a HEIC container with pillow-heif, selects the
requested images and writes them to stdout or to templated file paths.
"""

from .models import (
    ImageFormat,
    ConvertOptions,
    SelectionSpec,
    ResolvedSelection,
    ImageHandle,
    StreamDestination,
    PathDestination,
    OutputPlan,
    ConversionRecord,
    ContainerInfo,
    parse_destination,
)
from .errors import (
    HeicConvertError,
    InputError,
    ValidationError,
    SelectionError,
    RoutingError,
    MultiOutputToStreamError,
    WriteError,
)
from .decoder import decode_all, read_input
from .converter import (
    validate_options,
    parse_selection,
    resolve_selection,
    route,
    execute,
    convert,
)

__version__ = "0.1.0"
__all__ = [
    "ImageFormat",
    "ConvertOptions",
    "SelectionSpec",
    "ResolvedSelection",
    "ImageHandle",
    "StreamDestination",
    "PathDestination",
    "OutputPlan",
    "ConversionRecord",
    "ContainerInfo",
    "parse_destination",
    "HeicConvertError",
    "InputError",
    "ValidationError",
    "SelectionError",
    "RoutingError",
    "MultiOutputToStreamError",
    "WriteError",
    "decode_all",
    "read_input",
    "validate_options",
    "parse_selection",
    "resolve_selection",
    "route",
    "execute",
    "convert",
]

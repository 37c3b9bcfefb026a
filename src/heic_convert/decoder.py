"""
Input acquisition and HEIC decoding.

Reads the container bytes from a file or stdin and turns them into
an ordered list of ImageHandle objects backed by pillow-heif.
"""

import io
import sys
from pathlib import Path
from typing import List, Optional, Union

import pillow_heif
import typer

from .errors import InputError
from .models import STREAM_SENTINEL, ContainerInfo, ImageHandle, ImageInfo

NOT_HEIC_MESSAGE = "input buffer is not a HEIC image"


def read_input(source: Optional[Union[str, Path]] = None, verbose: bool = False) -> bytes:
    """
    Read the complete input.

    Args:
        source: File path, or None / "-" to read stdin until it is closed
        verbose: Print progress messages

    Returns:
        Raw container bytes
    """
    if source is None or str(source) == STREAM_SENTINEL:
        if verbose:
            print("Reading input from stdin", file=sys.stderr)
        data = typer.get_binary_stream("stdin").read()
    else:
        path = Path(source)
        if verbose:
            print(f"Reading input: {path}", file=sys.stderr)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            raise InputError(f"input file {path} does not exist")
        except OSError as e:
            raise InputError(f"could not read input file {path}: {e}") from e

    if not data:
        raise InputError("input is empty")
    return data


def decode_all(data: bytes, verbose: bool = False) -> List[ImageHandle]:
    """
    Decode every top-level image in a HEIC container.

    Args:
        data: Raw container bytes
        verbose: Print progress messages

    Returns:
        Handles in container order; handle.index is its position
    """
    if not pillow_heif.is_supported(io.BytesIO(data)):
        raise InputError(NOT_HEIC_MESSAGE)

    try:
        heif_file = pillow_heif.open_heif(io.BytesIO(data), convert_hdr_to_8bit=True)
    except (ValueError, RuntimeError, OSError) as e:
        raise InputError(f"{NOT_HEIC_MESSAGE}: {e}") from e

    handles = []
    for index, heif_image in enumerate(heif_file):
        width, height = heif_image.size
        handles.append(
            ImageHandle(index=index, width=width, height=height, loader=heif_image.to_pillow)
        )

    if not handles:
        raise InputError("input container holds no images")

    if verbose:
        print(f"Decoded {len(handles)} image(s)", file=sys.stderr)
    return handles


def describe(handles: List[ImageHandle]) -> ContainerInfo:
    """Summarize decoded handles for the info command."""
    return ContainerInfo(
        count=len(handles),
        images=[
            ImageInfo(index=handle.index, width=handle.width, height=handle.height)
            for handle in handles
        ],
    )

"""
Selection and output routing for decoded HEIC images.

Resolves which images the user asked for, decides where each one is written
and performs the writes.
"""

import sys
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional

import pandas as pd
import pydantic

from .decoder import decode_all
from .errors import (
    InputError,
    MultiOutputToStreamError,
    SelectionError,
    ValidationError,
    WriteError,
    WriteFailure,
)
from .models import (
    ALL_IMAGES,
    PLACEHOLDER,
    ConversionRecord,
    ConvertOptions,
    Destination,
    ImageFormat,
    ImageHandle,
    OutputPlan,
    PathDestination,
    PlannedWrite,
    ResolvedSelection,
    SelectionSpec,
    StreamDestination,
)

FORMAT_CHOICES = ", ".join(f'"{f.value}"' for f in ImageFormat)

# ==================== Option Validation ====================


def validate_options(image_format: str = "jpg", quality: Optional[float] = None) -> ConvertOptions:
    """
    Validate encoder options before any input is read.

    Args:
        image_format: Format name, case-insensitive; "jpeg" is accepted for "jpg"
        quality: Compression quality in (0, 1], or None for the default

    Returns:
        Validated ConvertOptions
    """
    data = {"format": image_format}
    if quality is not None:
        data["quality"] = quality

    try:
        return ConvertOptions.model_validate(data)
    except pydantic.ValidationError as e:
        messages = []
        for error in e.errors():
            field = error["loc"][0] if error["loc"] else ""
            if field == "format":
                messages.append(f'invalid format "{image_format}": choices are {FORMAT_CHOICES}')
            elif field == "quality":
                messages.append(f"invalid quality {quality}: must be greater than 0 and at most 1")
            else:
                messages.append(error["msg"])
        raise ValidationError("; ".join(messages)) from e


# ==================== Selection Resolver ====================


def parse_selection(values: Optional[Iterable[str]]) -> SelectionSpec:
    """
    Parse --images values into a SelectionSpec.

    Values may be repeated and/or comma separated. No values selects image 0,
    a lone -1 selects every image.

    Examples:
        ["1", "2"] -> indices [1, 2]
        ["2,0,2"] -> indices [2, 0, 2]
        ["-1"] -> all images
    """
    indices: List[int] = []
    for value in values or []:
        for part in str(value).split(","):
            part = part.strip()
            if not part:
                continue
            try:
                indices.append(int(part))
            except ValueError:
                raise ValidationError(f'invalid image index "{part}": expected an integer')

    if not indices:
        return SelectionSpec()
    if indices == [ALL_IMAGES]:
        return SelectionSpec.everything()
    return SelectionSpec(indices=indices)


def resolve_selection(spec: SelectionSpec, count: int) -> ResolvedSelection:
    """
    Resolve a selection against the number of decoded images.

    Order and duplicates are preserved. The first index outside [0, count)
    raises SelectionError before anything is written.
    """
    if spec.all_images:
        return ResolvedSelection(indices=list(range(count)), total_count=count)

    for index in spec.indices:
        if index < 0 or index >= count:
            raise SelectionError(index, count)

    return ResolvedSelection(indices=list(spec.indices), total_count=count)


# ==================== Output Router ====================


def output_path(template: str, index: int, multiple: bool = False) -> str:
    """
    Build the literal output path for one image.

    Every placeholder in the template is replaced by the index. When several
    images are written and the template has no placeholder, the file name is
    prefixed with "<index>-" so the outputs do not overwrite each other.

    Examples:
        ("out-%s.jpg", 2) -> "out-2.jpg"
        ("out.jpg", 2, multiple=True) -> "2-out.jpg"
    """
    candidate = template.replace(PLACEHOLDER, str(index))
    if multiple and candidate == template:
        path = Path(template)
        candidate = str(path.with_name(f"{index}-{path.name}"))
    return candidate


def route(
    selection: ResolvedSelection,
    handles: List[ImageHandle],
    destination: Destination,
) -> OutputPlan:
    """
    Bind each selected image to a concrete destination.

    Args:
        selection: Resolved selection
        handles: All decoded handles, in container order
        destination: Stream or path template

    Returns:
        OutputPlan in selection order
    """
    selected = [handles[index] for index in selection.indices]

    if isinstance(destination, StreamDestination):
        if not selection.is_single:
            raise MultiOutputToStreamError(len(selected))
        return OutputPlan(writes=[PlannedWrite(handle=selected[0], target=destination)])

    multiple = not selection.is_single
    writes = [
        PlannedWrite(
            handle=handle,
            target=PathDestination(path=output_path(destination.path, handle.index, multiple)),
        )
        for handle in selected
    ]
    return OutputPlan(writes=writes)


def execute(
    plan: OutputPlan,
    options: ConvertOptions,
    stream: Optional[BinaryIO] = None,
    verbose: bool = False,
) -> List[ConversionRecord]:
    """
    Encode and write every planned output in order.

    A failed write does not stop the remaining ones and completed files are
    left in place. If anything failed, WriteError lists every failure after
    the batch has finished.

    Returns:
        One ConversionRecord per successful write
    """
    records: List[ConversionRecord] = []
    failures: List[WriteFailure] = []

    for write in plan.writes:
        handle = write.handle
        target = write.target
        try:
            payload = handle.encode(options.format, options.quality)
            if isinstance(target, StreamDestination):
                if stream is None:
                    raise OSError("no output stream available")
                stream.write(payload)
                stream.flush()
            else:
                path = Path(target.path)
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(payload)
        except (InputError, OSError) as e:
            failures.append(WriteFailure(handle.index, target.label(), str(e)))
            if verbose:
                print(f"  Failed image {handle.index} -> {target.label()}: {e}", file=sys.stderr)
            continue

        records.append(
            ConversionRecord(
                index=handle.index,
                destination=target.label(),
                width=handle.width,
                height=handle.height,
                format=options.format,
                quality=options.quality,
                size_bytes=len(payload),
            )
        )
        if verbose:
            print(f"  Wrote image {handle.index} -> {target.label()}: {len(payload)} bytes", file=sys.stderr)

    if failures:
        raise WriteError(failures)
    return records


# ==================== Main Conversion Function ====================


def convert(
    data: bytes,
    selection: SelectionSpec,
    destination: Destination,
    options: ConvertOptions,
    stream: Optional[BinaryIO] = None,
    verbose: bool = False,
) -> List[ConversionRecord]:
    """
    Decode a container and write the selected images.

    Args:
        data: Raw HEIC bytes
        selection: Requested images
        destination: Stream or path template
        options: Validated encoder options
        stream: Binary sink used for the stream destination
        verbose: Print progress messages

    Returns:
        ConversionRecord list, one per written image
    """
    handles = decode_all(data, verbose=verbose)
    resolved = resolve_selection(selection, len(handles))
    plan = route(resolved, handles, destination)

    if verbose:
        print(
            f"Converting {len(plan.writes)} of {len(handles)} image(s) to {options.format.value}",
            file=sys.stderr,
        )

    return execute(plan, options, stream=stream, verbose=verbose)


def write_manifest(records: List[ConversionRecord], manifest_path: Path) -> Path:
    """Write conversion records to a CSV file."""
    manifest_path = Path(manifest_path)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    columns = list(ConversionRecord.model_fields)
    df = pd.DataFrame([r.to_csv_row() for r in records], columns=columns)
    df.to_csv(manifest_path, index=False)
    return manifest_path

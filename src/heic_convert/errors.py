"""
Exception types raised by the conversion pipeline.

All of them derive from HeicConvertError so the CLI can report them in one place.
"""

from typing import List, NamedTuple


class HeicConvertError(Exception):
    """Base class for every failure the CLI reports to the user."""


class InputError(HeicConvertError):
    """Input bytes could not be read or decoded as a HEIC container."""


class ValidationError(HeicConvertError):
    """An option value failed its constraint."""


class SelectionError(HeicConvertError):
    """A requested image index is outside the container."""

    def __init__(self, requested_index: int, total_count: int):
        self.requested_index = requested_index
        self.total_count = total_count
        super().__init__(
            f"image index {requested_index} is out of range: "
            f"the input contains {total_count} image(s) (valid indices 0-{total_count - 1})"
        )


class RoutingError(HeicConvertError):
    """The selected images cannot be sent to the requested destination."""


class MultiOutputToStreamError(RoutingError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"{count} images were selected but multiple images cannot be written to stdout; "
            "use --output with a path template such as out-%s.jpg"
        )


class WriteFailure(NamedTuple):
    index: int
    target: str
    reason: str


class WriteError(HeicConvertError):
    """One or more outputs could not be written. Earlier writes are kept."""

    def __init__(self, failures: List[WriteFailure]):
        self.failures = list(failures)
        lines = [f"failed to write {len(self.failures)} image(s):"]
        for failure in self.failures:
            lines.append(f"  image {failure.index} -> {failure.target}: {failure.reason}")
        super().__init__("\n".join(lines))

"""
Pytest fixtures for heic_convert tests.

Provides synthetic decoded images, a fake decoder and temporary directories.
"""

import io

import pytest
from PIL import Image

from heic_convert.models import ImageHandle

IMAGE_SIZES = [(8, 6), (10, 4), (5, 5)]
COLORS = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]

FAKE_HEIC = b"\x00\x00\x00\x18ftypheic\x00\x00\x00\x00fake-container"


def _make_handle(index: int, size=(8, 6), color=(255, 0, 0), mode="RGB") -> ImageHandle:
    """Build a handle whose frame is a solid-color Pillow image."""
    def loader():
        return Image.new(mode, size, color if mode == "RGB" else color + (255,))

    return ImageHandle(index=index, width=size[0], height=size[1], loader=loader)


@pytest.fixture
def make_handle():
    """Factory for handles backed by solid-color images."""
    return _make_handle


@pytest.fixture
def broken_handle():
    """A handle whose pixel data fails to decode, as a corrupt HEVC payload does."""
    def loader():
        raise ValueError("Invalid input: Invalid parameter value: SPS picture size out of range")

    return ImageHandle(index=1, width=8, height=6, loader=loader)


@pytest.fixture
def fake_heic():
    """Bytes standing in for a container; only the fake decoders see them."""
    return FAKE_HEIC


@pytest.fixture
def handles():
    """Three decoded images of different sizes."""
    return [
        _make_handle(i, size=size, color=color)
        for i, (size, color) in enumerate(zip(IMAGE_SIZES, COLORS))
    ]


@pytest.fixture
def single_handle():
    return [_make_handle(0, size=(12, 9), color=(10, 20, 30))]


@pytest.fixture
def fake_decoder(monkeypatch, handles):
    """Replace the CLI decoder with one that returns the three synthetic images."""
    calls = []

    def decode(data, verbose=False):
        calls.append(data)
        return list(handles)

    monkeypatch.setattr("heic_convert.cli.decode_all", decode)
    monkeypatch.setattr("heic_convert.converter.decode_all", decode)
    return calls


@pytest.fixture
def fake_single_decoder(monkeypatch, single_handle):
    """Replace the CLI decoder with one that returns a single image."""
    def decode(data, verbose=False):
        return list(single_handle)

    monkeypatch.setattr("heic_convert.cli.decode_all", decode)
    monkeypatch.setattr("heic_convert.converter.decode_all", decode)


@pytest.fixture
def input_file(tmp_path):
    """A container file on disk; its contents are only passed to the decoder."""
    path = tmp_path / "input.heic"
    path.write_bytes(FAKE_HEIC)
    return path


@pytest.fixture
def output_directory(tmp_path):
    """Create an empty output directory."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def heic_bytes():
    """A real two-image HEIC container, encoded with pillow-heif."""
    pillow_heif = pytest.importorskip("pillow_heif")
    first = Image.new("RGB", (64, 48), (200, 30, 30))
    second = Image.new("RGB", (32, 64), (30, 30, 200))
    try:
        heif_file = pillow_heif.from_pillow(first)
        heif_file.add_from_pillow(second)
        buffer = io.BytesIO()
        heif_file.save(buffer)
    except (RuntimeError, ValueError, OSError) as e:
        pytest.skip(f"HEIC encoder unavailable: {e}")
    return buffer.getvalue()

"""
Command-line interface for heic-convert.

Usage:
    heic-convert -i photo.heic -o photo.jpg
    heic-convert convert -i burst.heic -o out-%s.png -f png -m -1
    cat photo.heic | heic-convert > photo.jpg
    heic-convert info -i burst.heic --count
"""

import sys
from pathlib import Path
from typing import List, Optional

import typer

from .converter import (
    convert as convert_images,
    parse_selection,
    validate_options,
    write_manifest,
)
from .decoder import decode_all, describe, read_input
from .errors import HeicConvertError
from .models import parse_destination

app = typer.Typer(
    name="heic-convert",
    help="Convert HEIC images to JPEG or PNG",
    add_completion=False,
    pretty_exceptions_enable=False,
)

COMMANDS = ("convert", "info")


def _fail(error: HeicConvertError, command: str):
    """Report an error on stderr and exit with status 1."""
    typer.echo(typer.style(f"Error: {error}", fg=typer.colors.RED), err=True)
    typer.echo(f"Run 'heic-convert {command} --help' for usage.", err=True)
    raise typer.Exit(1)


@app.command()
def convert(
    input_path: str = typer.Option(
        "-",
        "--input", "-i",
        help="The input file to convert, - for stdin",
    ),
    output: str = typer.Option(
        "-",
        "--output", "-o",
        help="The output file to create, - for stdout. "
        "Use %s in the name to insert the image index when converting several images",
    ),
    image_format: str = typer.Option(
        "jpg",
        "--format", "-f",
        envvar="HEIC_CONVERT_FORMAT",
        help="The output format: jpg or png (jpeg is accepted for jpg)",
    ),
    quality: Optional[float] = typer.Option(
        None,
        "--quality", "-q",
        envvar="HEIC_CONVERT_QUALITY",
        help="JPEG quality, greater than 0 and at most 1 (default: 1)",
    ),
    images: Optional[List[str]] = typer.Option(
        None,
        "--images", "-m",
        help="Image index to convert, repeatable or comma separated; -1 converts all images",
    ),
    manifest: Optional[Path] = typer.Option(
        None,
        "--manifest",
        help="Write a CSV describing every converted image",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Print progress to stderr",
    ),
):
    """
    Convert images from a HEIC container (the default command).

    Options are checked before the input is read, so an invalid format or
    quality never touches the input or output.
    """
    try:
        options = validate_options(image_format, quality)
        selection = parse_selection(images)
        destination = parse_destination(output)

        data = read_input(input_path, verbose=verbose)
        records = convert_images(
            data,
            selection=selection,
            destination=destination,
            options=options,
            stream=typer.get_binary_stream("stdout"),
            verbose=verbose,
        )
        if manifest is not None:
            write_manifest(records, manifest)
            if verbose:
                print(f"Wrote manifest: {manifest}", file=sys.stderr)
    except HeicConvertError as e:
        _fail(e, "convert")


@app.command()
def info(
    input_path: str = typer.Option(
        "-",
        "--input", "-i",
        help="The input file to inspect, - for stdin",
    ),
    count: bool = typer.Option(
        False,
        "--count",
        help="Print only the number of images",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the report as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Print progress to stderr",
    ),
):
    """
    Display the images contained in a HEIC file.
    """
    try:
        data = read_input(input_path, verbose=verbose)
        report = describe(decode_all(data, verbose=verbose))
    except HeicConvertError as e:
        _fail(e, "info")

    if count:
        typer.echo(report.count)
    elif as_json:
        typer.echo(report.model_dump_json(indent=2))
    else:
        typer.echo(f"count: {report.count}")
        for image in report.images:
            typer.echo(f"image {image.index}: {image.width}x{image.height}")


def with_default_command(args: List[str]) -> List[str]:
    """Prepend "convert" unless a command or top-level help was requested."""
    if args and (args[0] in COMMANDS or args[0] == "--help"):
        return list(args)
    return ["convert", *args]


def main():
    """Entry point for the CLI."""
    app(args=with_default_command(sys.argv[1:]), prog_name="heic-convert")


if __name__ == "__main__":
    main()

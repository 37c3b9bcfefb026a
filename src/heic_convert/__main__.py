"""
Entry point for running heic_convert as a module.

Usage:
    python -m heic_convert -i photo.heic -o photo.jpg
    python -m heic_convert convert -i burst.heic -o out-%s.jpg -m -1
    python -m heic_convert info -i burst.heic --count
"""

from .cli import main

if __name__ == "__main__":
    main()

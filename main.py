#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Put tile images into ``tiles/`` and run:

    python main.py build photo.jpg --tiles tiles --algorithm closest_color

Or use the full CLI:

    python -m photosaic.cli batch --help
    python -m photosaic.cli build --help
"""

from photosaic.cli import app

if __name__ == "__main__":
    app()

#!/usr/bin/env python3
"""
cli.py
======

Thin command‑line wrapper for the SUSAN edge detector.

This script does **no** argument parsing of its own; it simply delegates
to :pyfunc:`susan_edge_detection.pipeline.main`, so all options and
documentation are maintained in one place.

Examples
--------
Edge strength and orientation of a test image:

    python -m susan_edge_detection.cli \
        --img sample/testimage.png \
        --out edges.png \
        --overlay overlay.png \
        --threshold 10 \
        --orientation

The full list of arguments can be viewed with ``-h`` or ``--help``.
"""
from __future__ import annotations

import sys

from susan_edge_detection import pipeline


def main() -> None:
    """Forward ``sys.argv[1:]`` to :pyfunc:`pipeline.main`."""
    pipeline.main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover
    main()

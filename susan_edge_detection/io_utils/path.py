"""
io_utils/path.py
================
Utility helpers for consistent output‑path handling in the SUSAN edge
detection package.

Conventions
-----------
* All run‑time artefacts live under a single top‑level directory called
  ``result/`` inside the package, unless the environment variable
  ``SUSAN_OUTDIR`` overrides it.
* Every run gets its own timestamped directory, created on first use
  (importing this module touches nothing on disk).

Directory layout
----------------
result/
└── 20260101_120000/    # one per run
    ├── debug_img/      # intermediate visualisations
    ├── *.png           # strength / orientation maps, overlays
    └── run.txt         # run log
"""
from __future__ import annotations

import os
from datetime import datetime
from functools import lru_cache


def ensure_dir(path: str) -> None:
    """Create *path* recursively if it does not already exist."""
    if path and not os.path.isdir(path):
        os.makedirs(path, exist_ok=True)

# ---------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------
_THIS_DIR = os.path.dirname(os.path.abspath(__file__))
# susan_edge_detection package root (one level up from io_utils/)
PROJECT_ROOT = os.path.abspath(os.path.join(_THIS_DIR, ".."))


def out_root() -> str:
    """Results root: ``$SUSAN_OUTDIR`` or ``<package>/result``."""
    return os.getenv("SUSAN_OUTDIR", os.path.join(PROJECT_ROOT, "result"))

# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _timestamp() -> str:
    """ISO‑like timestamp safe for filenames."""
    return datetime.now().strftime("%Y%m%d_%H%M%S_%f")


@lru_cache(maxsize=None)
def _run_dir(root: str) -> str:
    """Timestamped run directory under *root*, fixed for the process."""
    path = os.path.join(root, datetime.now().strftime("%Y%m%d_%H%M%S"))
    ensure_dir(path)
    return path


def run_dir() -> str:
    """Directory of the current run (created on first call)."""
    return _run_dir(out_root())


def run_path(*relative_parts: str) -> str:
    """
    Join *relative_parts* under the timestamped run directory.
    Parent folders are auto‑created.
    """
    path = os.path.join(run_dir(), *relative_parts)
    ensure_dir(os.path.dirname(path))
    return path


def debug_img_path(filename: str | None = None) -> str:
    """
    Path under the **current run** ``debug_img`` folder.
    If *filename* is None, a timestamped PNG name is generated.
    """
    if filename is None:
        filename = f"{_timestamp()}.png"
    return run_path("debug_img", filename)


def run_log_path(name: str = "run.txt") -> str:
    """Canonical location for the per‑run log file."""
    return run_path(name)

__all__ = [
    "PROJECT_ROOT",
    "ensure_dir",
    "out_root",
    "run_dir",
    "run_path",
    "debug_img_path",
    "run_log_path",
]

"""
pipeline.py
===========

End‑to‑end driver: load an image, compute the SUSAN edge‑strength map and,
optionally, the edge‑orientation map, then write everything to the run
directory.

Usage (stand‑alone)
-------------------
```bash
python -m susan_edge_detection.pipeline \
    --img input/testimage.png \
    --out edges.png \
    --threshold 10 --radius 3 --norm-range 255 \
    --orientation --orientation-out directions.png
```

The script prints per‑stage timings and writes into the run directory
(``$SUSAN_OUTDIR/<timestamp>/``):
* `--out`             : edge‑strength map (uint8/uint16 PNG)
* `--orientation-out` : colour view of the orientation map (with `--orientation`)
* `--overlay` (opt)   : edges drawn over the source image
* `run.txt`           : parameters, map statistics and timings
* intermediate debug images in `debug_img/` (when `--debug`)
"""
from __future__ import annotations

import argparse
import datetime
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np

from susan_edge_detection.io_utils import path
from susan_edge_detection.io_utils.io import load_image, save_image
from susan_edge_detection.io_utils.timing import Timer, timeit
from susan_edge_detection import (
    preprocess,
    strength,
    orientation,
    post,
)


# ----------------------------------------------------------------------
# Core pipeline
# ----------------------------------------------------------------------
def run(
    img_path: Path,
    *,
    threshold: float = 27.0,
    radius: int = 3,
    norm_range: int = 255,
    connected: bool = False,
    with_orientation: bool = False,
    debug: bool = False,
) -> Tuple[np.ndarray, np.ndarray, Optional[np.ndarray]]:
    """
    Execute the detector on *img_path*.

    Returns
    -------
    gray : np.ndarray – float64 grayscale input the maps were computed on.
    edg : np.ndarray – edge‑strength map.
    theta : np.ndarray | None – orientation map (only with *with_orientation*).
    """
    img_path = Path(img_path)

    # ------------------------------------------------------------------
    # 0. Load
    # ------------------------------------------------------------------
    with Timer("load"):
        img = load_image(img_path)
    n_px = img.shape[0] * img.shape[1]

    # ------------------------------------------------------------------
    # 1. Grayscale
    # ------------------------------------------------------------------
    with Timer("grayscale"):
        gray = preprocess.to_gray(img)
    if debug:
        save_image(path.debug_img_path(f"01_gray_{img_path.stem}.png"), gray)

    # ------------------------------------------------------------------
    # 2. Edge strength
    # ------------------------------------------------------------------
    with Timer("strength", pixels=n_px):
        edg = strength.edge_strength(
            gray,
            threshold=threshold,
            radius=radius,
            norm_range=norm_range,
            connected=connected,
        )
    if debug:
        save_image(path.debug_img_path(f"02_strength_{img_path.stem}.png"),
                   post.strength_to_uint8(edg))
        save_image(path.debug_img_path(f"03_thin_{img_path.stem}.png"),
                   post.thin_edges(edg))

    # ------------------------------------------------------------------
    # 3. Edge orientation
    # ------------------------------------------------------------------
    theta = None
    if with_orientation:
        with Timer("orientation", pixels=n_px):
            theta = orientation.edge_orientation(edg, radius=radius, connected=connected)
        if debug:
            # visualise θ map as grayscale (0 → undefined, π → 255)
            save_image(path.debug_img_path(f"04_theta_{img_path.stem}.png"),
                       (theta / np.pi * 255.0).astype(np.uint8))

    return gray, edg, theta


# ----------------------------------------------------------------------
# Outputs
# ----------------------------------------------------------------------
@timeit("write")
def _write_outputs(
    args: argparse.Namespace,
    gray: np.ndarray,
    edg: np.ndarray,
    theta: Optional[np.ndarray],
) -> dict:
    written = {}

    # PNG holds at most 16 bits; raw float and wider maps get display scaling
    if edg.dtype not in (np.uint8, np.uint16):
        edg_out = post.strength_to_uint8(edg)
    else:
        edg_out = edg
    written["strength"] = path.run_path(Path(args.out).name)
    save_image(written["strength"], edg_out)

    if theta is not None and args.orientation_out:
        written["orientation"] = path.run_path(Path(args.orientation_out).name)
        save_image(written["orientation"], post.orientation_to_color(theta, edg))

    if args.overlay:
        mask = post.thin_edges(edg) if args.thin else edg > 0
        written["overlay"] = path.run_path(Path(args.overlay).name)
        save_image(written["overlay"], post.overlay(gray, mask, color=(0, 0, 255), alpha=0.6))

    return written


def _map_stats(edg: np.ndarray, theta: Optional[np.ndarray]) -> str:
    n_edge = int(np.count_nonzero(edg))
    lines = [
        f"shape     : {edg.shape[0]}x{edg.shape[1]}",
        f"dtype     : {edg.dtype}",
        f"edge_px   : {n_edge} ({100.0 * n_edge / edg.size:.2f}%)",
        f"max_str   : {edg.max() if edg.size else 0}",
    ]
    if theta is not None:
        defined = theta[theta > 0]
        mean = f"{defined.mean():.4f}" if defined.size else "N/A"
        lines.append(f"theta_px  : {defined.size}")
        lines.append(f"theta_mean: {mean}")
    return "\n".join(lines) + "\n"


# ----------------------------------------------------------------------
# CLI
# ----------------------------------------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="SUSAN edge strength and orientation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--img", type=Path, required=True, help="Input image file (RGB or greyscale)")
    p.add_argument("--out", type=Path, required=True, help="Output edge-strength PNG")
    p.add_argument("--orientation-out", type=Path, default=Path("orientation.png"),
                   help="Output orientation view PNG (with --orientation)")
    p.add_argument("--overlay", type=Path, help="Optional overlay PNG of edges on the source")
    p.add_argument("--threshold", type=float, default=27.0, help="Brightness threshold TR")
    p.add_argument("--radius", type=int, default=3, help="USAN kernel radius KR (nucleus excluded)")
    p.add_argument("--norm-range", type=int, default=255,
                   help="Normalise strength to integers in [0, N]; 0 keeps raw values")
    p.add_argument("--connected", action="store_true",
                   help="Drop USAN pixels not connected to the nucleus (slow)")
    p.add_argument("--orientation", action="store_true", help="Also compute edge orientation")
    p.add_argument("--thin", action="store_true", help="Thin edges in the overlay")
    p.add_argument("--debug", action="store_true", help="Save intermediate images")
    return p


def main(argv: Optional[Sequence[str]] = None) -> dict:
    args = _build_parser().parse_args(argv)
    start_ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    gray, edg, theta = run(
        args.img,
        threshold=args.threshold,
        radius=args.radius,
        norm_range=args.norm_range,
        connected=args.connected,
        with_orientation=args.orientation,
        debug=args.debug,
    )
    written = _write_outputs(args, gray, edg, theta)
    Timer.summary()

    # ---- write run log -------------------------------------------------
    log_txt = (
        f"run_start : {start_ts}\n"
        f"input_img : {args.img}\n"
        f"threshold : {args.threshold}\n"
        f"radius    : {args.radius}\n"
        f"norm_range: {args.norm_range}\n"
        f"connected : {args.connected}\n"
        f"strength  : {written['strength']}\n"
        f"orient    : {written.get('orientation', 'N/A')}\n"
        f"overlay   : {written.get('overlay', 'N/A')}\n"
        f"---------- maps ----------\n"
        f"{_map_stats(edg, theta)}"
        f"---------- timings ----------\n"
        f"{Timer.summary_text()}"
    )
    written["log"] = path.run_log_path("run.txt")
    with open(written["log"], "w") as f:
        f.write(log_txt)
    return written


if __name__ == "__main__":
    main()

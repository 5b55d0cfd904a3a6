from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter

import numpy as np
import pandas as pd

from surface_distance import __version__
from surface_distance.distance import compare_surface_distances, compute_surface_distance, planar_distance, surface_profile
from surface_distance.io import GEOTIFF_SUFFIXES, HeightField, load_height_field, write_geotiff_height_field, write_raw_height_field
from surface_distance.plotting import plot_profiles, profile_frame
from surface_distance.progress import ProgressPrinter
from surface_distance.synthetic import SYNTHETIC_PRESETS, generate_height_field

DEFAULT_PIXEL_DISTANCE = 30.0
DEFAULT_PIXEL_HEIGHT = 11.0
DEFAULT_IMAGE_SIZE = 512


def _env_versions() -> dict[str, str]:
    import matplotlib
    import rasterio
    import scipy

    return {
        "python": sys.version.replace("\n", " "),
        "surface_distance": __version__,
        "numpy": np.__version__,
        "rasterio": rasterio.__version__,
        "scipy": scipy.__version__,
        "pandas": pd.__version__,
        "matplotlib": matplotlib.__version__,
    }


def _write_run_info(outdir: Path, payload: dict) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / "run_info.json"
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def _resolve_scales(hf: HeightField, args: argparse.Namespace) -> tuple[float, float]:
    """Pick pixel distance/height: explicit flags win, then raster georeferencing, then raw defaults."""
    georeferenced = hf.pixel_distance is not None
    pixel_distance = args.pixel_distance
    if pixel_distance is None:
        pixel_distance = hf.pixel_distance if georeferenced else DEFAULT_PIXEL_DISTANCE
    pixel_height = args.pixel_height
    if pixel_height is None:
        pixel_height = 1.0 if georeferenced else DEFAULT_PIXEL_HEIGHT
    return float(pixel_distance), float(pixel_height)


def _add_path_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--width", type=int, default=None, help="Image width in samples (required for raw data)")
    p.add_argument("--height", type=int, default=None, help="Image height in samples (required for raw data)")
    p.add_argument("--begin", type=int, nargs=2, required=True, metavar=("X", "Y"), help="Path start sample")
    p.add_argument("--end", type=int, nargs=2, required=True, metavar=("X", "Y"), help="Path end sample")
    p.add_argument(
        "--pixel_distance",
        type=float,
        default=None,
        help=f"Planar size of one sample step (default: raster pixel size, or {DEFAULT_PIXEL_DISTANCE:g} for raw data)",
    )
    p.add_argument(
        "--pixel_height",
        type=float,
        default=None,
        help=f"Elevation per sample unit (default: 1 for rasters, {DEFAULT_PIXEL_HEIGHT:g} for raw data)",
    )
    p.add_argument("--outdir", type=Path, default=None, help="Optional directory for CSV/JSON/PNG outputs")
    p.add_argument("--plots", action="store_true", help="Plot elevation profile(s) (requires --outdir)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="python -m surface_distance", description="Surface distance over a height field")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    dist = sub.add_parser("distance", help="Surface distance along one path over one height field")
    dist.add_argument("--heights", required=True, type=Path, help="Raw uint8 dump or GeoTIFF")
    _add_path_args(dist)

    cmp_ = sub.add_parser("compare", help="Compare surface distance over pre/post height fields")
    cmp_.add_argument("--pre", required=True, type=Path, help="Height field before the change")
    cmp_.add_argument("--post", required=True, type=Path, help="Height field after the change")
    _add_path_args(cmp_)

    synth = sub.add_parser("synth", help="Write a synthetic height field")
    synth.add_argument("--out", required=True, type=Path, help="Output path (.data raw uint8, or .tif)")
    synth.add_argument("--preset", choices=SYNTHETIC_PRESETS, default="hills")
    synth.add_argument("--width", type=int, default=DEFAULT_IMAGE_SIZE)
    synth.add_argument("--height", type=int, default=DEFAULT_IMAGE_SIZE)
    synth.add_argument("--seed", type=int, default=0)
    synth.add_argument("--relief", type=float, default=1.0)
    synth.add_argument(
        "--pixel_distance",
        type=float,
        default=DEFAULT_PIXEL_DISTANCE,
        help="Pixel size written to GeoTIFF outputs",
    )

    return p


def _check_outputs(args: argparse.Namespace) -> bool:
    if args.plots and args.outdir is None:
        print("ERROR: --plots requires --outdir", file=sys.stderr)
        return False
    return True


def _run_info(args: argparse.Namespace, hf: HeightField, pixel_distance: float, pixel_height: float) -> dict:
    return {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "command": args.command,
        "versions": _env_versions(),
        "params": {
            "width": hf.width,
            "height": hf.height,
            "begin": list(args.begin),
            "end": list(args.end),
            "pixel_distance": pixel_distance,
            "pixel_height": pixel_height,
        },
    }


def cmd_distance(args: argparse.Namespace) -> int:
    if not _check_outputs(args):
        return 2
    progress = ProgressPrinter()
    try:
        hf = load_height_field(args.heights, width=args.width, height=args.height)
        pixel_distance, pixel_height = _resolve_scales(hf, args)
        t0 = perf_counter()
        dist = compute_surface_distance(
            args.begin,
            args.end,
            hf.samples,
            hf.width,
            hf.height,
            pixel_distance,
            pixel_height,
            progress=progress.callback(),
        )
        runtime = perf_counter() - t0
        progress.finish()
    except (FileNotFoundError, ValueError) as e:
        progress.finish()
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    straight = planar_distance(args.begin, args.end, pixel_distance)
    print(f"Surface Distance: {dist:g}")
    print(f"Straight Distance: {straight:g}")

    if args.outdir is not None:
        outdir: Path = args.outdir
        info = _run_info(args, hf, pixel_distance, pixel_height)
        info["heights"] = str(args.heights)
        _write_run_info(outdir, info)

        df = pd.DataFrame.from_records(
            [
                {
                    "label": "surface",
                    "surface_distance": dist,
                    "straight_distance": straight,
                    "ratio": dist / straight if straight > 0 else float("nan"),
                    "runtime_sec": runtime,
                }
            ]
        )
        results_path = outdir / "results.csv"
        df.to_csv(results_path, index=False)
        print(f"Wrote: {results_path}")

        prof = profile_frame(
            surface_profile(args.begin, args.end, hf.samples, hf.width, hf.height, pixel_distance, pixel_height),
            label="surface",
        )
        prof_path = outdir / "profile_surface.csv"
        prof.to_csv(prof_path, index=False)
        print(f"Wrote: {prof_path}")
        if args.plots:
            print(f"Wrote: {plot_profiles(prof, outdir)}")
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    if not _check_outputs(args):
        return 2
    progress = ProgressPrinter()
    try:
        pre = load_height_field(args.pre, width=args.width, height=args.height)
        post = load_height_field(args.post, width=args.width, height=args.height)
        if (pre.width, pre.height) != (post.width, post.height):
            raise ValueError(
                f"pre is {pre.width}x{pre.height} but post is {post.width}x{post.height}; sizes must match"
            )
        if args.pixel_distance is None and pre.pixel_distance != post.pixel_distance:
            progress.log("WARNING: pre/post pixel sizes differ; using the pre height field's")
        pixel_distance, pixel_height = _resolve_scales(pre, args)
        result = compare_surface_distances(
            args.begin,
            args.end,
            pre.samples,
            post.samples,
            pre.width,
            pre.height,
            pixel_distance,
            pixel_height,
            progress=progress.callback(),
        )
        progress.finish()
    except (FileNotFoundError, ValueError) as e:
        progress.finish()
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(f"Pre Distance: {result.pre:g}")
    print(f"Post Distance: {result.post:g}")
    print(f"Straight Distance: {result.straight:g}")

    if args.outdir is not None:
        outdir: Path = args.outdir
        info = _run_info(args, pre, pixel_distance, pixel_height)
        info.update({"pre": str(args.pre), "post": str(args.post)})
        _write_run_info(outdir, info)

        df = pd.DataFrame.from_records(
            [
                {"label": "pre", "surface_distance": result.pre},
                {"label": "post", "surface_distance": result.post},
            ]
        )
        df["straight_distance"] = result.straight
        df["ratio"] = df["surface_distance"] / result.straight if result.straight > 0 else float("nan")
        df["delta_vs_pre"] = df["surface_distance"] - result.pre
        results_path = outdir / "results.csv"
        df.to_csv(results_path, index=False)
        print(f"Wrote: {results_path}")

        frames = []
        for label, hf in (("pre", pre), ("post", post)):
            prof = profile_frame(
                surface_profile(args.begin, args.end, hf.samples, hf.width, hf.height, pixel_distance, pixel_height),
                label=label,
            )
            prof_path = outdir / f"profile_{label}.csv"
            prof.to_csv(prof_path, index=False)
            print(f"Wrote: {prof_path}")
            frames.append(prof)
        if args.plots:
            print(f"Wrote: {plot_profiles(pd.concat(frames, ignore_index=True), outdir, title='Pre/post elevation profile')}")
    return 0


def cmd_synth(args: argparse.Namespace) -> int:
    out: Path = args.out
    try:
        if out.suffix.lower() in GEOTIFF_SUFFIXES:
            z = generate_height_field(
                width=args.width, height=args.height, preset=args.preset, seed=args.seed, relief=args.relief, quantize=False
            )
            write_geotiff_height_field(out, z.astype(np.float32), pixel_distance=float(args.pixel_distance))
        else:
            z = generate_height_field(
                width=args.width, height=args.height, preset=args.preset, seed=args.seed, relief=args.relief
            )
            write_raw_height_field(out, z)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    print(f"Wrote: {out} ({args.width}x{args.height}, preset={args.preset})")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "distance":
        return cmd_distance(args)
    if args.command == "compare":
        return cmd_compare(args)
    if args.command == "synth":
        return cmd_synth(args)

    parser.print_help()
    return 2

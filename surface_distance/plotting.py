"""Plotting utilities for elevation profiles along a path."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd


def profile_frame(profile, *, label: str) -> pd.DataFrame:
    """Tabulate a ``surface_profile`` array with the along-path planar distance."""
    df = pd.DataFrame(profile, columns=["segment_param", "x", "y", "z"])
    if not df.empty:
        x0, y0 = df.loc[0, "x"], df.loc[0, "y"]
        df["planar_offset"] = ((df["x"] - x0) ** 2 + (df["y"] - y0) ** 2) ** 0.5
    else:
        df["planar_offset"] = pd.Series(dtype="float64")
    df.insert(0, "label", label)
    return df


def plot_profiles(profiles: pd.DataFrame, outdir: str | Path, *, title: str = "Elevation profile") -> Path:
    """One line per ``label`` in ``profiles``: elevation vs planar offset."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.set_title(title)
    ax.set_xlabel("Planar distance along path")
    ax.set_ylabel("Elevation")
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.6)

    for label, g in profiles.groupby("label", sort=False):
        g = g.sort_values("planar_offset")
        ax.plot(g["planar_offset"], g["z"], linewidth=1.2, label=str(label))

    if profiles["label"].nunique() > 1:
        ax.legend(loc="best", fontsize=9)
    path = outdir / "profile.png"
    fig.tight_layout()
    fig.savefig(path, dpi=160)
    plt.close(fig)
    return path

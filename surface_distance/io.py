"""Height-field IO helpers (raw byte dumps and GeoTIFF rasters)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.transform import from_origin

GEOTIFF_SUFFIXES = {".tif", ".tiff"}


@dataclass(frozen=True, slots=True)
class HeightField:
    """Row-major elevation samples plus the image size.

    ``pixel_distance`` is the sample spacing when the source carries one
    (GeoTIFF transform); raw dumps have no georeferencing and leave it None.
    """

    path: Path | None
    samples: np.ndarray
    width: int
    height: int
    pixel_distance: float | None = None
    crs: CRS | None = None

    def as_grid(self) -> np.ndarray:
        return self.samples.reshape(self.height, self.width)


def read_raw_height_field(path: str | Path, width: int, height: int) -> HeightField:
    """Read an unstructured dump of one unsigned byte per sample, row-major.

    The file has no header; its size must be exactly ``width * height`` bytes.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Height data not found: {p}")
    if int(width) < 1 or int(height) < 1:
        raise ValueError(f"width/height must be >= 1, got {width}x{height}")

    samples = np.fromfile(p, dtype=np.uint8)
    expected = int(width) * int(height)
    if samples.size != expected:
        raise ValueError(f"{p} holds {samples.size} bytes, expected {width}*{height}={expected}")
    return HeightField(path=p, samples=samples, width=int(width), height=int(height))


def write_raw_height_field(path: str | Path, samples: np.ndarray) -> Path:
    """Write samples as a raw uint8 dump (2D arrays are flattened row-major)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    arr = np.asarray(samples)
    if arr.dtype != np.uint8:
        if arr.size and (float(np.nanmin(arr)) < 0 or float(np.nanmax(arr)) > 255):
            raise ValueError("raw height data must fit in 0..255")
        arr = np.rint(arr).astype(np.uint8)
    arr.reshape(-1).tofile(p)
    return p


def read_geotiff_height_field(path: str | Path) -> HeightField:
    """Read band 1 of a GeoTIFF; the pixel size comes from the affine transform."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Raster not found: {p}")
    with rasterio.open(p) as ds:
        z = ds.read(1)
        dx = float(abs(ds.transform.a))
        dy = float(abs(ds.transform.e))
        if dx > 0 and dy > 0 and abs(dx - dy) > 1e-9 * max(dx, dy):
            raise ValueError(f"non-square pixels are not supported (dx={dx:g}, dy={dy:g})")
        nodata = ds.nodata
        invalid = ~np.isfinite(z)
        if nodata is not None and np.isfinite(nodata):
            invalid |= z == nodata
        if np.any(invalid):
            raise ValueError(f"{p} contains nodata samples; surface distance needs a complete height field")
        return HeightField(
            path=p,
            samples=z.reshape(-1),
            width=int(ds.width),
            height=int(ds.height),
            pixel_distance=dx if dx > 0 else None,
            crs=ds.crs,
        )


def write_geotiff_height_field(
    path: str | Path,
    z: np.ndarray,
    *,
    pixel_distance: float,
    crs: CRS | str | None = "EPSG:3857",
) -> Path:
    """Write a 2D height array as a single-band GeoTIFF with square pixels."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if z.ndim != 2:
        raise ValueError("z must be 2D")
    if pixel_distance <= 0:
        raise ValueError(f"pixel_distance must be > 0, got {pixel_distance}")

    rows, cols = z.shape
    transform = from_origin(0.0, float(rows) * float(pixel_distance), float(pixel_distance), float(pixel_distance))
    profile = {
        "driver": "GTiff",
        "height": rows,
        "width": cols,
        "count": 1,
        "dtype": str(z.dtype),
        "crs": CRS.from_user_input(crs) if crs is not None else None,
        "transform": transform,
        "compress": "deflate",
        "tiled": False,
    }
    with rasterio.open(p, "w", **profile) as dst:
        dst.write(z, 1)
    return p


def load_height_field(path: str | Path, *, width: int | None = None, height: int | None = None) -> HeightField:
    """Load a height field, choosing the reader from the file suffix.

    GeoTIFFs carry their own size; a given ``width``/``height`` is checked
    against it. Raw dumps need both.
    """
    p = Path(path)
    if p.suffix.lower() in GEOTIFF_SUFFIXES:
        hf = read_geotiff_height_field(p)
        if width is not None and int(width) != hf.width:
            raise ValueError(f"{p} is {hf.width} samples wide, expected {width}")
        if height is not None and int(height) != hf.height:
            raise ValueError(f"{p} is {hf.height} samples high, expected {height}")
        return hf

    if width is None or height is None:
        raise ValueError(f"raw height data {p} needs an explicit width and height")
    return read_raw_height_field(p, width, height)

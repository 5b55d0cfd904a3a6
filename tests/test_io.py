from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin

from surface_distance.io import (
    load_height_field,
    read_geotiff_height_field,
    read_raw_height_field,
    write_geotiff_height_field,
    write_raw_height_field,
)


def test_raw_height_field_is_row_major_bytes(tmp_path: Path) -> None:
    path = tmp_path / "pre.data"
    path.write_bytes(bytes([1, 2, 3, 4, 5, 6]))

    hf = read_raw_height_field(path, 3, 2)
    assert hf.width == 3
    assert hf.height == 2
    assert hf.samples.dtype == np.uint8
    assert hf.pixel_distance is None
    np.testing.assert_array_equal(hf.as_grid(), [[1, 2, 3], [4, 5, 6]])


def test_raw_height_field_size_mismatch(tmp_path: Path) -> None:
    path = tmp_path / "short.data"
    path.write_bytes(bytes(10))
    with pytest.raises(ValueError, match="expected 4\\*4=16"):
        read_raw_height_field(path, 4, 4)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_raw_height_field(tmp_path / "nope.data", 2, 2)
    with pytest.raises(FileNotFoundError):
        read_geotiff_height_field(tmp_path / "nope.tif")


def test_write_raw_rejects_out_of_range(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="0..255"):
        write_raw_height_field(tmp_path / "bad.data", np.array([[0.0, 300.0]]))


def test_write_then_load_raw(tmp_path: Path) -> None:
    z = np.arange(12, dtype=np.uint8).reshape(3, 4)
    path = write_raw_height_field(tmp_path / "out" / "z.data", z)
    assert path.stat().st_size == 12

    hf = load_height_field(path, width=4, height=3)
    np.testing.assert_array_equal(hf.as_grid(), z)


def test_load_raw_needs_size(tmp_path: Path) -> None:
    path = tmp_path / "z.data"
    path.write_bytes(bytes(4))
    with pytest.raises(ValueError, match="width and height"):
        load_height_field(path)


def test_geotiff_carries_pixel_size(tmp_path: Path) -> None:
    z = np.linspace(0.0, 50.0, 6 * 5, dtype=np.float32).reshape(6, 5)
    path = write_geotiff_height_field(tmp_path / "dem.tif", z, pixel_distance=2.5)

    with rasterio.open(path) as ds:
        assert ds.width == 5
        assert ds.height == 6
        assert abs(float(ds.transform.a) - 2.5) < 1e-9

    hf = load_height_field(path)
    assert (hf.width, hf.height) == (5, 6)
    assert hf.pixel_distance == pytest.approx(2.5)
    assert hf.crs is not None
    np.testing.assert_allclose(hf.as_grid(), z)


def test_geotiff_size_is_checked(tmp_path: Path) -> None:
    path = write_geotiff_height_field(tmp_path / "dem.tif", np.zeros((4, 4), dtype=np.float32), pixel_distance=1.0)
    with pytest.raises(ValueError, match="wide"):
        load_height_field(path, width=5)


def test_geotiff_nodata_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "holes.tif"
    z = np.ones((4, 4), dtype=np.float32)
    z[1, 2] = -9999.0
    profile = {
        "driver": "GTiff",
        "height": 4,
        "width": 4,
        "count": 1,
        "dtype": "float32",
        "crs": "EPSG:3857",
        "transform": from_origin(0.0, 4.0, 1.0, 1.0),
        "nodata": -9999.0,
    }
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(z, 1)

    with pytest.raises(ValueError, match="nodata"):
        read_geotiff_height_field(path)


def test_geotiff_nan_nodata_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "nan_holes.tif"
    z = np.ones((4, 4), dtype=np.float32)
    z[1, 1] = np.nan
    profile = {
        "driver": "GTiff",
        "height": 4,
        "width": 4,
        "count": 1,
        "dtype": "float32",
        "crs": "EPSG:3857",
        "transform": from_origin(0.0, 4.0, 1.0, 1.0),
        "nodata": float("nan"),
    }
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(z, 1)

    with pytest.raises(ValueError, match="nodata"):
        read_geotiff_height_field(path)


def test_geotiff_nan_without_nodata_tag_is_rejected(tmp_path: Path) -> None:
    z = np.ones((4, 4), dtype=np.float32)
    z[2, 3] = np.nan
    path = write_geotiff_height_field(tmp_path / "untagged.tif", z, pixel_distance=1.0)
    with pytest.raises(ValueError, match="nodata"):
        load_height_field(path)

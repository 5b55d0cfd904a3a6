"""Synthetic height fields for tests and demos.

Sentetik yükseklik alanları; yüzey mesafesi hesabını bilinen yüzeylerde
denemek için.

PRESET'LER:
-----------
- flat:    Sabit yükseklik (yüzey mesafesi = düz mesafe)
- plane:   Eğimli düzlem (analitik referans var)
- waves:   Sinüzoidal dalgalar
- hills:   Yumuşak tepeler (Gauss ile yumuşatılmış gürültü)
- crater:  Tek krater (halka sırt + çukur)

Raw format tek bayt/örnek olduğu için varsayılan çıktı 0..255 aralığına
ölçeklenip uint8'e yuvarlanır.
"""

from __future__ import annotations

import math
from typing import Callable

import numpy as np
from scipy.ndimage import gaussian_filter

SurfaceFunc = Callable[[np.ndarray, np.ndarray], np.ndarray]

SYNTHETIC_PRESETS = ["flat", "plane", "waves", "hills", "crater"]


def lattice_coords(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Return meshgrid of sample coordinates (x, y), shape (height, width)."""
    xs = np.arange(width, dtype=np.float64)
    ys = np.arange(height, dtype=np.float64)
    x, y = np.meshgrid(xs, ys)
    return x, y


def plane(a: float, b: float, c: float = 0.0) -> SurfaceFunc:
    """z = a*x + b*y + c"""

    def f(x: np.ndarray, y: np.ndarray) -> np.ndarray:
        return a * x + b * y + c

    return f


def sinusoid(amplitude: float, kx: float, ky: float, c: float = 0.0) -> SurfaceFunc:
    """z = A*sin(kx*x)*sin(ky*y) + c"""

    def f(x: np.ndarray, y: np.ndarray) -> np.ndarray:
        return amplitude * np.sin(kx * x) * np.sin(ky * y) + c

    return f


def sample_surface(width: int, height: int, func: SurfaceFunc) -> np.ndarray:
    x, y = lattice_coords(width, height)
    return func(x, y).astype(np.float64, copy=False)


def plane_surface_distance(
    a: float,
    b: float,
    begin: tuple[int, int],
    end: tuple[int, int],
    *,
    pixel_distance: float = 1.0,
    pixel_height: float = 1.0,
) -> float:
    """Exact surface distance over the plane z = a*x + b*y (sample units).

    Linear interpolation reproduces a plane exactly, so this is the reference
    for unquantized plane fields.
    """
    ddx = float(end[0] - begin[0])
    ddy = float(end[1] - begin[1])
    dz = (a * ddx + b * ddy) * float(pixel_height)
    return math.sqrt((ddx * pixel_distance) ** 2 + (ddy * pixel_distance) ** 2 + dz * dz)


def _smoothed_noise(rng: np.random.Generator, width: int, height: int, sigma_px: float) -> np.ndarray:
    white = rng.standard_normal((height, width))
    sm = gaussian_filter(white, sigma=sigma_px, mode="reflect")
    sm = sm - float(sm.mean(dtype=np.float64))
    std = float(sm.std(dtype=np.float64))
    if std > 0:
        sm = sm / std
    return sm


def _to_byte_range(z: np.ndarray) -> np.ndarray:
    lo = float(z.min())
    hi = float(z.max())
    if hi - lo < 1e-12:
        return np.full(z.shape, np.clip(round(lo), 0, 255), dtype=np.uint8)
    scaled = (z - lo) / (hi - lo) * 255.0
    return np.rint(scaled).astype(np.uint8)


def generate_height_field(
    *,
    width: int,
    height: int,
    preset: str = "hills",
    seed: int = 0,
    relief: float = 1.0,
    quantize: bool = True,
) -> np.ndarray:
    """Sentetik yükseklik alanı üretir, shape (height, width).

    Args:
        width, height: Örnek sayısı (sütun, satır)
        preset: SYNTHETIC_PRESETS içinden
        seed: Rastgele sayı tohumu
        relief: Rölyef çarpanı
        quantize: True ise 0..255 aralığına ölçeklenmiş uint8, değilse float64

    Returns:
        uint8 (quantize=True) veya float64 dizi
    """
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be > 0")
    preset_n = preset.strip().lower()
    if preset_n not in SYNTHETIC_PRESETS:
        raise ValueError(f"Unknown synthetic preset: {preset!r}. Choices: {SYNTHETIC_PRESETS}")

    rng = np.random.default_rng(int(seed))
    x, y = lattice_coords(width, height)
    r = float(relief)

    if preset_n == "flat":
        z = np.full((height, width), 100.0)
    elif preset_n == "plane":
        z = plane(0.3 * r, -0.2 * r, 100.0)(x, y)
    elif preset_n == "waves":
        kx = 2.0 * math.pi / max(8.0, width / 3.0)
        ky = 2.0 * math.pi / max(8.0, height / 2.0)
        z = sinusoid(40.0 * r, kx, ky, 100.0)(x, y)
    elif preset_n == "hills":
        sigma = max(1.0, min(width, height) / 12.0)
        z = 100.0 + r * (30.0 * _smoothed_noise(rng, width, height, sigma) + 8.0 * _smoothed_noise(rng, width, height, sigma / 3.0))
    else:  # crater
        cx, cy = 0.5 * (width - 1), 0.5 * (height - 1)
        radius = 0.3 * min(width, height)
        d = np.hypot(x - cx, y - cy) / max(radius, 1e-9)
        rim = np.exp(-((d - 1.0) ** 2) / 0.02)
        bowl = np.where(d < 1.0, 1.0 - d * d, 0.0)
        z = 100.0 + r * (40.0 * rim - 60.0 * bowl) + 2.0 * _smoothed_noise(rng, width, height, 1.0)

    if not quantize:
        return z.astype(np.float64, copy=False)
    return _to_byte_range(z)

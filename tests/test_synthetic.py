from __future__ import annotations

import numpy as np
import pytest

from surface_distance.distance import compute_surface_distance, planar_distance
from surface_distance.synthetic import SYNTHETIC_PRESETS, generate_height_field


@pytest.mark.parametrize("preset", SYNTHETIC_PRESETS)
def test_presets_fit_raw_format(preset: str) -> None:
    z = generate_height_field(width=40, height=30, preset=preset, seed=5)
    assert z.shape == (30, 40)
    assert z.dtype == np.uint8


def test_flat_preset_is_constant() -> None:
    z = generate_height_field(width=16, height=16, preset="flat")
    assert int(z.min()) == int(z.max())


def test_rough_presets_use_full_byte_range() -> None:
    for preset in ("waves", "hills", "crater"):
        z = generate_height_field(width=64, height=64, preset=preset, seed=1)
        assert int(z.min()) == 0
        assert int(z.max()) == 255


def test_same_seed_is_reproducible() -> None:
    a = generate_height_field(width=32, height=32, preset="hills", seed=9)
    b = generate_height_field(width=32, height=32, preset="hills", seed=9)
    c = generate_height_field(width=32, height=32, preset="hills", seed=10)
    np.testing.assert_array_equal(a, b)
    assert not np.array_equal(a, c)


def test_unknown_preset() -> None:
    with pytest.raises(ValueError, match="Unknown synthetic preset"):
        generate_height_field(width=8, height=8, preset="moon")


def test_rough_terrain_is_longer_than_flat() -> None:
    z = generate_height_field(width=64, height=64, preset="hills", seed=2)
    begin, end = (2, 3), (60, 50)
    rough = compute_surface_distance(begin, end, z, 64, 64, 30.0, 11.0)
    assert rough > planar_distance(begin, end, 30.0) * 1.01

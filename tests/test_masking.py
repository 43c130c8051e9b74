#!/usr/bin/env python3
"""Tests for the Smith / Schlick-GGX shadowing-masking term."""

import numpy as np
import pytest

from brdflut.masking import geometry_schlick_ggx, geometry_smith


def test_g1_is_one_at_normal_incidence():
    for roughness in (0.0, 0.3, 1.0):
        assert geometry_schlick_ggx(1.0, roughness) == pytest.approx(1.0)


def test_g1_uses_direct_lighting_remap():
    # k = roughness^2 / 2 = 0.5 for roughness 1
    assert geometry_schlick_ggx(0.5, 1.0) == pytest.approx(0.5 / (0.5 * 0.5 + 0.5))


def test_smith_is_product_of_both_directions():
    g = geometry_smith(0.5, 0.5, 1.0)
    assert g == pytest.approx(4.0 / 9.0)
    assert geometry_smith(0.3, 0.8, 0.6) == pytest.approx(
        geometry_schlick_ggx(0.3, 0.6) * geometry_schlick_ggx(0.8, 0.6)
    )


def test_smith_is_one_for_smooth_surfaces():
    assert geometry_smith(0.2, 0.9, 0.0) == pytest.approx(1.0)


def test_smith_is_bounded_and_symmetric():
    cosines = np.linspace(0.01, 1.0, 25)
    nv, nl = np.meshgrid(cosines, cosines)
    for roughness in (0.1, 0.5, 1.0):
        g = geometry_smith(nv, nl, roughness)
        assert np.all(g > 0.0)
        assert np.all(g <= 1.0 + 1e-12)
        np.testing.assert_allclose(g, g.T)


def test_smith_decreases_with_roughness():
    values = [geometry_smith(0.4, 0.6, r) for r in (0.2, 0.5, 0.8, 1.0)]
    assert values == sorted(values, reverse=True)


def test_smith_accepts_float32_arrays():
    nl = np.linspace(0.1, 1.0, 8, dtype=np.float32)
    g = geometry_smith(np.float32(0.5), nl, np.float32(0.5))
    assert g.dtype == np.float32
    assert g.shape == (8,)

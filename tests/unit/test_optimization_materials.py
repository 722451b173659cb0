"""
tests/unit/test_optimization_materials.py - Tests for material envelopes and parameter space.
"""

import pytest
from laseropt.optimization import (
    MATERIAL_PROFILES,
    MaterialType,
    ParameterSpace,
    ParameterVector,
    bounds,
    get_profile,
)


class TestMaterialProfiles:
    """Tests for the material table."""

    def test_all_materials_present(self):
        """Test every material type has a profile."""
        assert set(MATERIAL_PROFILES) == set(MaterialType)

    def test_steel_ranges(self):
        """Test steel envelope."""
        steel = get_profile(MaterialType.STEEL)
        assert steel.power_range == (500.0, 6000.0)
        assert steel.speed_range == (500.0, 8000.0)
        assert steel.gas_pressure_range == (0.5, 20.0)
        assert steel.focus_range == (-5.0, 2.0)
        assert steel.quality_weight == 0.8

    def test_lookup_by_string(self):
        """Test lookup with the request's string value."""
        assert get_profile("titanium").material == MaterialType.TITANIUM

    def test_unknown_material(self):
        """Test unknown materials raise."""
        with pytest.raises(ValueError):
            get_profile("wood")

    @pytest.mark.parametrize("material", list(MaterialType))
    def test_ranges_are_ordered(self, material):
        """Test every interval has lower <= upper."""
        profile = get_profile(material)
        for lower, upper in (
            profile.power_range,
            profile.speed_range,
            profile.gas_pressure_range,
            profile.focus_range,
        ):
            assert lower < upper


class TestParameterSpace:
    """Tests for ParameterSpace."""

    def test_bounds_without_laser_cap(self):
        """Test the uncapped material envelope."""
        space = bounds(MaterialType.STEEL)
        assert space.power == (500.0, 6000.0)

    def test_power_capped_by_laser(self):
        """Test laser power caps the upper bound."""
        space = bounds(MaterialType.STEEL, laser_power=3000)
        assert space.power == (500.0, 3000.0)

    def test_power_collapses_below_minimum(self):
        """Test a weak laser collapses power onto the material minimum."""
        space = bounds(MaterialType.STEEL, laser_power=300)
        assert space.power == (500.0, 500.0)
        assert space.span("power") == 0.0

    def test_strong_laser_keeps_material_max(self):
        """Test a laser above the envelope does not widen it."""
        space = bounds(MaterialType.ALUMINUM, laser_power=20000)
        assert space.power == (300.0, 4000.0)

    def test_clamp(self, steel_space):
        """Test clamping pulls each field into its interval."""
        clamped = steel_space.clamp(ParameterVector(10000.0, 100.0, 25.0, -9.0))
        assert clamped == ParameterVector(3000.0, 500.0, 20.0, -5.0)
        assert steel_space.contains(clamped)

    def test_contains(self, steel_space):
        """Test membership on and outside the boundary."""
        assert steel_space.contains(ParameterVector(500.0, 8000.0, 0.5, 2.0))
        assert not steel_space.contains(ParameterVector(499.0, 8000.0, 0.5, 2.0))

    def test_normalize(self, steel_space):
        """Test normalization onto [0, 1]."""
        lower = ParameterVector(500.0, 500.0, 0.5, -5.0)
        upper = ParameterVector(3000.0, 8000.0, 20.0, 2.0)
        assert steel_space.normalize(lower) == (0.0, 0.0, 0.0, 0.0)
        assert steel_space.normalize(upper) == (1.0, 1.0, 1.0, 1.0)

    def test_normalize_collapsed_interval(self):
        """Test a zero-width interval normalizes to zero."""
        space = bounds(MaterialType.STEEL, laser_power=300)
        assert space.normalize_value("power", 500.0) == 0.0

    def test_distance(self, steel_space):
        """Test normalized Euclidean distance."""
        a = ParameterVector(500.0, 500.0, 0.5, -5.0)
        b = ParameterVector(3000.0, 8000.0, 0.5, -5.0)
        assert steel_space.distance(a, b) == pytest.approx(2 ** 0.5)
        assert steel_space.distance(a, a) == 0.0

    def test_midpoint(self, steel_space):
        """Test the center of the box."""
        assert steel_space.midpoint() == ParameterVector(1750.0, 4250.0, 10.25, -1.5)

    def test_to_dict(self, steel_space):
        """Test camelCase bounds."""
        assert steel_space.to_dict()["gasPressure"] == [0.5, 20.0]

    def test_for_material_accepts_string(self):
        """Test construction from a string value."""
        assert ParameterSpace.for_material("copper").speed == (200.0, 4000.0)

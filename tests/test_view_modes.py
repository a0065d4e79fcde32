"""
Test suite for view mode configuration and the mode registry.
"""

import dataclasses
import pytest
from orrery import ViewModeRegistry, view_modes, OrbitalMechanicsCalculator, sol_system
from orrery.view_modes import (REALISTIC, NAVIGATIONAL, PROFILE, ObjectScaling, SizeRule,
                               OrbitScalingRule, AnimationConfig, CameraConfig, ViewingAngles,
                               camera_distances)


class TestRegistry:
    """Test registration and lookup."""

    def test_builtins(self):
        """The package registry holds the three built-in modes."""
        assert view_modes.get('realistic') is REALISTIC
        assert view_modes.get('navigational') is NAVIGATIONAL
        assert view_modes.get('profile') is PROFILE

    def test_case_insensitive(self):
        """Lookups ignore case."""
        assert view_modes.get('Navigational') is NAVIGATIONAL
        assert 'PROFILE' in view_modes

    def test_unknown_mode(self):
        """get returns None, require raises."""
        assert view_modes.get('cinematic') is None
        with pytest.raises(ValueError, match="Unknown view mode 'cinematic'"):
            view_modes.require('cinematic')

    def test_duplicate_registration(self):
        """Re-registering an id needs replace=True."""
        registry = ViewModeRegistry()
        registry.register(REALISTIC)
        with pytest.raises(ValueError, match="already registered"):
            registry.register(REALISTIC)
        registry.register(REALISTIC, replace=True)
        assert len(registry) == 1

    def test_wrong_type(self):
        """Only ViewModeConfig instances can be registered."""
        with pytest.raises(TypeError, match="Expected ViewModeConfig"):
            ViewModeRegistry().register({'id': 'realistic'})

    def test_unregister(self):
        """Unregistered modes disappear."""
        registry = ViewModeRegistry()
        registry.register(PROFILE)
        registry.unregister('profile')
        assert 'profile' not in registry
        assert registry.ids() == ()

    def test_new_mode_needs_only_registration(self):
        """A registered mode is usable by the calculator without other changes."""
        registry = ViewModeRegistry()
        for mode in view_modes:
            registry.register(mode)
        compact = dataclasses.replace(
            NAVIGATIONAL, id='compact', name='Compact',
            orbit_scaling=dataclasses.replace(NAVIGATIONAL.orbit_scaling, fixed_spacing=1.0,
                                              match_reference_extent=False),
        )
        registry.register(compact)

        layout = OrbitalMechanicsCalculator(registry).compute_layout(sol_system().objects, 'compact')
        assert layout['earth'].orbit_distance > layout['venus'].orbit_distance
        assert layout['eris'].orbit_distance > layout['pluto'].orbit_distance


class TestModeValues:
    """Test the built-in mode parameters."""

    def test_orbit_styles(self):
        """Realistic is eccentric and inclined, profile is linear and static."""
        assert REALISTIC.orbit_style.eccentric and REALISTIC.orbit_style.inclined
        assert not NAVIGATIONAL.orbit_style.eccentric
        assert NAVIGATIONAL.orbit_style.animated
        assert PROFILE.orbit_style.linear
        assert not PROFILE.orbit_style.animated

    def test_profile_elevation(self):
        """Profile framing sits at 22.5 degrees."""
        assert PROFILE.camera.viewing_angles.default_elevation == 22.5

    def test_object_scaling_for_type(self):
        """gasGiant maps onto the gas_giant field; unknown types use default."""
        assert NAVIGATIONAL.object_scaling.for_type('gasGiant') == 1.8
        assert NAVIGATIONAL.object_scaling.for_type('asteroid') == 0.6
        assert NAVIGATIONAL.object_scaling.for_type('comet') == 1.0

    def test_mode_id_lowercased(self):
        """Mode ids are normalised to lower case."""
        mode = dataclasses.replace(REALISTIC, id='  Wide ')
        assert mode.id == 'wide'


class TestValidation:
    """Test config validation."""

    def test_bad_size_rule(self):
        """Size bounds must be ordered."""
        with pytest.raises(ValueError):
            SizeRule(exponent=0.3, scale=0.01, min_visual_size=2.0, max_visual_size=1.0)

    def test_bad_exponent(self):
        """Size exponents are sub-linear."""
        with pytest.raises(ValueError, match="Size exponent"):
            SizeRule(exponent=1.5, scale=0.01, min_visual_size=0.1, max_visual_size=1.0)

    def test_bad_scaling_kind(self):
        """Unknown placement kinds are rejected."""
        with pytest.raises(ValueError, match="Invalid orbit scaling kind 'spiral'"):
            OrbitScalingRule(kind='spiral')

    def test_bad_safety_multiplier(self):
        """The first orbit cannot sit inside the parent."""
        with pytest.raises(ValueError, match="safety_multiplier"):
            OrbitScalingRule(safety_multiplier=0.5)

    def test_bad_easing(self):
        """Easing must be one of the known curves."""
        with pytest.raises(ValueError, match="Invalid easing 'bounce'"):
            AnimationConfig(easing='bounce')

    def test_bad_elevation(self):
        """Elevations stay within +/-90 degrees."""
        with pytest.raises(ValueError):
            ViewingAngles(default_elevation=120.0)

    def test_non_positive_object_scaling(self):
        """Multipliers must be positive."""
        with pytest.raises(ValueError, match="Object scaling 'moon'"):
            ObjectScaling(moon=0.0)


class TestCameraDistances:
    """Test focus distance bounds."""

    def test_optimal_inside_bounds(self):
        """Optimal distance is radius times the multiplier when unclamped."""
        d = camera_distances(1.0, REALISTIC.camera)
        assert d.optimal == pytest.approx(4.0)
        assert d.minimum == pytest.approx(2.5)
        assert d.maximum == pytest.approx(15.0)

    def test_absolute_floor(self):
        """Tiny objects are clamped to the absolute minimum."""
        d = camera_distances(0.001, REALISTIC.camera)
        assert d.minimum == pytest.approx(0.05)
        assert d.optimal == pytest.approx(0.05)

    def test_absolute_ceiling(self):
        """Huge objects are clamped to the absolute maximum."""
        camera = CameraConfig(absolute_max_distance=10.0)
        d = camera_distances(100.0, camera)
        assert d.maximum >= d.minimum
        assert d.optimal <= d.maximum

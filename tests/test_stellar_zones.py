"""
Test suite for habitable zone and snow line calculations.
"""

import math
import pytest
from orrery import sol_system, CelestialObject
from orrery.stellar_zones import (StellarZones, calculate_zones, calculate_binary_zones,
                                  luminosity_for_spectral_type, spectral_type_for_temperature,
                                  zones_for_object, zones_from_luminosity)


class TestSpectralLookup:
    """Test spectral type tables."""

    def test_exact_subtype(self):
        """Luminosity class suffixes are ignored."""
        assert luminosity_for_spectral_type('G2V') == 1.0
        assert luminosity_for_spectral_type('k5') == 0.2

    def test_class_letter_fallback(self):
        """Untabulated subtypes use the first entry of their class."""
        assert luminosity_for_spectral_type('G8V') == 1.0
        assert luminosity_for_spectral_type('M3V') == 0.08

    def test_unknown_type(self):
        """Unknown classes are rejected."""
        with pytest.raises(ValueError, match="Unknown spectral type 'Y0'"):
            luminosity_for_spectral_type('Y0')

    def test_temperature_nearest(self):
        """Temperatures map to the nearest tabulated subtype."""
        assert spectral_type_for_temperature(5800.0) == 'G2'
        assert spectral_type_for_temperature(3000.0) == 'M5'


class TestZones:
    """Test zone distances."""

    def test_sun_like(self):
        """Solar luminosity gives the familiar zone."""
        z = calculate_zones(spectral_type='G2V')
        assert z.habitable_inner == pytest.approx(math.sqrt(1 / 1.37))
        assert z.habitable_outer == pytest.approx(math.sqrt(1 / 0.95))
        assert z.snow_line == pytest.approx(2.7)
        assert z.contains(1.0)
        assert not z.contains(2.0)

    def test_luminosity_takes_precedence(self):
        """An explicit luminosity overrides the spectral type."""
        z = calculate_zones(spectral_type='M5V', luminosity=4.0)
        assert z.luminosity == 4.0
        assert z.snow_line == pytest.approx(5.4)

    def test_temperature_only(self):
        """Temperature alone selects a subtype."""
        z = calculate_zones(temperature=4400.0)
        assert z.luminosity == 0.2

    def test_requires_input(self):
        """At least one stellar parameter is required."""
        with pytest.raises(ValueError, match="One of spectral_type"):
            calculate_zones()

    def test_binary_sums_luminosity(self):
        """A binary is treated as one source of summed luminosity."""
        z = calculate_binary_zones('G2V', 'G2V')
        assert z.luminosity == 2.0
        assert z.habitable_inner == pytest.approx(math.sqrt(2 / 1.37))

    def test_scaled(self):
        """Scaling multiplies distances and keeps luminosity."""
        z = zones_from_luminosity(1.0).scaled(10.0)
        assert z.luminosity == 1.0
        assert z.snow_line == pytest.approx(27.0)
        assert z.habitable_width == pytest.approx(10 * (math.sqrt(1 / 0.95) - math.sqrt(1 / 1.37)))

    def test_non_positive_luminosity(self):
        """Zones need a positive luminosity."""
        with pytest.raises(ValueError, match="Luminosity must be positive"):
            StellarZones(luminosity=0.0, habitable_inner=0.0, habitable_outer=0.0, snow_line=0.0)

    def test_for_object(self):
        """Star objects supply their own parameters."""
        z = zones_for_object(sol_system().get('sol'))
        assert z.luminosity == 1.0

    def test_for_object_without_data(self):
        """Objects with no stellar data are rejected."""
        rock = CelestialObject(id='rock', name='Rock', classification='asteroid')
        with pytest.raises(ValueError, match="has no luminosity"):
            zones_for_object(rock)

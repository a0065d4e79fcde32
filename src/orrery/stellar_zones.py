"""
Stellar Zone Calculator
=======================

Habitable zone and snow line distances from a star's spectral type,
temperature, or luminosity.

The habitable zone bounds use the effective stellar flux limits of
1.37 (inner, runaway greenhouse) and 0.95 (outer, maximum greenhouse) times
the solar constant, so ``d = sqrt(L / S_eff)`` in AU with ``L`` in solar
luminosities. The snow line is placed at ``2.7 * sqrt(L)`` AU.

Examples
--------
>>> from orrery.stellar_zones import calculate_zones
>>> z = calculate_zones(spectral_type='G2V')
>>> round(z.habitable_inner, 3), round(z.habitable_outer, 3)
(0.854, 1.026)
"""

import math
from dataclasses import dataclass
from typing import Optional
from .celestial import CelestialObject

# Luminosity in solar units by spectral subtype
SPECTRAL_LUMINOSITY = {
    'O5': 100000.0,
    'B0': 20000.0,
    'B5': 800.0,
    'A0': 80.0,
    'A5': 25.0,
    'F0': 6.0,
    'F8': 1.5,
    'G2': 1.0,
    'K0': 0.6,
    'K5': 0.2,
    'M0': 0.08,
    'M5': 0.01,
    'M8': 0.001,
}

# Approximate main-sequence effective temperature [K] for the same subtypes
SPECTRAL_TEMPERATURE = {
    'O5': 42000.0,
    'B0': 30000.0,
    'B5': 15200.0,
    'A0': 9600.0,
    'A5': 8200.0,
    'F0': 7200.0,
    'F8': 6200.0,
    'G2': 5778.0,
    'K0': 5300.0,
    'K5': 4400.0,
    'M0': 3850.0,
    'M5': 3050.0,
    'M8': 2600.0,
}

HZ_INNER_FLUX = 1.37
HZ_OUTER_FLUX = 0.95
SNOW_LINE_FACTOR = 2.7


@dataclass(frozen=True)
class StellarZones:
    """
    Zone distances around a star or binary pair.

    Attributes
    ----------
    luminosity : float
        Total luminosity [solar luminosities]
    habitable_inner : float
        Inner edge of the habitable zone [AU]
    habitable_outer : float
        Outer edge of the habitable zone [AU]
    snow_line : float
        Distance of the water-ice line [AU]
    """
    luminosity: float
    habitable_inner: float
    habitable_outer: float
    snow_line: float

    def __post_init__(self):
        if self.luminosity <= 0:
            raise ValueError(f"Luminosity must be positive, got {self.luminosity}")

    @property
    def habitable_width(self) -> float:
        return self.habitable_outer - self.habitable_inner

    def contains(self, distance: float) -> bool:
        """True if ``distance`` [AU] lies inside the habitable zone."""
        return self.habitable_inner <= distance <= self.habitable_outer

    def scaled(self, factor: float) -> 'StellarZones':
        """Zones with distances multiplied by ``factor`` (e.g. a layout's system scale)."""
        return StellarZones(
            luminosity=self.luminosity,
            habitable_inner=self.habitable_inner * factor,
            habitable_outer=self.habitable_outer * factor,
            snow_line=self.snow_line * factor,
        )


def luminosity_for_spectral_type(spectral_type: str) -> float:
    """
    Look up the luminosity of a spectral type.

    The two-character subtype (e.g. 'G2' from 'G2V') is matched exactly
    first; failing that, the first tabulated subtype of the same class letter
    is used.

    Raises
    ------
    ValueError
        If neither the subtype nor its class letter is tabulated
    """
    if not spectral_type:
        raise ValueError("Spectral type must be a non-empty string")
    key = spectral_type.strip().upper()[:2]
    if key in SPECTRAL_LUMINOSITY:
        return SPECTRAL_LUMINOSITY[key]
    for subtype, luminosity in SPECTRAL_LUMINOSITY.items():
        if subtype[0] == key[0]:
            return luminosity
    raise ValueError(
        f"Unknown spectral type '{spectral_type}'. "
        f"Known classes: {sorted({k[0] for k in SPECTRAL_LUMINOSITY})}"
    )


def spectral_type_for_temperature(temperature: float) -> str:
    """Return the tabulated subtype whose temperature is closest."""
    if temperature <= 0:
        raise ValueError(f"Temperature must be positive, got {temperature}")
    return min(SPECTRAL_TEMPERATURE,
               key=lambda k: abs(SPECTRAL_TEMPERATURE[k] - temperature))


def zones_from_luminosity(luminosity: float) -> StellarZones:
    if luminosity <= 0:
        raise ValueError(f"Luminosity must be positive, got {luminosity}")
    return StellarZones(
        luminosity=luminosity,
        habitable_inner=math.sqrt(luminosity / HZ_INNER_FLUX),
        habitable_outer=math.sqrt(luminosity / HZ_OUTER_FLUX),
        snow_line=SNOW_LINE_FACTOR * math.sqrt(luminosity),
    )


def calculate_zones(spectral_type: Optional[str] = None,
                    temperature: Optional[float] = None,
                    luminosity: Optional[float] = None) -> StellarZones:
    """
    Compute zone distances for a single star.

    Parameters
    ----------
    spectral_type : str, optional
        Spectral type such as 'K5V'
    temperature : float, optional
        Effective temperature [K], used when no spectral type is given
    luminosity : float, optional
        Luminosity [solar units]; takes precedence over the other inputs

    Returns
    -------
    StellarZones

    Raises
    ------
    ValueError
        If no input is given or the spectral type is unknown
    """
    if luminosity is not None:
        return zones_from_luminosity(luminosity)
    if spectral_type is not None:
        return zones_from_luminosity(luminosity_for_spectral_type(spectral_type))
    if temperature is not None:
        subtype = spectral_type_for_temperature(temperature)
        return zones_from_luminosity(SPECTRAL_LUMINOSITY[subtype])
    raise ValueError("One of spectral_type, temperature or luminosity is required")


def calculate_binary_zones(primary: str, secondary: str) -> StellarZones:
    """Zones around a close binary, treating it as one source of summed luminosity."""
    total = luminosity_for_spectral_type(primary) + luminosity_for_spectral_type(secondary)
    return zones_from_luminosity(total)


def zones_for_object(obj: CelestialObject) -> StellarZones:
    """Zones for a star object from its luminosity, spectral type, or temperature."""
    p = obj.properties
    if p.luminosity is None and p.spectral_type is None and p.temperature is None:
        raise ValueError(f"Object '{obj.id}' has no luminosity, spectral type or temperature")
    return calculate_zones(spectral_type=p.spectral_type,
                           temperature=p.temperature,
                           luminosity=p.luminosity)

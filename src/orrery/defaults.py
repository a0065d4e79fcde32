"""
Default Celestial Objects and Sample Systems
============================================

Predefined objects for the Solar System and a binary system, plus factory
functions that assemble them into SystemData on demand.

Radii in km, semi-major axes in AU, inclinations in degrees, periods in days.
Values are rounded mean elements from the JPL planetary fact sheets.

Examples
--------
>>> from orrery import sol_system
>>> sol = sol_system()
>>> sol.get('earth').orbit.semi_major_axis
1.0
"""

from .celestial import (CelestialObject, Properties, OrbitData, BeltOrbitData,
                        SystemData, Lighting)


def _body(id, name, classification, geometry, radius, parent, a, e, i, period,
          mass=0.0, has_rings=False):
    return CelestialObject(
        id=id, name=name, classification=classification, geometry_type=geometry,
        properties=Properties(mass=mass, radius=radius, has_rings=has_rings),
        orbit=OrbitData(parent=parent, semi_major_axis=a, eccentricity=e,
                        inclination=i, orbital_period=period),
    )


"""
The Solar System
"""

SOL = CelestialObject(
    id='sol', name='Sol', classification='star', geometry_type='star',
    properties=Properties(mass=1.0, radius=695700.0, temperature=5778.0,
                          luminosity=1.0, spectral_type='G2V'),
    position=(0.0, 0.0, 0.0),
)

MERCURY = _body('mercury', 'Mercury', 'planet', 'terrestrial', 2439.7, 'sol', 0.387, 0.2056, 7.0, 87.97, mass=0.055)
VENUS = _body('venus', 'Venus', 'planet', 'terrestrial', 6051.8, 'sol', 0.723, 0.0068, 3.39, 224.70, mass=0.815)
EARTH = _body('earth', 'Earth', 'planet', 'terrestrial', 6371.0, 'sol', 1.0, 0.0167, 0.0, 365.25, mass=1.0)
LUNA = _body('luna', 'Luna', 'moon', 'rocky', 1737.4, 'earth', 0.00257, 0.0549, 5.145, 27.32, mass=0.0123)
MARS = _body('mars', 'Mars', 'planet', 'terrestrial', 3389.5, 'sol', 1.524, 0.0934, 1.85, 686.98, mass=0.107)

ASTEROID_BELT = CelestialObject(
    id='asteroid-belt', name='Asteroid Belt', classification='belt', geometry_type='belt',
    orbit=BeltOrbitData(parent='sol', inner_radius=2.2, outer_radius=3.2),
)

JUPITER = _body('jupiter', 'Jupiter', 'planet', 'gas_giant', 69911.0, 'sol', 5.203, 0.0489, 1.30, 4332.59, mass=317.8)
IO = _body('io', 'Io', 'moon', 'rocky', 1821.6, 'jupiter', 0.00282, 0.0041, 0.05, 1.769)
EUROPA = _body('europa', 'Europa', 'moon', 'rocky', 1560.8, 'jupiter', 0.00449, 0.009, 0.47, 3.551)
GANYMEDE = _body('ganymede', 'Ganymede', 'moon', 'rocky', 2634.1, 'jupiter', 0.00716, 0.0013, 0.20, 7.155)
CALLISTO = _body('callisto', 'Callisto', 'moon', 'rocky', 2410.3, 'jupiter', 0.01259, 0.0074, 0.20, 16.69)
SATURN = _body('saturn', 'Saturn', 'planet', 'gas_giant', 58232.0, 'sol', 9.537, 0.0565, 2.49, 10759.22,
               mass=95.2, has_rings=True)
TITAN = _body('titan', 'Titan', 'moon', 'rocky', 2574.7, 'saturn', 0.00817, 0.0288, 0.35, 15.95)
URANUS = _body('uranus', 'Uranus', 'planet', 'gas_giant', 25362.0, 'sol', 19.19, 0.0457, 0.77, 30688.5, mass=14.5)
NEPTUNE = _body('neptune', 'Neptune', 'planet', 'gas_giant', 24622.0, 'sol', 30.047, 0.0113, 1.77, 60182.0, mass=17.1)
PLUTO = _body('pluto', 'Pluto', 'dwarf-planet', 'terrestrial', 1188.3, 'sol', 39.48, 0.2488, 17.16, 90560.0)

KUIPER_BELT = CelestialObject(
    id='kuiper-belt', name='Kuiper Belt', classification='belt', geometry_type='belt',
    orbit=BeltOrbitData(parent='sol', inner_radius=30.0, outer_radius=50.0),
)

ERIS = _body('eris', 'Eris', 'dwarf-planet', 'terrestrial', 1163.0, 'sol', 67.67, 0.44, 44.04, 203830.0)

SOL_OBJECTS = (
    SOL, MERCURY, VENUS, EARTH, LUNA, MARS, ASTEROID_BELT,
    JUPITER, IO, EUROPA, GANYMEDE, CALLISTO,
    SATURN, TITAN, URANUS, NEPTUNE, PLUTO, KUIPER_BELT, ERIS,
)

"""
Alpha Centauri A/B around their common barycenter
"""

ALPHA_CENTAURI_BARYCENTER = CelestialObject(
    id='alpha-centauri', name='Alpha Centauri', classification='barycenter',
    geometry_type='none', position=(0.0, 0.0, 0.0),
)

ALPHA_CENTAURI_A = CelestialObject(
    id='alpha-centauri-a', name='Alpha Centauri A', classification='star', geometry_type='star',
    properties=Properties(mass=1.079, radius=851000.0, temperature=5790.0,
                          luminosity=1.519, spectral_type='G2V'),
    orbit=OrbitData(parent='alpha-centauri', semi_major_axis=10.7, eccentricity=0.5179,
                    inclination=79.2, orbital_period=29187.0),
)

ALPHA_CENTAURI_B = CelestialObject(
    id='alpha-centauri-b', name='Alpha Centauri B', classification='star', geometry_type='star',
    properties=Properties(mass=0.909, radius=598000.0, temperature=5260.0,
                          luminosity=0.5002, spectral_type='K1V'),
    orbit=OrbitData(parent='alpha-centauri', semi_major_axis=12.8, eccentricity=0.5179,
                    inclination=79.2, orbital_period=29187.0),
)


# Factory functions for sample systems
def sol_system() -> SystemData:
    """The Solar System with major moons, both belts, Pluto and Eris."""
    return SystemData(
        id='sol',
        name='Sol',
        description='Home system',
        objects=SOL_OBJECTS,
        lighting=Lighting(primary_star='sol', ambient_level=0.1),
    )


def alpha_centauri_system() -> SystemData:
    """Alpha Centauri A and B orbiting their barycenter."""
    return SystemData(
        id='alpha-centauri',
        name='Alpha Centauri',
        description='Nearest binary star system',
        objects=(ALPHA_CENTAURI_BARYCENTER, ALPHA_CENTAURI_A, ALPHA_CENTAURI_B),
        lighting=Lighting(primary_star='alpha-centauri-a',
                          secondary_star='alpha-centauri-b', ambient_level=0.1),
    )


def lone_star_system() -> SystemData:
    """A single star with nothing orbiting it."""
    return SystemData(
        id='lone-star',
        name='Lone Star',
        objects=(SOL,),
        lighting=Lighting(primary_star='sol'),
    )

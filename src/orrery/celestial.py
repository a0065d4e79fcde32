'''Celestial object data model for the orrery package.

Real astronomical values live here and nothing in the package ever rewrites
them: view modes only derive LayoutResult records from these objects.'''

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union, Dict, Any, Iterable
import numpy as np
import pandas as pd
from .utils import validation_error

# define an enumerated list of object classifications
class Classification(Enum):
    STAR = 'star'
    COMPACT_OBJECT = 'compact-object'
    BLACK_HOLE = 'black-hole'
    PLANET = 'planet'
    DWARF_PLANET = 'dwarf-planet'
    MOON = 'moon'
    ASTEROID = 'asteroid'
    BELT = 'belt'
    RING = 'ring'
    BARYCENTER = 'barycenter'
    JUMP_POINT = 'jump-point'
    STATION = 'station'

# rendering-shape hint, independent of classification
class GeometryType(Enum):
    TERRESTRIAL = 'terrestrial'
    ROCKY = 'rocky'
    GAS_GIANT = 'gas_giant'
    STAR = 'star'
    COMPACT = 'compact'
    BELT = 'belt'
    RING = 'ring'
    NONE = 'none'


def parse_classification(value: Union[str, Classification]) -> Classification:
    """Map a catalog string (any case, '-' or '_') to a Classification."""
    if isinstance(value, Classification):
        return value
    type_map = {c.value: c for c in Classification}
    key = str(value).strip().lower().replace('_', '-')
    if key not in type_map:
        raise ValueError(
            f"Invalid classification '{value}'. "
            f"Must be one of: {list(type_map.keys())}"
        )
    return type_map[key]


def parse_geometry_type(value: Union[str, GeometryType, None]) -> GeometryType:
    """Map a catalog string (any case, '-' or '_') to a GeometryType."""
    if value is None:
        return GeometryType.NONE
    if isinstance(value, GeometryType):
        return value
    type_map = {g.value: g for g in GeometryType}
    key = str(value).strip().lower().replace('-', '_')
    if key not in type_map:
        raise ValueError(
            f"Invalid geometry_type '{value}'. "
            f"Must be one of: {list(type_map.keys())}"
        )
    return type_map[key]


@dataclass(frozen=True)
class Properties:
    """
    Immutable physical attributes of a celestial object.

    Attributes
    ----------
    mass : float
        Mass (solar masses for stars, Earth masses otherwise; only used
        descriptively)
    radius : float
        Mean radius [km]
    temperature : float, optional
        Effective or surface temperature [K]
    luminosity : float, optional
        Luminosity [solar luminosities]
    spectral_type : str, optional
        Spectral classification such as 'G2V'
    atmosphere : float, optional
        Atmosphere coverage in percent
    has_rings : bool
        Whether the body carries a ring system
    """
    mass: float = 0.0
    radius: float = 0.0
    temperature: Optional[float] = None
    luminosity: Optional[float] = None
    spectral_type: Optional[str] = None
    atmosphere: Optional[float] = None
    has_rings: bool = False

    def __post_init__(self):
        if self.mass < 0:
            raise ValueError(f"Mass must be non-negative, got {self.mass}")
        if self.radius < 0:
            raise ValueError(f"Radius must be non-negative, got {self.radius}")
        if self.temperature is not None and self.temperature < 0:
            raise ValueError(f"Temperature must be non-negative, got {self.temperature}")
        if self.luminosity is not None and self.luminosity < 0:
            raise ValueError(f"Luminosity must be non-negative, got {self.luminosity}")


@dataclass(frozen=True)
class OrbitData:
    """
    Immutable Keplerian orbit of a point object around its parent.

    Attributes
    ----------
    parent : str
        Id of the object being orbited
    semi_major_axis : float
        Semi-major axis [AU]
    eccentricity : float
        Eccentricity, 0 <= e < 1
    inclination : float
        Inclination [deg]
    orbital_period : float
        Orbital period [days]
    """
    parent: str
    semi_major_axis: float
    eccentricity: float = 0.0
    inclination: float = 0.0
    orbital_period: float = 365.25

    def __post_init__(self):
        if not self.parent:
            raise ValueError("Orbit parent must be a non-empty id")
        if self.semi_major_axis <= 0:
            raise ValueError(f"Semi-major axis must be positive, got {self.semi_major_axis}")
        if not 0 <= self.eccentricity < 1:
            raise ValueError(f"Eccentricity must be in [0, 1), got {self.eccentricity}")
        if self.orbital_period <= 0:
            raise ValueError(f"Orbital period must be positive, got {self.orbital_period}")


@dataclass(frozen=True)
class BeltOrbitData:
    """
    Immutable annulus occupied by a belt or ring around its parent.

    Attributes
    ----------
    parent : str
        Id of the object the belt surrounds
    inner_radius, outer_radius : float
        Radial bounds [AU]
    inclination : float
        Inclination [deg]
    eccentricity : float
        Eccentricity of the belt's mean orbit
    """
    parent: str
    inner_radius: float
    outer_radius: float
    inclination: float = 0.0
    eccentricity: float = 0.0

    def __post_init__(self):
        if not self.parent:
            raise ValueError("Belt parent must be a non-empty id")
        if self.inner_radius < 0:
            raise ValueError(f"Inner radius must be non-negative, got {self.inner_radius}")
        if self.outer_radius <= self.inner_radius:
            raise ValueError(
                f"Outer radius ({self.outer_radius}) must exceed "
                f"inner radius ({self.inner_radius})"
            )

    @property
    def mid_radius(self) -> float:
        """Radius halfway across the belt [AU]"""
        return 0.5 * (self.inner_radius + self.outer_radius)


Orbit = Union[OrbitData, BeltOrbitData]


@dataclass(frozen=True)
class CelestialObject:
    """
    A node in a star system's object tree.

    Parameters
    ----------
    id : str
        Identity key, unique within a system
    name : str
        Display name (never used for lookups)
    classification : Classification or str
    geometry_type : GeometryType or str
    properties : Properties
    orbit : OrbitData or BeltOrbitData, optional
        Absent for roots such as a lone central star
    position : tuple of float, optional
        Absolute placement, only meaningful for roots
    """
    id: str
    name: str
    classification: Classification
    geometry_type: GeometryType = GeometryType.NONE
    properties: Properties = field(default_factory=Properties)
    orbit: Optional[Orbit] = None
    position: Optional[Tuple[float, float, float]] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Celestial object id must be a non-empty string")
        object.__setattr__(self, 'classification', parse_classification(self.classification))
        object.__setattr__(self, 'geometry_type', parse_geometry_type(self.geometry_type))
        if self.position is not None:
            pos = tuple(float(v) for v in self.position)
            if len(pos) != 3:
                raise ValueError(f"Position must have 3 components, got {len(pos)}")
            object.__setattr__(self, 'position', pos)
        if self.orbit is not None and self.orbit.parent == self.id:
            raise ValueError(f"Object '{self.id}' cannot orbit itself")

    # ========== PROPERTY ACCESS ==========

    @property
    def parent_id(self) -> Optional[str]:
        """Id of the parent object, None for roots"""
        return None if self.orbit is None else self.orbit.parent

    @property
    def is_root(self) -> bool:
        return self.orbit is None

    @property
    def is_belt(self) -> bool:
        """True when the object occupies an annulus instead of a point orbit"""
        return isinstance(self.orbit, BeltOrbitData)

    @property
    def object_type(self) -> str:
        """
        Coarse visual type used to look up per-mode size multipliers.

        Returns one of 'star', 'gasGiant', 'planet', 'moon', 'asteroid' or
        'default'. Keyed on classification and geometry, never on the name.
        """
        c = self.classification
        if c in (Classification.STAR, Classification.COMPACT_OBJECT, Classification.BLACK_HOLE):
            return 'star'
        if self.geometry_type is GeometryType.GAS_GIANT and c is not Classification.MOON:
            return 'gasGiant'
        if c in (Classification.PLANET, Classification.DWARF_PLANET):
            return 'planet'
        if c is Classification.MOON:
            return 'moon'
        if c in (Classification.ASTEROID, Classification.BELT, Classification.RING):
            return 'asteroid'
        return 'default'

    # ========== CONSTRUCTION ==========

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CelestialObject':
        """
        Build an object from its catalog JSON form.

        Belt orbits are recognised by the presence of ``inner_radius``.
        Unknown property keys are ignored.
        """
        if 'id' not in data:
            raise ValueError(f"Catalog entry is missing 'id': {data}")
        props = dict(data.get('properties') or {})
        known = Properties.__dataclass_fields__.keys()
        properties = Properties(**{k: v for k, v in props.items() if k in known})

        orbit = None
        raw_orbit = data.get('orbit')
        if raw_orbit:
            if 'inner_radius' in raw_orbit:
                orbit = BeltOrbitData(
                    parent=raw_orbit['parent'],
                    inner_radius=float(raw_orbit['inner_radius']),
                    outer_radius=float(raw_orbit['outer_radius']),
                    inclination=float(raw_orbit.get('inclination', 0.0)),
                    eccentricity=float(raw_orbit.get('eccentricity', 0.0)),
                )
            else:
                orbit = OrbitData(
                    parent=raw_orbit['parent'],
                    semi_major_axis=float(raw_orbit['semi_major_axis']),
                    eccentricity=float(raw_orbit.get('eccentricity', 0.0)),
                    inclination=float(raw_orbit.get('inclination', 0.0)),
                    orbital_period=float(raw_orbit.get('orbital_period', 365.25)),
                )

        return cls(
            id=data['id'],
            name=data.get('name', data['id']),
            classification=data.get('classification', 'planet'),
            geometry_type=data.get('geometry_type'),
            properties=properties,
            orbit=orbit,
            position=data.get('position'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the catalog JSON form of this object."""
        out = {
            'id': self.id,
            'name': self.name,
            'classification': self.classification.value,
            'geometry_type': self.geometry_type.value,
            'properties': {k: v for k, v in self.properties.__dict__.items() if v is not None},
        }
        if self.orbit is not None:
            out['orbit'] = dict(self.orbit.__dict__)
        if self.position is not None:
            out['position'] = list(self.position)
        return out

    def __repr__(self):
        return (f"CelestialObject(id='{self.id}', "
                f"classification={self.classification.value}, "
                f"parent={self.parent_id})")


@dataclass(frozen=True)
class Lighting:
    """Scene lighting hints carried with a system."""
    primary_star: Optional[str] = None
    secondary_star: Optional[str] = None
    ambient_level: float = 0.1
    stellar_influence_radius: Optional[float] = None

    def __post_init__(self):
        if not 0 <= self.ambient_level <= 1:
            raise ValueError(f"Ambient level must be in [0, 1], got {self.ambient_level}")


_DATAFRAME_COLUMNS = [
    'id', 'name', 'classification', 'geometry_type',
    'mass', 'radius', 'temperature', 'luminosity', 'spectral_type',
    'parent', 'semi_major_axis', 'eccentricity', 'inclination',
    'orbital_period', 'inner_radius', 'outer_radius',
]


def _value(row, key):
    """Row value with NaN/None mapped to None."""
    if key not in row:
        return None
    v = row[key]
    if v is None or (isinstance(v, float) and math.isnan(v)):
        return None
    return v


class SystemData:
    """
    A loaded star system: identity, metadata, and its authoritative object list.

    Parameters
    ----------
    id : str
        System identity; the object reference registry is scoped to it
    name : str
    objects : iterable of CelestialObject
    description : str, optional
    lighting : Lighting, optional

    Notes
    -----
    The object tuple is the single source of truth for which objects exist.
    Scene graphs are never walked to discover objects.
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, id: str, name: str, objects: Iterable[CelestialObject],
                 description: str = "", lighting: Optional[Lighting] = None):
        if not id:
            raise ValueError("System id must be a non-empty string")
        self._id = id
        self._name = name
        self._description = description
        self._objects = tuple(objects)
        self._lighting = lighting if lighting is not None else Lighting()
        self._index = {}
        for obj in self._objects:
            if obj.id in self._index:
                validation_error(f"Duplicate object id '{obj.id}' in system '{id}'")
                continue
            self._index[obj.id] = obj

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SystemData':
        """Build a system from its catalog JSON form."""
        lighting = Lighting(**(data.get('lighting') or {}))
        objects = [CelestialObject.from_dict(o) for o in data.get('objects', [])]
        return cls(
            id=data['id'],
            name=data.get('name', data['id']),
            objects=objects,
            description=data.get('description', ""),
            lighting=lighting,
        )

    @classmethod
    def from_json(cls, text_or_path) -> 'SystemData':
        """Build a system from a JSON string or a path to a JSON file."""
        text = str(text_or_path)
        if text.lstrip().startswith('{'):
            return cls.from_dict(json.loads(text))
        with open(text_or_path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, id: str, name: Optional[str] = None,
                       **kwargs) -> 'SystemData':
        """
        Build a system from a flat table with one row per object.

        Parameters
        ----------
        df : pd.DataFrame
            Columns as produced by :meth:`to_dataframe`. Missing optional
            columns and NaN cells are treated as absent.
        id : str
            System id
        name : str, optional
            System name, defaults to the id
        """
        if 'id' not in df.columns or 'classification' not in df.columns:
            raise ValueError("DataFrame must have 'id' and 'classification' columns")

        objects = []
        for _, row in df.iterrows():
            entry = {
                'id': row['id'],
                'name': _value(row, 'name') or row['id'],
                'classification': row['classification'],
                'geometry_type': _value(row, 'geometry_type'),
                'properties': {
                    k: _value(row, k)
                    for k in ('mass', 'radius', 'temperature', 'luminosity', 'spectral_type')
                    if _value(row, k) is not None
                },
            }
            parent = _value(row, 'parent')
            if parent is not None:
                if _value(row, 'inner_radius') is not None:
                    keys = ('inner_radius', 'outer_radius', 'inclination', 'eccentricity')
                else:
                    keys = ('semi_major_axis', 'eccentricity', 'inclination', 'orbital_period')
                entry['orbit'] = {'parent': parent}
                entry['orbit'].update({k: _value(row, k) for k in keys if _value(row, k) is not None})
            objects.append(CelestialObject.from_dict(entry))
        return cls(id=id, name=name or id, objects=objects, **kwargs)

    def with_objects(self, objects: Optional[Iterable[CelestialObject]] = None) -> 'SystemData':
        """Return a new SystemData with the same id, optionally new objects."""
        return SystemData(
            id=self._id,
            name=self._name,
            objects=self._objects if objects is None else objects,
            description=self._description,
            lighting=self._lighting,
        )

    # ========== PROPERTY ACCESS ==========

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def objects(self) -> Tuple[CelestialObject, ...]:
        """Authoritative object list"""
        return self._objects

    @property
    def lighting(self) -> Lighting:
        return self._lighting

    def get(self, object_id: str) -> Optional[CelestialObject]:
        """Look up an object by id, None if absent."""
        return self._index.get(object_id)

    # ========== CONVERSION ==========

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self._id,
            'name': self._name,
            'description': self._description,
            'objects': [o.to_dict() for o in self._objects],
            'lighting': dict(self._lighting.__dict__),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """
        Flatten the object list into a DataFrame, one row per object.

        Returns
        -------
        pd.DataFrame
            Columns: id, name, classification, geometry_type, mass, radius,
            temperature, luminosity, spectral_type, parent, semi_major_axis,
            eccentricity, inclination, orbital_period, inner_radius,
            outer_radius. Fields an object does not have are NaN.
        """
        rows = []
        for obj in self._objects:
            p = obj.properties
            row = {
                'id': obj.id,
                'name': obj.name,
                'classification': obj.classification.value,
                'geometry_type': obj.geometry_type.value,
                'mass': p.mass,
                'radius': p.radius,
                'temperature': np.nan if p.temperature is None else p.temperature,
                'luminosity': np.nan if p.luminosity is None else p.luminosity,
                'spectral_type': p.spectral_type,
                'parent': obj.parent_id,
            }
            if obj.orbit is not None:
                row.update(obj.orbit.__dict__)
            rows.append(row)
        return pd.DataFrame(rows, columns=_DATAFRAME_COLUMNS)

    # ========== SPECIAL METHODS ==========

    def __len__(self):
        return len(self._objects)

    def __iter__(self):
        return iter(self._objects)

    def __contains__(self, object_id):
        return object_id in self._index

    def __repr__(self):
        return f"SystemData(id='{self._id}', name='{self._name}', objects={len(self._objects)})"


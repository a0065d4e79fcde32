"""
View-Mode Registry
==================

Immutable configuration records describing how a view mode maps real
astronomical data to visual sizes, orbit distances, and camera behavior,
plus a registry that looks them up by id.

Consumers only ever look a mode up by its id, so adding a mode is a single
``register`` call:

>>> from orrery.view_modes import view_modes, REALISTIC
>>> from dataclasses import replace
>>> view_modes.register(replace(REALISTIC, id='cinematic', name='Cinematic'))
>>> 'cinematic' in view_modes
True
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Iterator
from .utils import validation_error

_EASINGS = ('linear', 'easeOut', 'easeInOut', 'leap')


@dataclass(frozen=True)
class ObjectScaling:
    """Visual size multipliers by coarse object type."""
    star: float = 1.0
    planet: float = 1.0
    moon: float = 1.0
    gas_giant: float = 1.0
    asteroid: float = 1.0
    default: float = 1.0

    def __post_init__(self):
        for name in self.__dataclass_fields__:
            if getattr(self, name) <= 0:
                raise ValueError(f"Object scaling '{name}' must be positive, got {getattr(self, name)}")

    def for_type(self, object_type: str) -> float:
        """Multiplier for an object type key ('gasGiant' and 'gas_giant' both work)."""
        key = 'gas_giant' if object_type in ('gasGiant', 'gas_giant') else object_type
        if key not in self.__dataclass_fields__:
            key = 'default'
        return getattr(self, key)


@dataclass(frozen=True)
class SizeRule:
    """
    Sub-linear compression of real radii into visual radii.

    ``visual = clamp(radius_km ** exponent * scale * multiplier,
    min_visual_size, max_visual_size)``
    """
    exponent: float
    scale: float
    min_visual_size: float
    max_visual_size: float

    def __post_init__(self):
        if not 0 < self.exponent <= 1:
            raise ValueError(f"Size exponent must be in (0, 1], got {self.exponent}")
        if self.scale <= 0:
            raise ValueError(f"Size scale must be positive, got {self.scale}")
        if not 0 < self.min_visual_size < self.max_visual_size:
            raise ValueError(
                f"Visual size bounds must satisfy 0 < min < max, got "
                f"({self.min_visual_size}, {self.max_visual_size})"
            )


@dataclass(frozen=True)
class OrbitScalingRule:
    """
    How orbit distances are placed around each parent.

    Attributes
    ----------
    kind : str
        'proportional' (semi-major axis times system_scale) or
        'equidistant' (Nth sibling at N times fixed_spacing)
    system_scale : float
        Scene units per AU for proportional placement
    fixed_spacing : float
        Rank spacing for children of roots in equidistant placement
    moon_spacing : float
        Rank spacing for children of non-root objects in equidistant placement
    min_distance : float
        Minimum surface-to-surface gap between neighbours
    safety_multiplier : float
        Innermost orbit is at least parent visual radius times this
    belt_width : float
        Width of a belt in equidistant placement
    belt_clearance : float
        Gap between a belt's outer edge and the next sibling in equidistant
        placement
    match_reference_extent : bool
        Rescale top-level distances so the system extent equals the extent
        the reference mode produces
    reference_mode : str
        Mode whose extent is matched
    """
    kind: str = 'proportional'
    system_scale: float = 1.0
    fixed_spacing: float = 4.0
    moon_spacing: float = 0.5
    min_distance: float = 0.02
    safety_multiplier: float = 1.2
    belt_width: float = 2.0
    belt_clearance: float = 1.0
    match_reference_extent: bool = False
    reference_mode: str = 'realistic'

    def __post_init__(self):
        if self.kind not in ('proportional', 'equidistant'):
            raise ValueError(
                f"Invalid orbit scaling kind '{self.kind}'. "
                f"Must be one of: ['proportional', 'equidistant']"
            )
        for name in ('system_scale', 'fixed_spacing', 'moon_spacing', 'belt_width'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ('min_distance', 'belt_clearance'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.safety_multiplier < 1:
            raise ValueError(f"safety_multiplier must be at least 1, got {self.safety_multiplier}")


@dataclass(frozen=True)
class OrbitStyle:
    """
    Shape and motion of animated orbits.

    ``linear`` lays every child out along the +x axis of its parent at its
    orbit distance, with all other axes zeroed.
    """
    eccentric: bool = True
    inclined: bool = True
    animated: bool = True
    linear: bool = False


@dataclass(frozen=True)
class ViewingAngles:
    """Camera elevations in degrees above the orbital plane."""
    default_elevation: float = 30.0
    birds_eye_elevation: float = 40.0

    def __post_init__(self):
        for name in self.__dataclass_fields__:
            if not -90 <= getattr(self, name) <= 90:
                raise ValueError(f"{name} must be within [-90, 90] degrees, got {getattr(self, name)}")


@dataclass(frozen=True)
class AnimationConfig:
    """Camera transition durations [s] and easing curve name."""
    focus_duration: float = 0.8
    birds_eye_duration: float = 1.2
    easing: str = 'easeOut'

    def __post_init__(self):
        if self.focus_duration < 0 or self.birds_eye_duration < 0:
            raise ValueError("Animation durations must be non-negative")
        if self.easing not in _EASINGS:
            raise ValueError(f"Invalid easing '{self.easing}'. Must be one of: {list(_EASINGS)}")


@dataclass(frozen=True)
class CameraConfig:
    """Focus distance rules and camera defaults for a view mode."""
    radius_multiplier: float = 4.0
    min_distance_multiplier: float = 2.5
    max_distance_multiplier: float = 15.0
    absolute_min_distance: float = 0.05
    absolute_max_distance: float = 100.0
    viewing_angles: ViewingAngles = field(default_factory=ViewingAngles)
    animation: AnimationConfig = field(default_factory=AnimationConfig)

    def __post_init__(self):
        if self.radius_multiplier <= 0:
            raise ValueError(f"radius_multiplier must be positive, got {self.radius_multiplier}")
        if not 0 < self.min_distance_multiplier <= self.max_distance_multiplier:
            raise ValueError("Distance multipliers must satisfy 0 < min <= max")
        if not 0 < self.absolute_min_distance <= self.absolute_max_distance:
            raise ValueError("Absolute distances must satisfy 0 < min <= max")


@dataclass(frozen=True)
class ViewModeConfig:
    """
    Complete configuration of one view mode.

    Attributes
    ----------
    id : str
        Registry key (lower case)
    name : str
        Display name
    object_scaling : ObjectScaling
    size_rule : SizeRule
    orbit_scaling : OrbitScalingRule
    orbit_style : OrbitStyle
    camera : CameraConfig
    description : str
    """
    id: str
    name: str
    object_scaling: ObjectScaling
    size_rule: SizeRule
    orbit_scaling: OrbitScalingRule
    orbit_style: OrbitStyle
    camera: CameraConfig
    description: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("View mode id must be a non-empty string")
        object.__setattr__(self, 'id', self.id.strip().lower())


@dataclass(frozen=True)
class ViewDistances:
    """Camera distance bounds for viewing one object."""
    optimal: float
    minimum: float
    maximum: float


def camera_distances(visual_radius: float, camera: CameraConfig) -> ViewDistances:
    """
    Viewing distances for an object of a given visual radius.

    The optimal distance is ``visual_radius * radius_multiplier`` clamped into
    ``[max(r * min_mult, abs_min), min(r * max_mult, abs_max)]``.
    """
    minimum = max(visual_radius * camera.min_distance_multiplier, camera.absolute_min_distance)
    maximum = min(visual_radius * camera.max_distance_multiplier, camera.absolute_max_distance)
    maximum = max(maximum, minimum)
    optimal = visual_radius * camera.radius_multiplier
    optimal = min(max(optimal, minimum), maximum)
    return ViewDistances(optimal=optimal, minimum=minimum, maximum=maximum)


class ViewModeRegistry:
    """
    Mapping from view mode id to its ViewModeConfig.

    Ids are case-insensitive. The registry is populated at import time and
    only read afterwards; registering a new mode is the only step needed to
    make it available to the layout calculator and the camera.
    """

    def __init__(self):
        self._modes: Dict[str, ViewModeConfig] = {}

    @staticmethod
    def _key(mode_id: str) -> str:
        return str(mode_id).strip().lower()

    def register(self, mode: ViewModeConfig, replace: bool = False) -> None:
        """
        Add a mode to the registry.

        Raises
        ------
        TypeError
            If ``mode`` is not a ViewModeConfig
        ValueError
            If the id is already registered and ``replace`` is False
        """
        if not isinstance(mode, ViewModeConfig):
            raise TypeError(f"Expected ViewModeConfig, got {type(mode).__name__}")
        if mode.size_rule.min_visual_size > mode.camera.absolute_max_distance:
            validation_error(
                f"View mode '{mode.id}': minimum visual size exceeds the "
                f"camera's absolute maximum distance"
            )
        if mode.id in self._modes and not replace:
            raise ValueError(f"View mode '{mode.id}' is already registered")
        self._modes[mode.id] = mode

    def unregister(self, mode_id: str) -> None:
        del self._modes[self._key(mode_id)]

    def get(self, mode_id: str) -> Optional[ViewModeConfig]:
        return self._modes.get(self._key(mode_id))

    def require(self, mode_id: str) -> ViewModeConfig:
        """Like ``get`` but raises ValueError listing the known modes."""
        mode = self.get(mode_id)
        if mode is None:
            raise ValueError(
                f"Unknown view mode '{mode_id}'. "
                f"Must be one of: {list(self._modes.keys())}"
            )
        return mode

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._modes)

    def __contains__(self, mode_id) -> bool:
        return self._key(mode_id) in self._modes

    def __iter__(self) -> Iterator[ViewModeConfig]:
        return iter(self._modes.values())

    def __len__(self) -> int:
        return len(self._modes)

    def __repr__(self):
        return f"ViewModeRegistry(modes={list(self._modes.keys())})"


"""
Built-in view modes.
Realistic mode places bodies at their real semi-major axes (1 scene unit per
AU). Navigational and profile modes space siblings evenly and are rescaled to
the realistic extent so switching modes does not change the apparent size of
the system.
"""

REALISTIC = ViewModeConfig(
    id='realistic',
    name='Realistic',
    description='Real orbital proportions with compressed body sizes',
    object_scaling=ObjectScaling(),
    size_rule=SizeRule(exponent=0.3, scale=0.005,
                       min_visual_size=0.01, max_visual_size=0.8),
    orbit_scaling=OrbitScalingRule(
        kind='proportional',
        system_scale=1.0,
        moon_spacing=0.05,
        min_distance=0.02,
        safety_multiplier=1.2,
    ),
    orbit_style=OrbitStyle(eccentric=True, inclined=True, animated=True),
    camera=CameraConfig(
        radius_multiplier=4.0,
        min_distance_multiplier=2.5,
        max_distance_multiplier=15.0,
        absolute_min_distance=0.05,
        absolute_max_distance=100.0,
        viewing_angles=ViewingAngles(default_elevation=30.0, birds_eye_elevation=40.0),
        animation=AnimationConfig(focus_duration=0.8, birds_eye_duration=1.2, easing='leap'),
    ),
)

NAVIGATIONAL = ViewModeConfig(
    id='navigational',
    name='Navigational',
    description='Evenly spaced circular orbits for route planning',
    object_scaling=ObjectScaling(star=1.8, planet=1.5, moon=1.0,
                                 gas_giant=1.8, asteroid=0.6, default=1.0),
    size_rule=SizeRule(exponent=0.35, scale=0.01,
                       min_visual_size=0.05, max_visual_size=3.0),
    orbit_scaling=OrbitScalingRule(
        kind='equidistant',
        fixed_spacing=4.0,
        moon_spacing=0.6,
        min_distance=0.2,
        safety_multiplier=1.5,
        belt_width=2.0,
        belt_clearance=1.0,
        match_reference_extent=True,
    ),
    orbit_style=OrbitStyle(eccentric=False, inclined=False, animated=True),
    camera=CameraConfig(
        radius_multiplier=3.5,
        min_distance_multiplier=2.0,
        max_distance_multiplier=12.0,
        absolute_min_distance=0.2,
        absolute_max_distance=80.0,
        viewing_angles=ViewingAngles(default_elevation=35.0, birds_eye_elevation=45.0),
        animation=AnimationConfig(focus_duration=0.6, birds_eye_duration=1.0, easing='easeOut'),
    ),
)

PROFILE = ViewModeConfig(
    id='profile',
    name='Profile',
    description='Bodies laid out on a line for side-by-side comparison',
    object_scaling=ObjectScaling(star=1.5, planet=1.0, moon=0.8,
                                 gas_giant=1.2, asteroid=0.5, default=1.0),
    size_rule=SizeRule(exponent=0.35, scale=0.01,
                       min_visual_size=0.05, max_visual_size=2.0),
    orbit_scaling=OrbitScalingRule(
        kind='equidistant',
        fixed_spacing=4.0,
        moon_spacing=0.5,
        min_distance=0.2,
        safety_multiplier=1.5,
        belt_width=1.0,
        belt_clearance=1.0,
        match_reference_extent=True,
    ),
    orbit_style=OrbitStyle(eccentric=False, inclined=False, animated=False, linear=True),
    camera=CameraConfig(
        radius_multiplier=2.5,
        min_distance_multiplier=1.8,
        max_distance_multiplier=8.0,
        absolute_min_distance=0.15,
        absolute_max_distance=60.0,
        viewing_angles=ViewingAngles(default_elevation=22.5, birds_eye_elevation=22.5),
        animation=AnimationConfig(focus_duration=0.4, birds_eye_duration=0.6, easing='easeInOut'),
    ),
)

# Global registry instance
view_modes = ViewModeRegistry()
for _mode in (REALISTIC, NAVIGATIONAL, PROFILE):
    view_modes.register(_mode)
del _mode

"""
Orbital Animator
================

Kinematic, per-frame orbit positions. Nothing here integrates forces: each
body moves along its parametric ellipse at a rate set by its period, in a
container node that follows the parent's live world position.

Within a frame the containers are updated strictly parents-first, so a moon's
group is placed at its planet's position for this frame, not the last one.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Union
import numpy as np
from .celestial import SystemData, OrbitData
from .config import config
from .hierarchy import SystemHierarchy
from .layout import LayoutResult
from .registry import ObjectReferenceRegistry
from .scene import SceneNode, NodeKind
from .view_modes import OrbitStyle, ViewModeConfig, view_modes

TWO_PI = 2.0 * math.pi


def solve_kepler(mean_anomaly: float, eccentricity: float) -> float:
    """
    Solve Kepler's equation ``M = E - e sin E`` for the eccentric anomaly.

    Newton iteration to config.KEPLER_TOLERANCE, capped at
    config.KEPLER_MAX_ITER steps. Nearly circular orbits return ``M``.
    """
    if eccentricity < config.KEPLER_MIN_ECCENTRICITY:
        return mean_anomaly
    E = mean_anomaly if eccentricity < 0.8 else math.pi
    for _ in range(config.KEPLER_MAX_ITER):
        delta = (E - eccentricity * math.sin(E) - mean_anomaly) / (1.0 - eccentricity * math.cos(E))
        E -= delta
        if abs(delta) < config.KEPLER_TOLERANCE:
            break
    return E


def true_anomaly(eccentric_anomaly: float, eccentricity: float) -> float:
    half = 0.5 * eccentric_anomaly
    return 2.0 * math.atan2(math.sqrt(1.0 + eccentricity) * math.sin(half),
                            math.sqrt(1.0 - eccentricity) * math.cos(half))


def orbital_offset(angle: float, semi_major_axis: float, eccentricity: float = 0.0,
                   inclination: float = 0.0, style: Optional[OrbitStyle] = None) -> np.ndarray:
    """
    Position on an orbit relative to its parent.

    Parameters
    ----------
    angle : float
        Orbit phase [rad]; the mean anomaly for eccentric orbits
    semi_major_axis : float
        Visual semi-major axis [scene units]
    eccentricity : float, optional
    inclination : float, optional
        Inclination [deg]
    style : OrbitStyle, optional
        Flat circles when the style is not eccentric/inclined; a fixed point
        on +x when it is linear

    Returns
    -------
    np.ndarray
        Offset (x, y, z) with y up

    Notes
    -----
    ``r = a(1 - e^2) / (1 + e cos(theta))``, ``x = r cos(theta)``,
    ``y_flat = r sin(theta)``, ``z = y_flat cos(i)``, ``y = y_flat sin(i)``.
    """
    style = style if style is not None else OrbitStyle()
    if style.linear:
        return np.array([semi_major_axis, 0.0, 0.0])
    e = eccentricity if style.eccentric else 0.0
    incl = math.radians(inclination) if style.inclined else 0.0

    theta = angle
    if e >= config.KEPLER_MIN_ECCENTRICITY:
        theta = true_anomaly(solve_kepler(angle % TWO_PI, e), e)
    r = semi_major_axis * (1.0 - e * e) / (1.0 + e * math.cos(theta))
    x = r * math.cos(theta)
    y_flat = r * math.sin(theta)
    return np.array([x, y_flat * math.sin(incl), y_flat * math.cos(incl)])


def angular_rate(orbital_period: float) -> float:
    """Phase advance per unit of simulated time [rad]."""
    return config.ORBIT_SPEED_FACTOR * TWO_PI / max(1.0, orbital_period)


@dataclass
class _Track:
    object_id: str
    parent_id: Optional[str]
    container: SceneNode
    body: SceneNode
    initial_phase: float
    phase: float
    eccentricity: float = 0.0
    inclination: float = 0.0
    period: float = 365.25
    is_belt: bool = False
    distance: Optional[float] = None


class OrbitalAnimator:
    """
    Drives the container and body nodes of every object in a system.

    Parameters
    ----------
    registry : ObjectReferenceRegistry
        Receives each body node on attach; parents' live positions are read
        back from it every frame
    seed : int, optional
        Seed of the initial phase generator. Without it phases differ between
        sessions; within one animator they are drawn once and kept.
    time_multiplier : float, optional
        Simulation speed (default: 1.0)

    Examples
    --------
    >>> animator = OrbitalAnimator(registry, seed=7)
    >>> root = animator.attach(system)
    >>> animator.apply_layout(layout, 'realistic')
    >>> animator.tick(1 / 60)
    True
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, registry: ObjectReferenceRegistry, seed: Optional[int] = None,
                 time_multiplier: float = 1.0):
        self._registry = registry
        self._rng = np.random.default_rng(seed)
        self._tracks: Dict[str, _Track] = {}
        self._order: List[str] = []
        self._root: Optional[SceneNode] = None
        self._system_id: Optional[str] = None
        self._mode: Optional[ViewModeConfig] = None
        self._layout: Mapping[str, LayoutResult] = {}
        self._paused = False
        self._dirty = True
        self._generation = 0
        self._time = 0.0
        self.time_multiplier = time_multiplier

    def attach(self, system: SystemData, root: Optional[SceneNode] = None) -> SceneNode:
        """
        Create container and body nodes for a system and register the bodies.

        Attaching a system with the same id as the attached one updates it in
        place: objects that are still present keep their nodes, phases and
        orbit distances, new objects get fresh tracks and dropped ones are
        removed. Any other attached system is detached first.

        Returns
        -------
        SceneNode
            The scene root holding every container
        """
        same_system = (self._root is not None and self._system_id == system.id
                       and (root is None or root is self._root))
        if not same_system:
            if self._tracks:
                self.detach()
            self._root = root if root is not None else SceneNode(system.id, NodeKind.ROOT)
            self._system_id = system.id

        hierarchy = SystemHierarchy(system.objects)
        order = hierarchy.ordered_top_down()
        kept = set(order)
        for object_id in [oid for oid in self._tracks if oid not in kept]:
            self._remove_track(object_id)

        for object_id in order:
            obj = hierarchy.get(object_id)
            track = self._tracks.get(object_id)
            if track is None:
                container = self._root.add(SceneNode(f"{object_id}-orbit", NodeKind.CONTAINER))
                body = container.add(SceneNode(object_id, NodeKind.CELESTIAL, position=obj.position))
                initial = float(self._rng.uniform(0.0, TWO_PI))
                track = _Track(object_id=object_id, parent_id=obj.parent_id,
                               container=container, body=body,
                               initial_phase=initial, phase=initial)
                result = self._layout.get(object_id)
                if result is not None:
                    track.distance = result.orbit_distance
                self._tracks[object_id] = track
            track.parent_id = obj.parent_id
            if isinstance(obj.orbit, OrbitData):
                track.eccentricity = obj.orbit.eccentricity
                track.inclination = obj.orbit.inclination
                track.period = obj.orbit.orbital_period
            track.is_belt = obj.is_belt
            self._registry.register(object_id, track.body)

        self._order = order
        self._dirty = True
        return self._root

    def _remove_track(self, object_id: str) -> None:
        track = self._tracks.pop(object_id)
        self._registry.unregister(object_id)
        if track.container.parent is not None:
            track.container.parent.remove(track.container)

    def detach(self) -> None:
        """Unregister every body and remove the containers from the scene."""
        for object_id in list(self._tracks):
            self._remove_track(object_id)
        self._order = []
        self._layout = {}
        self._system_id = None

    # ========== PROPERTY ACCESS ==========

    @property
    def root(self) -> Optional[SceneNode]:
        return self._root

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def generation(self) -> int:
        """Number of completed position passes"""
        return self._generation

    @property
    def simulated_time(self) -> float:
        return self._time

    @property
    def mode(self) -> Optional[ViewModeConfig]:
        return self._mode

    @property
    def time_multiplier(self) -> float:
        return self._time_multiplier

    @time_multiplier.setter
    def time_multiplier(self, value: float):
        if value < 0:
            raise ValueError(f"Time multiplier must be non-negative, got {value}")
        self._time_multiplier = float(value)

    def phase(self, object_id: str) -> float:
        """Current orbit phase [rad]; raises KeyError for unknown ids."""
        return self._tracks[object_id].phase

    def initial_phase(self, object_id: str) -> float:
        return self._tracks[object_id].initial_phase

    def positions(self) -> Dict[str, np.ndarray]:
        """World position of every attached body."""
        return {oid: t.body.world_position() for oid, t in self._tracks.items()}

    # ========== CONTROL ==========

    def apply_layout(self, layout: Mapping[str, LayoutResult],
                     view_mode: Union[str, ViewModeConfig]) -> None:
        """
        Switch to a new layout; positions are recomputed on the next tick.

        Binary partners are set half an orbit apart.
        """
        mode = view_modes.require(view_mode) if isinstance(view_mode, str) else view_mode
        self._layout = layout
        self._mode = mode
        for object_id, track in self._tracks.items():
            result = layout.get(object_id)
            track.distance = None if result is None else result.orbit_distance
            if result is not None and result.binary_index is not None:
                track.phase = result.binary_index * math.pi
        self.invalidate()

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def invalidate(self) -> None:
        """Force one full recompute on the next tick, even while paused."""
        self._dirty = True

    # ========== FRAME UPDATE ==========

    def tick(self, dt: float) -> bool:
        """
        Advance orbits by ``dt`` of real time and reposition every node.

        Parameters
        ----------
        dt : float
            Frame time step; scaled by the time multiplier

        Returns
        -------
        bool
            True if a position pass ran. Paused or static modes only run a
            pass after ``invalidate``/``apply_layout``.
        """
        if self._mode is None or not self._tracks:
            return False
        advance = not self._paused and self._mode.orbit_style.animated
        if not advance and not self._dirty:
            return False

        step = dt * self._time_multiplier if advance else 0.0
        self._time += step
        origin = self._root.world_position()
        style = self._mode.orbit_style

        for object_id in self._order:
            track = self._tracks[object_id]
            if track.parent_id is None:
                continue
            parent = self._registry.get(track.parent_id)
            if parent is None:
                continue
            target = parent.world_position() - origin
            delta = target - track.container.position
            if self._dirty or np.linalg.norm(delta) > config.CONTAINER_EPSILON:
                track.container.position = target

            if track.is_belt or track.distance is None:
                track.body.position = np.zeros(3)
                continue
            if step:
                track.phase = (track.phase + step * angular_rate(track.period)) % TWO_PI
            track.body.position = orbital_offset(track.phase, track.distance,
                                                 track.eccentricity, track.inclination, style)

        self._dirty = False
        self._generation += 1
        return True

    def __repr__(self):
        mode = None if self._mode is None else self._mode.id
        return (f"OrbitalAnimator(objects={len(self._tracks)}, mode={mode}, "
                f"paused={self._paused}, time_multiplier={self._time_multiplier})")

"""
Orbital Mechanics Calculator
============================

Turns a system's real astronomical data into view-mode specific visual
sizes and orbit distances.

Placement works one parent at a time, deepest parents first, so that when a
planet is spaced among its siblings the extent of its own moon system is
already known. Every sibling is kept clear of the previous one by the mode's
minimum gap, which keeps radial order strictly increasing with semi-major
axis in every mode.

Examples
--------
>>> from orrery import OrbitalMechanicsCalculator, sol_system
>>> calc = OrbitalMechanicsCalculator()
>>> layout = calc.compute_layout(sol_system().objects, 'navigational')
>>> layout['jupiter'].orbit_distance > layout['earth'].orbit_distance
True
"""

import warnings
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import numpy as np
import pandas as pd
from .celestial import CelestialObject, Classification, OrbitData
from .config import config
from .errors import OrreryWarning
from .hierarchy import SystemHierarchy
from .view_modes import ViewModeConfig, ViewModeRegistry, view_modes

_STAR_LIKE = (Classification.STAR, Classification.COMPACT_OBJECT, Classification.BLACK_HOLE)
_SIZE_EXEMPT = (Classification.BELT, Classification.RING, Classification.BARYCENTER)

DAYS_PER_YEAR = 365.0


@dataclass(frozen=True)
class BeltLayout:
    """Visual radial bounds of a belt or ring, measured from its parent."""
    inner_radius: float
    outer_radius: float

    def __post_init__(self):
        if self.outer_radius < self.inner_radius:
            raise ValueError(
                f"Belt outer radius ({self.outer_radius}) is inside "
                f"inner radius ({self.inner_radius})"
            )

    @property
    def width(self) -> float:
        return self.outer_radius - self.inner_radius

    @property
    def center(self) -> float:
        return 0.5 * (self.inner_radius + self.outer_radius)


@dataclass(frozen=True)
class LayoutResult:
    """
    Derived, view-mode specific placement of one object.

    Attributes
    ----------
    visual_radius : float
        Rendered radius [scene units]
    orbit_distance : float or None
        Distance from the parent [scene units]; None for roots. For belts this
        is the belt's center line.
    belt : BeltLayout or None
        Radial bounds for belts and rings
    animation_speed : float
        Orbits per year, 365 / orbital_period; 0 for roots and belts
    binary_index : int or None
        0 or 1 for the two stars of a binary pair sharing a barycenter
    """
    visual_radius: float
    orbit_distance: Optional[float] = None
    belt: Optional[BeltLayout] = None
    animation_speed: float = 0.0
    binary_index: Optional[int] = None


@dataclass
class _Placement:
    radii: Dict[str, float] = field(default_factory=dict)
    extents: Dict[str, float] = field(default_factory=dict)
    distances: Dict[str, float] = field(default_factory=dict)
    belts: Dict[str, BeltLayout] = field(default_factory=dict)
    binary: Dict[str, int] = field(default_factory=dict)


def visual_radius(obj: CelestialObject, mode: ViewModeConfig) -> float:
    """
    Visual radius of an object before parent/child size correction.

    ``radius_km ** k * scale * object_scaling[type]`` clamped into the mode's
    visual size bounds. Barycenters have no size; belts and bodies with no
    radius get the minimum size.
    """
    if obj.classification is Classification.BARYCENTER:
        return 0.0
    rule = mode.size_rule
    radius = obj.properties.radius
    if obj.is_belt or obj.classification in (Classification.BELT, Classification.RING) or radius <= 0:
        return rule.min_visual_size
    size = radius ** rule.exponent * rule.scale * mode.object_scaling.for_type(obj.object_type)
    return float(min(max(size, rule.min_visual_size), rule.max_visual_size))


def max_orbit_radius(layout: Mapping[str, LayoutResult]) -> Optional[float]:
    """Largest orbit distance or belt outer radius in a layout, None if there are none."""
    radii = []
    for result in layout.values():
        if result.belt is not None:
            radii.append(result.belt.outer_radius)
        elif result.orbit_distance is not None:
            radii.append(result.orbit_distance)
    return max(radii) if radii else None


def layout_to_dataframe(layout: Mapping[str, LayoutResult]) -> pd.DataFrame:
    """
    Tabulate a layout, one row per object id.

    Returns
    -------
    pd.DataFrame
        Indexed by id with columns visual_radius, orbit_distance, belt_inner,
        belt_outer, animation_speed, binary_index (NaN where not applicable)
    """
    rows = []
    for object_id, r in layout.items():
        rows.append({
            'id': object_id,
            'visual_radius': r.visual_radius,
            'orbit_distance': np.nan if r.orbit_distance is None else r.orbit_distance,
            'belt_inner': np.nan if r.belt is None else r.belt.inner_radius,
            'belt_outer': np.nan if r.belt is None else r.belt.outer_radius,
            'animation_speed': r.animation_speed,
            'binary_index': np.nan if r.binary_index is None else r.binary_index,
        })
    df = pd.DataFrame(rows, columns=['id', 'visual_radius', 'orbit_distance', 'belt_inner',
                                     'belt_outer', 'animation_speed', 'binary_index'])
    return df.set_index('id')


class OrbitalMechanicsCalculator:
    """
    Layout engine mapping (objects, view mode) to per-object LayoutResults.

    Parameters
    ----------
    registry : ViewModeRegistry, optional
        Where view modes are looked up (default: the package registry)

    Notes
    -----
    The last result is memoised under the identity of each input object and
    the view mode configs it used. A different or re-registered mode, or a
    different object list (by identity, not equality) recomputes;
    ``clear_cache`` forces a recompute. Inputs are never modified.
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, registry: Optional[ViewModeRegistry] = None):
        self._registry = registry if registry is not None else view_modes
        self._cache_key = None
        self._cache_objects: Tuple[CelestialObject, ...] = ()
        self._cache_configs: Tuple[Optional[ViewModeConfig], ...] = ()
        self._cache_value: Optional[Mapping[str, LayoutResult]] = None
        self._compute_count = 0

    # ========== PROPERTY ACCESS ==========

    @property
    def registry(self) -> ViewModeRegistry:
        return self._registry

    @property
    def compute_count(self) -> int:
        """Number of layouts computed without a cache hit"""
        return self._compute_count

    @property
    def cached_mode(self) -> Optional[str]:
        return None if self._cache_key is None else self._cache_key[1]

    # ========== PUBLIC API ==========

    def compute_layout(self, objects: Sequence[CelestialObject],
                       view_mode: str) -> Mapping[str, LayoutResult]:
        """
        Compute visual radius and orbit distance for every object.

        Parameters
        ----------
        objects : sequence of CelestialObject
            Authoritative object list of one system
        view_mode : str
            Registered view mode id

        Returns
        -------
        Mapping[str, LayoutResult]
            Read-only mapping keyed by object id. Objects skipped because of
            a malformed hierarchy are absent.

        Raises
        ------
        ValueError
            If the view mode is not registered

        Warns
        -----
        DataWarning
            For dangling parent references and orbit cycles
        """
        mode = self._registry.require(view_mode)
        objects = tuple(objects)
        key = (tuple(id(o) for o in objects), mode.id)
        configs = self._configs_used(mode)
        if key == self._cache_key and all(a is b for a, b in zip(configs, self._cache_configs)):
            return self._cache_value

        hierarchy = SystemHierarchy(objects)
        placement = self._arrange(hierarchy, mode, match_extent=True)
        result = MappingProxyType(self._results(hierarchy, placement))

        self._cache_key = key
        self._cache_objects = objects
        self._cache_configs = configs
        self._cache_value = result
        self._compute_count += 1
        return result

    def clear_cache(self) -> None:
        """Drop the memoised layout."""
        self._cache_key = None
        self._cache_objects = ()
        self._cache_configs = ()
        self._cache_value = None

    def _configs_used(self, mode: ViewModeConfig) -> Tuple[Optional[ViewModeConfig], ...]:
        # compared by identity on lookup
        rule = mode.orbit_scaling
        if not rule.match_reference_extent:
            return (mode, None)
        return (mode, self._registry.get(rule.reference_mode))

    # ========== PLACEMENT ==========

    def _arrange(self, hierarchy: SystemHierarchy, mode: ViewModeConfig,
                 match_extent: bool) -> _Placement:
        p = _Placement()
        for object_id in hierarchy.ordered_top_down():
            p.radii[object_id] = visual_radius(hierarchy.get(object_id), mode)
        self._enforce_size_hierarchy(hierarchy, p, mode)
        p.extents = dict(p.radii)

        for parent_id in hierarchy.parents_deepest_first():
            self._place_group(parent_id, hierarchy, p, mode)

        rule = mode.orbit_scaling
        if match_extent and rule.match_reference_extent:
            self._match_reference_extent(hierarchy, p, mode)
        return p

    @staticmethod
    def _enforce_size_hierarchy(hierarchy: SystemHierarchy, p: _Placement,
                                mode: ViewModeConfig) -> None:
        """Grow parents to PARENT_SIZE_RATIO times their largest child, within the size cap."""
        ratio = config.PARENT_SIZE_RATIO
        cap = mode.size_rule.max_visual_size
        for parent_id in hierarchy.parents_deepest_first():
            if hierarchy.get(parent_id).classification in _SIZE_EXEMPT:
                continue
            for child_id in hierarchy.children(parent_id):
                child = hierarchy.get(child_id)
                if child.is_belt or child.classification in _SIZE_EXEMPT:
                    continue
                needed = p.radii[child_id] * ratio
                if p.radii[parent_id] >= needed:
                    continue
                p.radii[parent_id] = min(needed, cap)
                if p.radii[parent_id] < needed:
                    p.radii[child_id] = p.radii[parent_id] / ratio

    @staticmethod
    def _slots(parent: CelestialObject, children: List[CelestialObject]) -> List[List[CelestialObject]]:
        """
        Children in radial order, grouped into placement slots.

        Belts sort by their mid radius. The two innermost stars orbiting a
        barycenter share one slot so they end up at the same distance.
        """
        def order(obj):
            if obj.is_belt:
                return obj.orbit.mid_radius
            return obj.orbit.semi_major_axis

        ordered = sorted(children, key=order)
        if parent.classification is Classification.BARYCENTER:
            stars = [c for c in ordered if c.classification in _STAR_LIKE and not c.is_belt]
            if len(stars) >= 2:
                pair = stars[:2]
                rest = [[c] for c in ordered if c is not pair[0] and c is not pair[1]]
                return [pair] + rest
        return [[c] for c in ordered]

    def _place_group(self, parent_id: str, hierarchy: SystemHierarchy,
                     p: _Placement, mode: ViewModeConfig) -> None:
        rule = mode.orbit_scaling
        parent = hierarchy.get(parent_id)
        children = [hierarchy.get(c) for c in hierarchy.children(parent_id)]
        top_level = parent.parent_id is None
        spacing = rule.fixed_spacing if top_level else rule.moon_spacing

        edge = p.radii[parent_id] * rule.safety_multiplier
        after_belt = None
        for rank, slot in enumerate(self._slots(parent, children), start=1):
            first = slot[0]
            if first.is_belt:
                belt = self._place_belt(first, edge, rank * spacing, rule)
                p.belts[first.id] = belt
                p.distances[first.id] = belt.center
                edge = belt.outer_radius
                after_belt = belt.outer_radius
                continue

            reach = max(p.extents[o.id] for o in slot)
            required = edge + rule.min_distance + reach
            if rule.kind == 'proportional':
                desired = float(np.mean([o.orbit.semi_major_axis for o in slot])) * rule.system_scale
            else:
                desired = rank * spacing
                if after_belt is not None:
                    desired = min(desired, after_belt + rule.belt_clearance + reach)
            distance = max(desired, required)
            for index, obj in enumerate(slot):
                p.distances[obj.id] = distance
                if len(slot) > 1:
                    p.binary[obj.id] = index
            edge = distance + reach
            after_belt = None

        p.extents[parent_id] = max(p.radii[parent_id], edge)

    @staticmethod
    def _place_belt(obj: CelestialObject, edge: float, slot_center: float, rule) -> BeltLayout:
        floor = edge + rule.min_distance
        if rule.kind == 'proportional':
            inner = max(obj.orbit.inner_radius * rule.system_scale, floor)
            # the outer edge keeps its real position unless the inner edge was pushed past it
            outer = max(obj.orbit.outer_radius * rule.system_scale, inner + rule.min_distance)
        else:
            inner = max(slot_center - 0.5 * rule.belt_width, floor)
            outer = inner + rule.belt_width
        return BeltLayout(inner_radius=inner, outer_radius=outer)

    @staticmethod
    def _top_level_extent(hierarchy: SystemHierarchy, p: _Placement) -> float:
        extent = 0.0
        for root in hierarchy.roots:
            for child_id in hierarchy.children(root):
                if child_id in p.belts:
                    extent = max(extent, p.belts[child_id].outer_radius)
                else:
                    extent = max(extent, p.distances[child_id])
        return extent

    def _match_reference_extent(self, hierarchy: SystemHierarchy, p: _Placement,
                                mode: ViewModeConfig) -> None:
        """Rescale children of roots so the system extent equals the reference mode's."""
        rule = mode.orbit_scaling
        reference = self._registry.get(rule.reference_mode)
        if reference is None:
            warnings.warn(
                f"View mode '{mode.id}' references unknown mode "
                f"'{rule.reference_mode}'; extent left unscaled",
                OrreryWarning, stacklevel=3
            )
            return
        if reference.id == mode.id:
            return

        target = self._top_level_extent(hierarchy, self._arrange(hierarchy, reference, match_extent=False))
        current = self._top_level_extent(hierarchy, p)
        if target <= 0 or current <= 0:
            return
        factor = target / current

        # scaling down can bring wide moon systems together; push outward in order
        for root in hierarchy.roots:
            parent = hierarchy.get(root)
            children = [hierarchy.get(c) for c in hierarchy.children(root)]
            edge = p.radii[root] * rule.safety_multiplier
            for slot in self._slots(parent, children):
                first = slot[0]
                if first.is_belt:
                    belt = p.belts[first.id]
                    inner = belt.inner_radius * factor
                    outer = belt.outer_radius * factor
                    shift = max(0.0, edge + rule.min_distance - inner)
                    belt = BeltLayout(inner_radius=inner + shift, outer_radius=outer + shift)
                    p.belts[first.id] = belt
                    p.distances[first.id] = belt.center
                    edge = belt.outer_radius
                    continue
                reach = max(p.extents[o.id] for o in slot)
                distance = max(p.distances[first.id] * factor, edge + rule.min_distance + reach)
                for obj in slot:
                    p.distances[obj.id] = distance
                edge = distance + reach
            p.extents[root] = max(p.radii[root], edge)

    @staticmethod
    def _results(hierarchy: SystemHierarchy, p: _Placement) -> Dict[str, LayoutResult]:
        results = {}
        for object_id in hierarchy.ordered_top_down():
            obj = hierarchy.get(object_id)
            speed = 0.0
            if isinstance(obj.orbit, OrbitData):
                speed = DAYS_PER_YEAR / obj.orbit.orbital_period
            results[object_id] = LayoutResult(
                visual_radius=p.radii[object_id],
                orbit_distance=p.distances.get(object_id),
                belt=p.belts.get(object_id),
                animation_speed=speed,
                binary_index=p.binary.get(object_id),
            )
        return results

    def __repr__(self):
        return (f"OrbitalMechanicsCalculator(modes={list(self._registry.ids())}, "
                f"cached_mode={self.cached_mode})")


def system_extent(layout: Mapping[str, LayoutResult],
                  objects: Sequence[CelestialObject]) -> float:
    """
    Outermost distance among children of root objects.

    Parameters
    ----------
    layout : Mapping[str, LayoutResult]
    objects : sequence of CelestialObject
        The objects the layout was computed from

    Returns
    -------
    float
        Largest orbit distance (or belt outer radius) of a top-level object,
        0.0 if there are none
    """
    roots = {o.id for o in objects if o.orbit is None}
    extent = 0.0
    for obj in objects:
        if obj.parent_id not in roots or obj.id not in layout:
            continue
        r = layout[obj.id]
        extent = max(extent, r.belt.outer_radius if r.belt is not None else r.orbit_distance)
    return extent

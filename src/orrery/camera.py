"""
Camera Framing & Controller
===========================

Camera placement for focusing on an object, framing the whole system from
above, and framing a focal object with its outermost neighbour in profile
mode, plus the time-based animation engine that moves the camera between
poses.

The controller is a state machine (IDLE, ANIMATING, FOLLOWING) advanced by
an explicit ``tick`` call each frame, with the clock injected so the same
logic runs under a virtual clock in tests.
"""

import math
import time
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple, Union
import numpy as np
from .celestial import Classification
from .config import config
from .errors import MissingReferenceWarning
from .hierarchy import SystemHierarchy
from .layout import LayoutResult, max_orbit_radius
from .registry import ObjectReferenceRegistry
from .scene import SceneNode, NodeKind
from .utils import as_vector
from .view_modes import CameraConfig, ViewModeConfig, camera_distances, view_modes


# ========== EASING ==========

def linear(t: float) -> float:
    return t


def ease_out(t: float) -> float:
    """Cubic ease-out."""
    return 1.0 - (1.0 - t) ** 3


def ease_in_out(t: float) -> float:
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


def leap(t: float) -> float:
    """Quick acceleration over the first 30% of the move, then a long cubic settle."""
    if t < 0.3:
        return t * t * 3.33
    return 0.33 + 0.67 * (1.0 - (1.0 - (t - 0.3) / 0.7) ** 3)


EASINGS: Dict[str, Callable[[float], float]] = {
    'linear': linear,
    'easeOut': ease_out,
    'easeInOut': ease_in_out,
    'leap': leap,
}


def get_easing(name: Optional[str]) -> Callable[[float], float]:
    """Easing function by name; unknown names fall back to easeOut."""
    return EASINGS.get(name, ease_out)


# ========== CONTROLS ==========

class OrbitControls:
    """
    State of the user's orbit controls: the look-at target, whether input is
    accepted, and the saved "home" pose that drag-orbiting is relative to.

    Parameters
    ----------
    camera : SceneNode
        The camera node the controls move
    target : array_like, optional
        Initial look-at point (default: origin)
    """

    def __init__(self, camera: SceneNode, target=None):
        self._camera = camera
        self.target = np.zeros(3) if target is None else as_vector(target, "target").copy()
        self.enabled = True
        self.pending_input = False
        self._home_position = camera.position.copy()
        self._home_target = self.target.copy()

    @property
    def home(self) -> Tuple[np.ndarray, np.ndarray]:
        """Saved (camera position, target)"""
        return self._home_position.copy(), self._home_target.copy()

    def save_state(self) -> None:
        """Make the current camera pose the home pose."""
        self._home_position = self._camera.position.copy()
        self._home_target = self.target.copy()

    def reset(self) -> None:
        """Return the camera to the home pose."""
        self._camera.position = self._home_position
        self.target = self._home_target.copy()

    def notify_user_input(self) -> None:
        """Flag that the user moved the controls since the last frame."""
        self.pending_input = True


# ========== STATE ==========

class CameraState(Enum):
    IDLE = 'idle'
    ANIMATING = 'animating'
    FOLLOWING = 'following'


@dataclass(frozen=True, eq=False)
class CameraAnimationState:
    """
    One in-flight camera transition.

    Attributes
    ----------
    start_time : float
        Clock reading when the transition started [s]
    start_position, start_target, end_position, end_target : np.ndarray
    duration : float
        Seconds
    easing : str
        Easing function name
    follow_id : str, optional
        Object to follow once the transition completes
    follow_origin : np.ndarray, optional
        Followed object's position when the transition was requested
    controls_were_enabled : bool
        Whether the controls were enabled before the first of a chain of
        replaced transitions suspended them
    on_complete : callable, optional
    """
    start_time: float
    start_position: np.ndarray
    start_target: np.ndarray
    end_position: np.ndarray
    end_target: np.ndarray
    duration: float
    easing: str = 'easeOut'
    follow_id: Optional[str] = None
    follow_origin: Optional[np.ndarray] = None
    controls_were_enabled: bool = True
    on_complete: Optional[Callable[[], None]] = None

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return float(np.clip((now - self.start_time) / self.duration, 0.0, 1.0))


@dataclass(frozen=True, eq=False)
class ProfileFrame:
    """Camera framing of a focal object and its frame partner."""
    midpoint: np.ndarray
    span: float
    distance: float
    position: np.ndarray

    @property
    def target(self) -> np.ndarray:
        return self.midpoint


# ========== FRAMING ==========

def focus_distance(visual_radius: float, object_type: str, camera: CameraConfig) -> float:
    """
    Camera distance for focusing on an object.

    ``visual_radius * radius_multiplier * type_factor`` clamped into the
    mode's viewing distance bounds. The type factor is larger for stars than
    for gas giants, and 1 for everything else.
    """
    if object_type == 'star':
        factor = config.STAR_DISTANCE_FACTOR
    elif object_type in ('gasGiant', 'gas_giant'):
        factor = config.GAS_GIANT_DISTANCE_FACTOR
    else:
        factor = 1.0
    bounds = camera_distances(visual_radius, camera)
    distance = visual_radius * camera.radius_multiplier * factor
    return float(min(max(distance, bounds.minimum), bounds.maximum))


def birds_eye_pose(extent: float, mode: ViewModeConfig) -> Tuple[np.ndarray, np.ndarray]:
    """
    Overview pose looking at the system origin.

    Orbital modes sit at the bird's-eye elevation, offset diagonally in x and
    z. Linear (profile) modes look at the line from the side at 1.5 times the
    extent.

    Returns
    -------
    tuple of np.ndarray
        (camera position, target)
    """
    angles = mode.camera.viewing_angles
    if mode.orbit_style.linear:
        elev = math.radians(angles.default_elevation)
        position = np.array([0.0, 1.5 * extent * math.sin(elev), 1.5 * extent * math.cos(elev)])
    else:
        elev = math.radians(angles.birds_eye_elevation)
        horizontal = extent * math.cos(elev)
        position = np.array([horizontal * 0.7, extent * math.sin(elev), horizontal * 0.7])
    return position, np.zeros(3)


def _is_annulus(obj) -> bool:
    return obj is not None and (obj.is_belt or obj.classification in (Classification.BELT,
                                                                      Classification.RING))


def find_frame_partner(focal_id: str, hierarchy: SystemHierarchy,
                       registry: ObjectReferenceRegistry) -> Optional[str]:
    """
    Pick the object framed together with ``focal_id`` in profile mode.

    The farthest child (by live distance from the focal object) if any child
    is mounted, otherwise the sibling farthest from the focal object,
    otherwise the focal object itself. Only celestial nodes are considered;
    belts and rings are skipped since they sit on their parent.

    Returns
    -------
    str or None
        None if the focal object itself has no live node
    """
    focal = registry.get(focal_id)
    if focal is None:
        return None
    focal_pos = focal.world_position()

    for candidates in (hierarchy.children(focal_id), hierarchy.siblings(focal_id)):
        best, best_distance = None, -1.0
        for candidate_id in candidates:
            if _is_annulus(hierarchy.get(candidate_id)):
                continue
            node = registry.get(candidate_id)
            if node is None or node.kind is not NodeKind.CELESTIAL:
                continue
            distance = float(np.linalg.norm(node.world_position() - focal_pos))
            if distance > best_distance:
                best, best_distance = candidate_id, distance
        if best is not None:
            return best
    return focal_id


def compute_profile_frame(focal_position, partner_position, elevation: float) -> ProfileFrame:
    """
    Frame two points from the side.

    Parameters
    ----------
    focal_position, partner_position : array_like
        Live world positions
    elevation : float
        Camera elevation above the layout line [deg]

    Returns
    -------
    ProfileFrame
        ``distance = max(span * PROFILE_SPAN_FACTOR, PROFILE_MIN_DISTANCE)``,
        camera at ``midpoint + distance * (0, sin(elev), cos(elev))``
    """
    focal = as_vector(focal_position, "focal_position")
    partner = as_vector(partner_position, "partner_position")
    midpoint = 0.5 * (focal + partner)
    span = float(np.linalg.norm(partner - focal))
    distance = max(span * config.PROFILE_SPAN_FACTOR, config.PROFILE_MIN_DISTANCE)
    elev = math.radians(elevation)
    position = midpoint + distance * np.array([0.0, math.sin(elev), math.cos(elev)])
    return ProfileFrame(midpoint=midpoint, span=span, distance=distance, position=position)


def _resolve_mode(mode: Union[str, ViewModeConfig]) -> ViewModeConfig:
    return view_modes.require(mode) if isinstance(mode, str) else mode


class CameraController:
    """
    Moves a camera between focus, overview, and profile poses.

    Parameters
    ----------
    camera : SceneNode
        Camera node; only its position is written
    controls : OrbitControls
        User controls bound to the same camera
    registry : ObjectReferenceRegistry
        Source of live object positions
    clock : callable, optional
        Returns the current time in seconds (default: time.monotonic)

    Notes
    -----
    At most one transition is active. A new request tears the current one
    down without applying any of its end pose and inherits its suspended
    controls, so controls are re-enabled once, when the last transition
    completes. ``cancel`` re-enables them immediately.
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, camera: SceneNode, controls: OrbitControls,
                 registry: ObjectReferenceRegistry,
                 clock: Callable[[], float] = time.monotonic):
        self._camera = camera
        self._controls = controls
        self._registry = registry
        self._clock = clock
        self._state = CameraState.IDLE
        self._animation: Optional[CameraAnimationState] = None
        self._following: Optional[str] = None
        self._last_follow_position: Optional[np.ndarray] = None
        self._pending_profile = None
        self._positions_settled = False
        self._follow_count = 0

    # ========== PROPERTY ACCESS ==========

    @property
    def state(self) -> CameraState:
        return self._state

    @property
    def animation(self) -> Optional[CameraAnimationState]:
        return self._animation

    @property
    def following(self) -> Optional[str]:
        """Id of the followed object, None unless FOLLOWING"""
        return self._following

    @property
    def follow_count(self) -> int:
        """Number of follow translations applied so far"""
        return self._follow_count

    @property
    def profile_pending(self) -> bool:
        return self._pending_profile is not None

    @property
    def pose(self) -> Tuple[np.ndarray, np.ndarray]:
        """(camera position, look-at target)"""
        return self._camera.position.copy(), self._controls.target.copy()

    # ========== REQUESTS ==========

    def animate_to(self, position, target, duration: float, easing: str = 'easeOut',
                   follow_id: Optional[str] = None, follow_origin=None,
                   on_complete: Optional[Callable[[], None]] = None,
                   now: Optional[float] = None) -> CameraAnimationState:
        """
        Start a transition to a new pose, replacing any transition in flight.

        Parameters
        ----------
        position, target : array_like
            End pose
        duration : float
            Seconds; 0 completes on the next tick
        easing : str, optional
        follow_id : str, optional
            Object to follow after completion
        follow_origin : array_like, optional
            Reference position for the first follow step
        on_complete : callable, optional
            Called once after the end pose is applied
        now : float, optional
            Start time (default: the controller's clock)
        """
        now = self._clock() if now is None else now
        if self._animation is not None:
            controls_were_enabled = self._animation.controls_were_enabled
            self._animation = None
        else:
            controls_were_enabled = self._controls.enabled
            self._controls.enabled = False

        self._following = None
        self._last_follow_position = None
        self._animation = CameraAnimationState(
            start_time=now,
            start_position=self._camera.position.copy(),
            start_target=self._controls.target.copy(),
            end_position=as_vector(position, "position").copy(),
            end_target=as_vector(target, "target").copy(),
            duration=max(0.0, float(duration)),
            easing=easing,
            follow_id=follow_id,
            follow_origin=None if follow_origin is None else as_vector(follow_origin).copy(),
            controls_were_enabled=controls_were_enabled,
            on_complete=on_complete,
        )
        self._state = CameraState.ANIMATING
        return self._animation

    def focus(self, object_id: str, visual_radius: float, object_type: str = 'default',
              mode: Union[str, ViewModeConfig] = 'realistic',
              on_complete: Optional[Callable[[], None]] = None) -> bool:
        """
        Fly to an object and follow it afterwards.

        The camera keeps its current horizontal bearing around the target
        (falling back to +x) and rises to the mode's default elevation.

        Returns
        -------
        bool
            False if the object has no live node; the request is dropped
        """
        node = self._registry.get(object_id)
        if node is None:
            warnings.warn(f"Cannot focus '{object_id}': no live node registered",
                          MissingReferenceWarning, stacklevel=2)
            return False
        mode = _resolve_mode(mode)
        target = node.world_position()
        distance = focus_distance(visual_radius, object_type, mode.camera)

        offset = self._camera.position - self._controls.target
        bearing = np.array([offset[0], 0.0, offset[2]])
        if np.linalg.norm(bearing) < 0.1:
            bearing = np.array([1.0, 0.0, 0.0])
        else:
            bearing = bearing / np.linalg.norm(bearing)

        elev = math.radians(mode.camera.viewing_angles.default_elevation)
        position = (target + bearing * distance * math.cos(elev)
                    + np.array([0.0, distance * math.sin(elev), 0.0]))
        self.animate_to(position, target, mode.camera.animation.focus_duration,
                        mode.camera.animation.easing, follow_id=object_id,
                        follow_origin=target, on_complete=on_complete)
        return True

    def birds_eye(self, layout: Mapping[str, LayoutResult],
                  mode: Union[str, ViewModeConfig] = 'realistic',
                  on_complete: Optional[Callable[[], None]] = None) -> CameraAnimationState:
        """Frame the whole system; the controller is IDLE afterwards."""
        mode = _resolve_mode(mode)
        extent = max_orbit_radius(layout)
        if extent is None:
            extent = config.DEFAULT_SYSTEM_EXTENT
        position, target = birds_eye_pose(extent, mode)
        return self.animate_to(position, target, mode.camera.animation.birds_eye_duration,
                               mode.camera.animation.easing, on_complete=on_complete)

    def request_profile_frame(self, focal_id: str, hierarchy: SystemHierarchy,
                              mode: Union[str, ViewModeConfig] = 'profile',
                              on_complete: Optional[Callable[[], None]] = None) -> None:
        """
        Queue a profile framing of ``focal_id``.

        Live positions are sampled on the first tick after
        ``notify_positions_settled``, i.e. once the animator has applied the
        current mode's positions. A newer request replaces a queued one.
        """
        self._pending_profile = (focal_id, hierarchy, _resolve_mode(mode), on_complete)
        self._positions_settled = False

    def notify_positions_settled(self) -> None:
        """Signal that this frame's object positions are final."""
        self._positions_settled = True

    def cancel(self) -> None:
        """Drop any transition, queued framing, and follow; re-enable controls."""
        if self._animation is not None:
            self._controls.enabled = self._animation.controls_were_enabled
            self._animation = None
        self._pending_profile = None
        self.stop_following()

    def stop_following(self) -> None:
        self._following = None
        self._last_follow_position = None
        if self._animation is None:
            self._state = CameraState.IDLE

    # ========== FRAME UPDATE ==========

    def tick(self, now: Optional[float] = None) -> CameraState:
        """
        Advance the state machine by one frame.

        Returns
        -------
        CameraState
            State after the update
        """
        now = self._clock() if now is None else now
        if self._pending_profile is not None and self._positions_settled:
            self._start_profile_frame(now)

        if self._animation is not None:
            self._step_animation(now)
        elif self._state is CameraState.FOLLOWING:
            self._step_follow()
        elif self._controls.pending_input:
            self._controls.save_state()
            self._controls.pending_input = False
        return self._state

    def _start_profile_frame(self, now: float) -> None:
        focal_id, hierarchy, mode, on_complete = self._pending_profile
        self._pending_profile = None
        partner_id = find_frame_partner(focal_id, hierarchy, self._registry)
        if partner_id is None:
            warnings.warn(f"Cannot frame '{focal_id}': no live node registered",
                          MissingReferenceWarning, stacklevel=3)
            return
        frame = compute_profile_frame(
            self._registry.get(focal_id).world_position(),
            self._registry.get(partner_id).world_position(),
            mode.camera.viewing_angles.default_elevation,
        )
        self.animate_to(frame.position, frame.target, mode.camera.animation.focus_duration,
                        mode.camera.animation.easing, on_complete=on_complete, now=now)

    def _step_animation(self, now: float) -> None:
        anim = self._animation
        progress = anim.progress(now)
        if progress >= 1.0:
            self._finish(anim)
            return
        eased = get_easing(anim.easing)(progress)
        self._camera.position = anim.start_position + (anim.end_position - anim.start_position) * eased
        self._controls.target = anim.start_target + (anim.end_target - anim.start_target) * eased

    def _finish(self, anim: CameraAnimationState) -> None:
        self._camera.position = anim.end_position
        self._controls.target = anim.end_target.copy()
        self._controls.save_state()
        self._animation = None
        if anim.controls_were_enabled:
            self._controls.enabled = True

        if anim.follow_id is not None:
            self._state = CameraState.FOLLOWING
            self._following = anim.follow_id
            self._last_follow_position = anim.follow_origin
        else:
            self._state = CameraState.IDLE
        if anim.on_complete is not None:
            anim.on_complete()

    def _step_follow(self) -> None:
        node = self._registry.get(self._following)
        if node is None:
            return
        current = node.world_position()
        if self._last_follow_position is None:
            self._last_follow_position = current
            return
        delta = current - self._last_follow_position
        if np.linalg.norm(delta) > config.FOLLOW_EPSILON:
            self._camera.position = self._camera.position + delta
            self._controls.target = self._controls.target + delta
            self._controls.save_state()
            self._last_follow_position = current
            self._follow_count += 1
        elif self._controls.pending_input:
            self._controls.save_state()
        self._controls.pending_input = False

    def __repr__(self):
        return f"CameraController(state={self._state.value}, following={self._following!r})"

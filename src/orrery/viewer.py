"""
System viewer session.

Wires the layout service, object reference registry, animator, and camera
controller together for one active system and fixes the per-frame order:
collect layout, move orbits parents-first, signal that positions are
settled, then move the camera.
"""

import time
from typing import Callable, Mapping, Optional, Tuple
import numpy as np
from .animator import OrbitalAnimator
from .camera import CameraController, OrbitControls, CameraState
from .celestial import SystemData
from .hierarchy import SystemHierarchy
from .layout import LayoutResult, OrbitalMechanicsCalculator
from .layout_service import LayoutService
from .registry import ObjectReferenceRegistry
from .scene import SceneNode, NodeKind
from .view_modes import ViewModeRegistry, view_modes


class SystemViewer:
    """
    The active system session.

    Parameters
    ----------
    view_mode : str, optional
        Initial view mode (default: 'realistic')
    seed : int, optional
        Seed for initial orbit phases
    clock : callable, optional
        Returns the current time in seconds (default: time.monotonic)
    registry : ViewModeRegistry, optional
        Where view modes are looked up (default: the package registry)
    layout_service : LayoutService, optional
        Supply one to control the executor or timeout

    Examples
    --------
    >>> viewer = SystemViewer(seed=1)
    >>> viewer.load(sol_system())
    >>> viewer.layout_service.wait()
    True
    >>> viewer.tick(1 / 60)
    >>> viewer.select('earth')
    True
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, view_mode: str = 'realistic', seed: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic,
                 registry: Optional[ViewModeRegistry] = None,
                 layout_service: Optional[LayoutService] = None):
        self._modes = registry if registry is not None else view_modes
        self._view_mode = self._modes.require(view_mode).id
        self._clock = clock

        self._references = ObjectReferenceRegistry()
        self._layout_service = layout_service if layout_service is not None else LayoutService(
            OrbitalMechanicsCalculator(self._modes), clock=clock)
        self._animator = OrbitalAnimator(self._references, seed=seed)

        self._camera_node = SceneNode('camera', NodeKind.CAMERA, position=[0.0, 30.0, 60.0])
        self._controls = OrbitControls(self._camera_node)
        self._camera = CameraController(self._camera_node, self._controls,
                                        self._references, clock=clock)

        self._system: Optional[SystemData] = None
        self._hierarchy: Optional[SystemHierarchy] = None
        self._focal_id: Optional[str] = None
        self._applied_request = 0

    # ========== PROPERTY ACCESS ==========

    @property
    def system(self) -> Optional[SystemData]:
        return self._system

    @property
    def view_mode(self) -> str:
        return self._view_mode

    @property
    def focal_id(self) -> Optional[str]:
        return self._focal_id

    @property
    def layout(self) -> Mapping[str, LayoutResult]:
        """Last good layout (empty while the first is pending)"""
        return self._layout_service.layout

    @property
    def layout_service(self) -> LayoutService:
        return self._layout_service

    @property
    def references(self) -> ObjectReferenceRegistry:
        return self._references

    @property
    def animator(self) -> OrbitalAnimator:
        return self._animator

    @property
    def camera(self) -> CameraController:
        return self._camera

    @property
    def controls(self) -> OrbitControls:
        return self._controls

    @property
    def hierarchy(self) -> Optional[SystemHierarchy]:
        return self._hierarchy

    @property
    def camera_pose(self) -> Tuple[np.ndarray, np.ndarray]:
        """(camera position, look-at target)"""
        return self._camera.pose

    # ========== SESSION ==========

    def load(self, system: SystemData) -> None:
        """
        Make ``system`` the active system.

        Loading a system with the same id as the current one keeps the
        registered references; a different id clears them.
        """
        if self._system is not None and system.id != self._system.id:
            self.unload()
        self._references.bind_system(system)
        self._system = system
        self._hierarchy = SystemHierarchy(system.objects)
        self._animator.attach(system)
        self._layout_service.request(system.objects, self._view_mode)

    def unload(self) -> None:
        """Detach the active system and reset the camera."""
        self._camera.cancel()
        self._animator.detach()
        self._references.bind_system(None)
        self._system = None
        self._hierarchy = None
        self._focal_id = None

    def set_view_mode(self, view_mode: str) -> None:
        """
        Switch view mode: recompute the layout and, in a linear mode with a
        focal object, reframe it once the new positions are in place.
        """
        mode = self._modes.require(view_mode)
        if mode.id == self._view_mode:
            return
        self._view_mode = mode.id
        if self._system is None:
            return
        self._layout_service.request(self._system.objects, self._view_mode)
        self._animator.invalidate()
        if self._focal_id is not None and mode.orbit_style.linear:
            self._camera.request_profile_frame(self._focal_id, self._hierarchy, mode)

    def select(self, object_id: str) -> bool:
        """
        Make ``object_id`` the focal object and move the camera to it.

        Returns
        -------
        bool
            False if the object is unknown, not yet laid out, or not mounted
        """
        if self._hierarchy is None or object_id not in self._hierarchy:
            return False
        mode = self._modes.require(self._view_mode)
        self._focal_id = object_id
        self._animator.invalidate()
        if mode.orbit_style.linear:
            self._camera.request_profile_frame(object_id, self._hierarchy, mode)
            return True
        result = self.layout.get(object_id)
        if result is None:
            return False
        obj = self._hierarchy.get(object_id)
        return self._camera.focus(object_id, result.visual_radius, obj.object_type, mode)

    def request_birds_eye(self) -> None:
        self._focal_id = None
        self._camera.birds_eye(self.layout, self._modes.require(self._view_mode))

    def request_profile_frame(self, object_id: str) -> bool:
        if self._hierarchy is None or object_id not in self._hierarchy:
            return False
        self._focal_id = object_id
        self._camera.request_profile_frame(object_id, self._hierarchy,
                                           self._modes.require(self._view_mode))
        return True

    # ========== FRAME UPDATE ==========

    def tick(self, dt: float, now: Optional[float] = None) -> CameraState:
        """
        Run one frame.

        Parameters
        ----------
        dt : float
            Frame time step for orbit animation
        now : float, optional
            Clock reading for the layout timeout and camera animation

        Returns
        -------
        CameraState
        """
        now = self._clock() if now is None else now
        service = self._layout_service
        service.poll(now)
        if service.layout_mode is not None and service.layout_request_id != self._applied_request:
            self._animator.apply_layout(service.layout, self._modes.require(service.layout_mode))
            self._applied_request = service.layout_request_id
        self._animator.tick(dt)
        animator_mode = self._animator.mode
        if (animator_mode is not None and animator_mode.id == self._view_mode
                and not self._layout_service.pending):
            self._camera.notify_positions_settled()
        return self._camera.tick(now)

    def close(self) -> None:
        self.unload()
        self._layout_service.shutdown()

    def __repr__(self):
        system = None if self._system is None else self._system.id
        return (f"SystemViewer(system={system!r}, view_mode={self._view_mode!r}, "
                f"focal={self._focal_id!r}, camera={self._camera.state.value})")

"""
Global Configuration for Orrery Package
=======================================

This module provides package-wide configuration settings that users can modify
to control jitter thresholds, camera framing floors, validation behavior, and
default plotting options.

Examples
--------
View current configuration:

>>> import orrery
>>> print(orrery.config)

Modify settings:

>>> orrery.config.FOLLOW_EPSILON = 0.01  # Coarser camera follow threshold
>>> orrery.config.PROFILE_MIN_DISTANCE = 30.0

Reset to defaults:

>>> orrery.config.reset()

Temporarily modify settings:

>>> with orrery.temp_config(LAYOUT_TIMEOUT=1.0):
...     service.request(system.objects, 'realistic')

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset.
"""

from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class OrreryConfig:
    """
    Global configuration for Orrery package.

    Attributes
    ----------
    FOLLOW_EPSILON : float
        Minimum movement of a followed object (scene units) before the camera
        is translated with it. Default: 0.001
    CONTAINER_EPSILON : float
        Minimum movement of a parent before an orbit container is moved.
        Default: 0.001
    PROFILE_MIN_DISTANCE : float
        Floor for the profile framing camera distance. Default: 20.0
    PROFILE_SPAN_FACTOR : float
        Profile camera distance as a multiple of the framed span. Default: 1.2
    DEFAULT_SYSTEM_EXTENT : float
        Bird's-eye distance used when a layout has no orbits. Default: 50.0
    ORBIT_SPEED_FACTOR : float
        Scale applied to the angular rate of every orbit. Default: 0.1
    LAYOUT_TIMEOUT : float
        Seconds a layout calculation may run before it is reported as timed
        out. Default: 10.0
    PARENT_SIZE_RATIO : float
        Minimum visual radius ratio between a parent and any of its children.
        Default: 1.2
    STAR_DISTANCE_FACTOR : float
        Focus distance multiplier for stars. Default: 1.5
    GAS_GIANT_DISTANCE_FACTOR : float
        Focus distance multiplier for gas giants. Default: 1.25
    KEPLER_TOLERANCE : float
        Convergence tolerance of the Kepler equation solver. Default: 1e-6
    KEPLER_MAX_ITER : int
        Iteration cap of the Kepler equation solver. Default: 10
    KEPLER_MIN_ECCENTRICITY : float
        Below this eccentricity the mean anomaly is used directly.
        Default: 0.001
    STRICT_VALIDATION : bool
        If True, validation failures raise exceptions.
        If False, validation failures issue warnings.
        Default: True
    DEFAULT_PLOT_POINTS : int
        Number of points used to draw an orbit ring. Default: 360
    DEFAULT_BODY_COLOR : str
        Default color for bodies in plots. Default: 'lightblue'
    DEFAULT_ORBIT_COLOR : str
        Default color for orbit rings in plots. Default: 'gray'
    DEFAULT_BELT_COLOR : str
        Default color for belts in plots. Default: 'tan'
    DEFAULT_BODY_OPACITY : float
        Default opacity for body spheres (0.0 to 1.0). Default: 0.8
    """

    # Jitter thresholds
    FOLLOW_EPSILON: float = 0.001
    CONTAINER_EPSILON: float = 0.001

    # Camera framing
    PROFILE_MIN_DISTANCE: float = 20.0
    PROFILE_SPAN_FACTOR: float = 1.2
    DEFAULT_SYSTEM_EXTENT: float = 50.0
    STAR_DISTANCE_FACTOR: float = 1.5
    GAS_GIANT_DISTANCE_FACTOR: float = 1.25

    # Layout and animation
    ORBIT_SPEED_FACTOR: float = 0.1
    LAYOUT_TIMEOUT: float = 10.0
    PARENT_SIZE_RATIO: float = 1.2
    KEPLER_TOLERANCE: float = 1e-6
    KEPLER_MAX_ITER: int = 10
    KEPLER_MIN_ECCENTRICITY: float = 0.001

    # Validation behavior
    STRICT_VALIDATION: bool = True

    # Plotting defaults
    DEFAULT_PLOT_POINTS: int = 360
    DEFAULT_BODY_COLOR: str = 'lightblue'
    DEFAULT_ORBIT_COLOR: str = 'gray'
    DEFAULT_BELT_COLOR: str = 'tan'
    DEFAULT_BODY_OPACITY: float = 0.8

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import orrery
        >>> orrery.config.FOLLOW_EPSILON = 0.5  # Modify
        >>> orrery.config.reset()  # Back to defaults
        >>> orrery.config.FOLLOW_EPSILON
        0.001
        """
        defaults = OrreryConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["OrreryConfig:"]
        lines.append("  Jitter Thresholds:")
        lines.append(f"    FOLLOW_EPSILON = {self.FOLLOW_EPSILON}")
        lines.append(f"    CONTAINER_EPSILON = {self.CONTAINER_EPSILON}")
        lines.append("  Camera Framing:")
        lines.append(f"    PROFILE_MIN_DISTANCE = {self.PROFILE_MIN_DISTANCE}")
        lines.append(f"    PROFILE_SPAN_FACTOR = {self.PROFILE_SPAN_FACTOR}")
        lines.append(f"    DEFAULT_SYSTEM_EXTENT = {self.DEFAULT_SYSTEM_EXTENT}")
        lines.append(f"    STAR_DISTANCE_FACTOR = {self.STAR_DISTANCE_FACTOR}")
        lines.append(f"    GAS_GIANT_DISTANCE_FACTOR = {self.GAS_GIANT_DISTANCE_FACTOR}")
        lines.append("  Layout and Animation:")
        lines.append(f"    ORBIT_SPEED_FACTOR = {self.ORBIT_SPEED_FACTOR}")
        lines.append(f"    LAYOUT_TIMEOUT = {self.LAYOUT_TIMEOUT}")
        lines.append(f"    PARENT_SIZE_RATIO = {self.PARENT_SIZE_RATIO}")
        lines.append(f"    KEPLER_TOLERANCE = {self.KEPLER_TOLERANCE}")
        lines.append(f"    KEPLER_MAX_ITER = {self.KEPLER_MAX_ITER}")
        lines.append(f"    KEPLER_MIN_ECCENTRICITY = {self.KEPLER_MIN_ECCENTRICITY}")
        lines.append("  Behavior:")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        lines.append("  Plotting:")
        lines.append(f"    DEFAULT_PLOT_POINTS = {self.DEFAULT_PLOT_POINTS}")
        lines.append(f"    DEFAULT_BODY_COLOR = '{self.DEFAULT_BODY_COLOR}'")
        lines.append(f"    DEFAULT_ORBIT_COLOR = '{self.DEFAULT_ORBIT_COLOR}'")
        lines.append(f"    DEFAULT_BELT_COLOR = '{self.DEFAULT_BELT_COLOR}'")
        lines.append(f"    DEFAULT_BODY_OPACITY = {self.DEFAULT_BODY_OPACITY}")
        return "\n".join(lines)


# Global configuration instance
config = OrreryConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import orrery
    >>> with orrery.temp_config(PROFILE_MIN_DISTANCE=5.0):
    ...     frame = compute_profile_frame(focal, partner, 22.5)
    >>> orrery.config.PROFILE_MIN_DISTANCE
    20.0

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"OrreryConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)

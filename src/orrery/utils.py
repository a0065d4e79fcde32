"""
Utility functions and classes for the Orrery package.
"""

from time import perf_counter
import warnings
from typing import Type
import numpy as np
from .config import config

class Timer:
    """
    Context manager for timing code execution.

    Examples
    --------
    >>> from orrery.utils import Timer
    >>> with Timer("Layout"):
    ...     layout = calculator.compute_layout(system.objects, 'realistic')
    Layout: 0.001234 s

    >>> with Timer(verbose=False) as t:
    ...     # ... code ...
    >>> print(f"Took {t.elapsed:.6f} seconds")
    """
    def __init__(self, name="Operation", verbose=True):
        """
        Parameters
        ----------
        name : str, optional
            Name to display when timing completes (default: "Operation")
        verbose : bool, optional
            Whether to print timing automatically (default: True)
        """
        self.name = name
        self.verbose = verbose
        self.elapsed = None

    def __enter__(self):
        self.start = perf_counter()
        return self

    def __exit__(self, *args):
        self.end = perf_counter()
        self.elapsed = self.end - self.start
        if self.verbose:
            print(f"{self.name}: {self.elapsed:.6f} s")

def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Raise error or warn based on config.STRICT_VALIDATION.

    When STRICT_VALIDATION is True (default), raises the specified exception.
    When False, issues a UserWarning instead.

    Parameters
    ----------
    message : str
        Validation error message
    error_class : Type[Exception], optional
        Exception class to raise if STRICT_VALIDATION is True.
        Default: ValueError

    Raises
    ------
    Exception (of type error_class)
        If config.STRICT_VALIDATION is True

    Warns
    -----
    UserWarning
        If config.STRICT_VALIDATION is False
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    else:
        warnings.warn(message, UserWarning, stacklevel=2)

def as_vector(value, name: str = "vector") -> np.ndarray:
    """
    Convert a 3-element sequence to a float numpy array.

    Parameters
    ----------
    value : array_like
        Three numbers
    name : str, optional
        Name used in the error message

    Returns
    -------
    np.ndarray
        Array of shape (3,)

    Raises
    ------
    ValueError
        If the input does not have exactly three finite components
    """
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr}")
    return arr

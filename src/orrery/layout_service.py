"""
Asynchronous layout recomputation.

LayoutService runs the OrbitalMechanicsCalculator on a worker so large
systems do not stall the frame loop. Results come back only through
``poll``, which the frame loop calls once per tick, so all state changes
still happen on the caller's thread.
"""

import time
import warnings
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait as wait_futures
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence
from .celestial import CelestialObject
from .config import config
from .errors import CalculationTimeout, OrreryWarning
from .layout import LayoutResult, OrbitalMechanicsCalculator
from .utils import Timer

_EMPTY: Mapping[str, LayoutResult] = MappingProxyType({})


class LayoutService:
    """
    Latest-request-wins wrapper around a layout calculator.

    Parameters
    ----------
    calculator : OrbitalMechanicsCalculator, optional
    timeout : float, optional
        Seconds before a pending request is reported as timed out
        (default: config.LAYOUT_TIMEOUT)
    executor : concurrent.futures.Executor, optional
        Where calculations run (default: a private single-thread pool)
    clock : callable, optional
        Returns the current time in seconds (default: time.monotonic)

    Notes
    -----
    ``layout`` always returns a usable mapping: the last successful result,
    or an empty mapping before the first one. A result that belongs to a
    superseded request is dropped when it arrives. A timeout or a failed
    calculation sets ``error`` and leaves the last good layout in place.

    Examples
    --------
    >>> service = LayoutService()
    >>> service.request(system.objects, 'realistic')
    1
    >>> service.wait()
    True
    >>> sorted(service.layout) == sorted(o.id for o in system.objects)
    True
    """

    # ========== CONSTRUCTION ==========

    def __init__(self, calculator: Optional[OrbitalMechanicsCalculator] = None,
                 timeout: Optional[float] = None, executor: Optional[Executor] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._calculator = calculator if calculator is not None else OrbitalMechanicsCalculator()
        self._timeout = config.LAYOUT_TIMEOUT if timeout is None else timeout
        if self._timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self._timeout}")
        self._owns_executor = executor is None
        self._executor = executor if executor is not None else ThreadPoolExecutor(
            max_workers=1, thread_name_prefix='orrery-layout')
        self._clock = clock

        self._request_id = 0
        self._future: Optional[Future] = None
        self._started: Optional[float] = None
        self._mode: Optional[str] = None
        self._layout: Mapping[str, LayoutResult] = _EMPTY
        self._layout_mode: Optional[str] = None
        self._layout_request: int = 0
        self._error: Optional[BaseException] = None
        self._last_duration: Optional[float] = None

    # ========== PROPERTY ACCESS ==========

    @property
    def calculator(self) -> OrbitalMechanicsCalculator:
        return self._calculator

    @property
    def layout(self) -> Mapping[str, LayoutResult]:
        """Last good layout, empty if none has completed yet"""
        return self._layout

    @property
    def layout_mode(self) -> Optional[str]:
        """View mode of ``layout``"""
        return self._layout_mode

    @property
    def request_id(self) -> int:
        """Id of the most recent request"""
        return self._request_id

    @property
    def layout_request_id(self) -> int:
        """Id of the request that produced ``layout`` (0 if none)"""
        return self._layout_request

    @property
    def pending(self) -> bool:
        return self._future is not None

    @property
    def error(self) -> Optional[BaseException]:
        """Failure of the latest request, None if it succeeded or is pending"""
        return self._error

    @property
    def last_duration(self) -> Optional[float]:
        """Wall time of the last completed calculation [s]"""
        return self._last_duration

    # ========== REQUESTS ==========

    def request(self, objects: Sequence[CelestialObject], view_mode: str) -> int:
        """
        Start computing a layout, superseding any request still in flight.

        The calculator's cache is cleared when the view mode differs from the
        previous request's.

        Returns
        -------
        int
            The new request id
        """
        mode = self._calculator.registry.require(view_mode).id
        if mode != self._mode:
            self._calculator.clear_cache()
        self._mode = mode

        if self._future is not None:
            self._future.cancel()
        self._request_id += 1
        self._error = None
        self._started = self._clock()
        self._future = self._executor.submit(self._run, tuple(objects), mode)
        return self._request_id

    def _run(self, objects, mode):
        with Timer(f"Layout ({mode})", verbose=False) as timer:
            result = self._calculator.compute_layout(objects, mode)
        return result, timer.elapsed

    def poll(self, now: Optional[float] = None) -> bool:
        """
        Collect the latest request's result if it is ready.

        Returns
        -------
        bool
            True if a new layout was installed
        """
        if self._future is None:
            return False
        now = self._clock() if now is None else now
        future = self._future

        if future.done():
            self._future = None
            if future.cancelled():
                return False
            exc = future.exception()
            if exc is not None:
                self._error = exc
                warnings.warn(f"Layout calculation failed: {exc}; keeping last layout",
                              OrreryWarning, stacklevel=2)
                return False
            self._layout, self._last_duration = future.result()
            self._layout_mode = self._mode
            self._layout_request = self._request_id
            return True

        if now - self._started > self._timeout:
            future.cancel()
            self._future = None
            self._error = CalculationTimeout(
                f"Layout request {self._request_id} ({self._mode}) exceeded {self._timeout} s"
            )
            warnings.warn(str(self._error), OrreryWarning, stacklevel=2)
        return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the latest request finishes (or ``timeout`` seconds pass),
        then poll.

        Returns
        -------
        bool
            True if a new layout was installed
        """
        if self._future is None:
            return False
        wait_futures([self._future], timeout=self._timeout if timeout is None else timeout)
        return self.poll()

    def shutdown(self) -> None:
        """Stop the private worker pool (a supplied executor is left running)."""
        if self._future is not None:
            self._future.cancel()
            self._future = None
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def __repr__(self):
        return (f"LayoutService(request_id={self._request_id}, pending={self.pending}, "
                f"mode={self._layout_mode}, error={self._error!r})")

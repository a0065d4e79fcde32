"""
Warning and exception types raised by the Orrery package.

Malformed system data and unresolved references degrade to warnings so a
viewer keeps rendering whatever is still valid. Only the layout timeout is
an exception, and it is reported through the layout service's error state
rather than raised into the frame loop.
"""


class OrreryWarning(UserWarning):
    """Base class for all warnings issued by orrery."""


class DataWarning(OrreryWarning):
    """Malformed object graph: dangling parent reference or orbit cycle."""


class MissingReferenceWarning(OrreryWarning):
    """A requested object has no live scene node registered."""


class CalculationTimeout(TimeoutError):
    """A layout calculation did not finish within the configured timeout."""

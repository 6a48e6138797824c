"""Exceptions raised by the rule induction engine.

All of them signal usage errors and are never retried internally. Missing required
arguments are reported with plain :class:`TypeError` and invalid positions with
:class:`IndexError`.
"""


class InvalidValueError(ValueError):
    """Raised when an argument or a computed value is outside of its domain."""


class InvalidSizeError(ValueError):
    """Raised when paired collections have different lengths."""


class UnknownValueError(LookupError):
    """Raised when a rule characteristic that was never set is read."""


class ElementaryConditionNotFoundError(RuntimeError):
    """Raised when no new condition can be added to rule conditions under
    construction."""

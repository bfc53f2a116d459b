"""Error taxonomy for answer grading and review scheduling."""
from __future__ import annotations


class ValidationError(ValueError):
    """A caller passed an out-of-range configuration value (e.g. a threshold).

    Raised immediately and never coerced: it signals a miscalibrated call site,
    not a learner mistake.
    """


class DataRepairWarning(UserWarning):
    """An item arrived with scheduling data outside the valid range and was repaired.

    Emitted through :mod:`warnings`; the review still goes ahead.
    """

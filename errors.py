"""
errors.py

Exception types for DotSight.

Missing profiles and missing target windows are ordinary states and are
not represented here: loading falls back to a default record and an
absent target hides the overlay.
"""

from __future__ import annotations


class DotSightError(Exception):
    """Base class for all DotSight errors."""


class ValidationError(DotSightError):
    """Rejected user input: empty/duplicate names, unparseable numbers, bad tags."""


class PersistenceError(DotSightError):
    """A profile or design could not be written; the previous file is intact."""

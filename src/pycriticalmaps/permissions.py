"""Location access permission state."""

from __future__ import annotations

from enum import StrEnum


class AccessPermission(StrEnum):
    """Tri-state location access permission.

    ``DENIED`` is not an error: components that need the location gate
    their behaviour on it.
    """

    AUTHORIZED = "authorized"
    DENIED = "denied"
    UNDETERMINED = "undetermined"

"""Map annotation reconciliation and controllers."""

from pycriticalmaps.annotations.controller import (
    AnnotationController,
    FriendAnnotationController,
    PeerAnnotationController,
    RenderingSurface,
    RideAnnotationController,
)
from pycriticalmaps.annotations.reconcile import ReconcileDiff, reconcile

__all__ = [
    "AnnotationController",
    "FriendAnnotationController",
    "PeerAnnotationController",
    "ReconcileDiff",
    "RenderingSurface",
    "RideAnnotationController",
    "reconcile",
]

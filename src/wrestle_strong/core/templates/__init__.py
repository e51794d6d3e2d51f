"""
Workout template catalog for wrestle-strong.

Each training day is described by a WorkoutTemplate that parameterises
the workout assembler.
"""

from .base import AssistanceSpec, LiftSpec, SupplementarySpec, WorkoutTemplate
from .registry import TEMPLATE_CATALOG, template_count

__all__ = [
    "AssistanceSpec",
    "LiftSpec",
    "SupplementarySpec",
    "WorkoutTemplate",
    "TEMPLATE_CATALOG",
    "template_count",
]

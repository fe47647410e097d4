"""Constraint engine (rules as functions, dependencies as data)."""

from .engine import ConstraintEngine
from .registry import CONSTRAINTS
from .schema import ConstraintViolation, Mode, Outcome, ValidationReport

__all__ = ["CONSTRAINTS", "ConstraintEngine", "ConstraintViolation", "Mode", "Outcome", "ValidationReport"]

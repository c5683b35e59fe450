"""Planner exception hierarchy.

Invalid input (``BuildValidationError``, ``UpgradeInputError``) is surfaced
by the API as 422; broken upgrade data (``UpgradePathError``) as 404.
"""


class PlannerError(Exception):
    """Base class for all planner errors."""


class BuildValidationError(PlannerError):
    """Stats below minimum, stats out of range, or selection limits exceeded."""

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class UpgradeInputError(PlannerError):
    """Invalid level range for an upgrade calculation."""


class UpgradePathError(PlannerError):
    """Missing or inconsistent upgrade path data."""

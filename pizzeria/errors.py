from __future__ import annotations


class PizzeriaError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500


class UnknownIngredientType(PizzeriaError):
    status_code = 400

    def __init__(self, ingredient_type: str) -> None:
        super().__init__(f"unknown ingredient type {ingredient_type!r}")
        self.ingredient_type = ingredient_type


class UnsatisfiableRestrictions(PizzeriaError):
    """A pool the generator must draw from is empty after filtering."""

    status_code = 400


class UpstreamUnavailable(PizzeriaError):
    """A dependency call failed, either for real or through fault injection."""

    status_code = 500


class DeadlineExceeded(UpstreamUnavailable):
    status_code = 504


class ReferentialIntegrityError(PizzeriaError):
    status_code = 500


class RecommendationConflict(ReferentialIntegrityError):
    """The catalog service refused to record a pizza referencing unknown entries.

    Peers map this 409 back to ``ReferentialIntegrityError``.
    """

    status_code = 409

"""Domain errors raised by the order and capacity services.

All of them are request-scoped and non-retryable. ``app.main`` maps them to
HTTP responses; the services never build HTTP objects themselves.
"""

from __future__ import annotations


class OrderServiceError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"detail": self.detail}


class ValidationError(OrderServiceError):
    """Carries every violated rule, not only the first one."""

    status_code = 422

    def __init__(self, violations: list[str], detail: str = "Validation failed"):
        super().__init__(detail)
        self.violations = list(violations)

    def __str__(self) -> str:
        return f"{self.detail}: {'; '.join(self.violations)}"

    def to_dict(self) -> dict:
        return {"detail": self.detail, "violations": self.violations}


class ConflictError(OrderServiceError):
    status_code = 409

    def __init__(self, overlapping: list, detail: str = "Slot config overlaps an existing config"):
        super().__init__(detail)
        self.overlapping = list(overlapping)

    def to_dict(self) -> dict:
        return {
            "detail": self.detail,
            "overlapping": [
                {
                    "id": c.id,
                    "start_date": c.start_date.isoformat(),
                    "end_date": c.end_date.isoformat() if c.end_date else None,
                    "max_bikes_per_day": c.max_bikes_per_day,
                    "max_bikes_per_order": c.max_bikes_per_order,
                }
                for c in self.overlapping
            ],
        }


class NotFoundError(OrderServiceError):
    status_code = 404


class AuthorizationError(OrderServiceError):
    status_code = 403


class TransitionError(OrderServiceError):
    status_code = 409

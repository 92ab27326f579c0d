"""Exception hierarchy for growthchat.

Classification never raises for messages it cannot understand (it returns
None). Exceptions are reserved for caller mistakes and for failures raised by
domain services, which the dispatcher normalizes into outcomes.
"""

from __future__ import annotations


class GrowthChatError(Exception):
    """Base exception for growthchat errors."""

    pass


class InvalidMessageError(GrowthChatError, ValueError):
    """The caller passed something that is not a usable message."""

    pass


class ServiceError(GrowthChatError):
    """Base exception for domain service failures.

    Attributes:
        code: Stable failure code surfaced in dispatch outcomes
    """

    code = "service_error"


class EntityValidationError(ServiceError):
    """Parameters were rejected by the domain service."""

    code = "validation_failed"


class EntityNotFoundError(ServiceError):
    """The referenced entity does not exist."""

    code = "not_found"


class UnsupportedOperationError(ServiceError):
    """The service does not implement the requested capability."""

    code = "unsupported"


__all__ = [
    "EntityNotFoundError",
    "EntityValidationError",
    "GrowthChatError",
    "InvalidMessageError",
    "ServiceError",
    "UnsupportedOperationError",
]

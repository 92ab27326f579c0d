"""Operation dispatcher for growthchat.

Routes a ParsedCommand to the domain service that owns its entity type and
normalizes every result into a DispatchOutcome. Refusals (low confidence,
unsupported operation, missing parameters) are decided before any service
call. Otherwise exactly one awaited call is made; it is never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from .errors import ServiceError
from .intent.taxonomy import EntityType, IntentConfidence, IntentKind, ParsedCommand
from .services import CAPABILITY_FOR_INTENT, DomainService

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "unexpected_error"


class FailureReason(str, Enum):
    """Why a dispatch did not succeed."""

    LOW_CONFIDENCE = "low_confidence"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    MISSING_PARAMETERS = "missing_parameters"
    DOWNSTREAM_FAILURE = "downstream_failure"


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class DispatchOutcome:
    """Normalized result of dispatching one command.

    Attributes:
        ok: Whether the service call succeeded
        entity_type: Entity type of the dispatched command
        intent: Intent of the dispatched command
        entity: Service return value on success
        reason: Failure category on failure
        detail: Human-readable failure detail
        code: Stable failure code for downstream failures
    """

    ok: bool
    entity_type: EntityType
    intent: IntentKind
    entity: Any = None
    reason: FailureReason | None = None
    detail: str = ""
    code: str | None = None

    @classmethod
    def success(cls, command: ParsedCommand, entity: Any) -> DispatchOutcome:
        return cls(ok=True, entity_type=command.entity_type, intent=command.intent, entity=entity)

    @classmethod
    def failure(
        cls,
        command: ParsedCommand,
        reason: FailureReason,
        detail: str,
        code: str | None = None,
    ) -> DispatchOutcome:
        return cls(
            ok=False,
            entity_type=command.entity_type,
            intent=command.intent,
            reason=reason,
            detail=detail,
            code=code,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the public outcome shape."""
        if self.ok:
            return {"ok": True, "entity": _jsonable(self.entity)}
        return {
            "ok": False,
            "reason": self.reason.value if self.reason else None,
            "detail": self.detail,
            "code": self.code,
        }


def _check_threshold(name: str, value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1]: {value}")
    return value


class OperationDispatcher:
    """Routes parsed commands to domain services.

    The dispatcher holds no per-call state, so one instance can serve any
    number of concurrent dispatches. Timeouts are the caller's concern
    (wrap dispatch() in asyncio.wait_for).

    Attributes:
        confidence_threshold: Default minimum confidence for dispatch
    """

    def __init__(
        self,
        services: Mapping[EntityType, DomainService] | Iterable[DomainService] = (),
        confidence_threshold: float = IntentConfidence.DISPATCH,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            services: Services keyed by entity type, or an iterable of services
            confidence_threshold: Commands scoring strictly below this are refused
        """
        self._services: dict[EntityType, DomainService] = {}
        self.confidence_threshold = confidence_threshold
        values = services.values() if isinstance(services, Mapping) else services
        for service in values:
            self.register(service)

    @property
    def confidence_threshold(self) -> float:
        return self._confidence_threshold

    @confidence_threshold.setter
    def confidence_threshold(self, value: float) -> None:
        self._confidence_threshold = _check_threshold("confidence_threshold", value)

    def register(self, service: DomainService) -> None:
        """Register (or replace) the service for its entity type."""
        self._services[service.entity_type] = service

    def service_for(self, entity_type: EntityType) -> DomainService | None:
        return self._services.get(entity_type)

    async def dispatch(
        self,
        command: ParsedCommand,
        *,
        threshold: float | None = None,
    ) -> DispatchOutcome:
        """Dispatch a command to its domain service.

        Args:
            command: Parsed command to execute
            threshold: Per-call confidence threshold (defaults to the global one)

        Returns:
            DispatchOutcome describing success or the failure category

        Raises:
            ValueError: If threshold is outside [0, 1]
        """
        if threshold is None:
            limit = self.confidence_threshold
        else:
            limit = _check_threshold("threshold", threshold)
        entity, intent = command.entity_type.value, command.intent.value

        if command.confidence < limit:
            return DispatchOutcome.failure(
                command,
                FailureReason.LOW_CONFIDENCE,
                f"Confidence {command.confidence:.2f} is below {limit:.2f}",
            )

        service = self._services.get(command.entity_type)
        capability = CAPABILITY_FOR_INTENT[command.intent]
        if service is None:
            return DispatchOutcome.failure(
                command,
                FailureReason.UNSUPPORTED_OPERATION,
                f"No service registered for {entity}",
            )
        if not service.supports(capability):
            return DispatchOutcome.failure(
                command,
                FailureReason.UNSUPPORTED_OPERATION,
                f"{entity} service does not support {capability.value}",
            )

        if command.missing_parameters:
            return DispatchOutcome.failure(
                command,
                FailureReason.MISSING_PARAMETERS,
                f"Missing {', '.join(command.missing_parameters)}",
            )

        params = dict(command.parameters)
        try:
            if command.intent is IntentKind.CREATE:
                result = await service.create(params)
            elif command.intent is IntentKind.UPDATE:
                target = params.pop("target")
                result = await service.update(target, params)
            elif command.intent is IntentKind.COMPLETE:
                result = await service.complete(params["target"])
            else:
                result = await service.list(params)
        except ServiceError as e:
            logger.warning(f"{entity}/{intent} failed ({e.code}): {e}")
            return DispatchOutcome.failure(
                command, FailureReason.DOWNSTREAM_FAILURE, str(e) or e.code, code=e.code
            )
        except Exception as e:
            logger.error(f"{entity}/{intent} raised unexpected {type(e).__name__}: {e}")
            return DispatchOutcome.failure(
                command,
                FailureReason.DOWNSTREAM_FAILURE,
                f"{type(e).__name__}: {e}",
                code=UNEXPECTED_ERROR,
            )

        logger.info(f"Dispatched {entity}/{intent}")
        return DispatchOutcome.success(command, result)


__all__ = [
    "DispatchOutcome",
    "FailureReason",
    "OperationDispatcher",
    "UNEXPECTED_ERROR",
]

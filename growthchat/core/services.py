"""Domain service interface for growthchat.

A domain service owns one entity type and exposes up to four async
capabilities: create, update, complete and list. The dispatcher only ever
calls a capability the service reports as supported.

InMemoryService is a reference implementation kept in process memory. It
backs the developer CLI and the test suite; applications provide their own
services for real storage.
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from pydantic import BaseModel, Field

from .errors import EntityNotFoundError, EntityValidationError, UnsupportedOperationError
from .intent.taxonomy import EntityType, IntentKind

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Operations a domain service can expose."""

    CREATE = "create"
    UPDATE = "update"
    COMPLETE = "complete"
    LIST = "list"


CAPABILITY_FOR_INTENT: dict[IntentKind, Capability] = {
    IntentKind.CREATE: Capability.CREATE,
    IntentKind.UPDATE: Capability.UPDATE,
    IntentKind.COMPLETE: Capability.COMPLETE,
    IntentKind.VIEW: Capability.LIST,
}


class DomainService(ABC):
    """Abstract base class for per-entity domain services.

    Subclasses override the capabilities they implement. Capabilities left at
    the base implementation raise UnsupportedOperationError and are reported
    as unsupported by supports().

    Errors:
    - EntityValidationError: parameters rejected
    - EntityNotFoundError: update/complete reference does not resolve
    - Any other exception is treated as an unexpected failure by callers
    """

    @property
    @abstractmethod
    def entity_type(self) -> EntityType:
        """Entity type this service owns."""
        ...

    async def create(self, params: Mapping[str, Any]) -> Any:
        """Create an entity from extracted parameters."""
        raise UnsupportedOperationError(f"{self.entity_type.value} does not support create")

    async def update(self, entity_id: str, params: Mapping[str, Any]) -> Any:
        """Update the entity referenced by id or name."""
        raise UnsupportedOperationError(f"{self.entity_type.value} does not support update")

    async def complete(self, entity_id: str) -> Any:
        """Mark the referenced entity complete."""
        raise UnsupportedOperationError(f"{self.entity_type.value} does not support complete")

    async def list(self, filters: Mapping[str, Any]) -> Any:
        """List entities matching filters."""
        raise UnsupportedOperationError(f"{self.entity_type.value} does not support list")

    def supports(self, capability: Capability) -> bool:
        """Check whether this service overrides a capability."""
        method = getattr(type(self), capability.value, None)
        return method is not None and method is not getattr(DomainService, capability.value)


# =============================================================================
# Reference in-memory implementation
# =============================================================================

# Parameter that names each entity type
LABEL_FIELDS: dict[EntityType, str | None] = {
    EntityType.ROUTINE: "name",
    EntityType.BELIEF: "statement",
    EntityType.SYNCHRONICITY: "title",
    EntityType.MOOD: None,
    EntityType.GOAL: "title",
}

# Parameter that carries the date an entity refers to
DATE_FIELDS: dict[EntityType, str | None] = {
    EntityType.MOOD: "entry_date",
    EntityType.SYNCHRONICITY: "date_occurred",
}

# Filter keys matched against stored attributes by equality
_EQUALITY_FILTERS = ("category", "time_of_day", "belief_type")


class Entity(BaseModel):
    """An entity stored by InMemoryService.

    Attributes:
        id: Service-assigned identifier (e.g. "routine-1")
        entity_type: Entity type
        label: Human-readable name used for reference resolution
        attributes: Stored parameters (JSON-friendly values)
        status: "active" or "completed"
        created_at: Creation time
        updated_at: Time of the last update
        completions: Dates a routine was completed
    """

    id: str
    entity_type: EntityType
    label: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    status: str = "active"
    created_at: datetime
    updated_at: datetime | None = None
    completions: list[date] = Field(default_factory=list)

    def reference_date(self) -> date:
        """Date the entity refers to, falling back to creation date."""
        key = DATE_FIELDS.get(self.entity_type)
        value = self.attributes.get(key) if key else None
        if isinstance(value, date):
            return value
        return self.created_at.date()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        data: dict[str, Any] = {
            "id": self.id,
            "entity_type": self.entity_type.value,
            "label": self.label,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "attributes": {
                k: v.isoformat() if isinstance(v, date) else v for k, v in self.attributes.items()
            },
        }
        if self.updated_at is not None:
            data["updated_at"] = self.updated_at.isoformat()
        if self.completions:
            data["completions"] = [d.isoformat() for d in self.completions]
        return data


def _storable(value: Any) -> Any:
    if isinstance(value, frozenset):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    return value


class InMemoryService(DomainService):
    """Domain service that keeps entities in a dictionary.

    Example:
        >>> moods = InMemoryService(EntityType.MOOD)
        >>> entry = await moods.create({"mood_rating": 7})
        >>> await moods.list({})
    """

    def __init__(
        self,
        entity_type: EntityType,
        capabilities: Iterable[Capability] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            entity_type: Entity type stored by this service
            capabilities: Capabilities to expose (defaults to all)
            clock: Time source (defaults to datetime.now)
        """
        self._entity_type = entity_type
        self._capabilities = frozenset(capabilities) if capabilities is not None else frozenset(Capability)
        self._clock = clock or datetime.now
        self._entities: dict[str, Entity] = {}
        self._ids = itertools.count(1)

    @property
    def entity_type(self) -> EntityType:
        return self._entity_type

    @property
    def entities(self) -> list[Entity]:
        return list(self._entities.values())

    def supports(self, capability: Capability) -> bool:
        return capability in self._capabilities

    def _require(self, capability: Capability) -> None:
        if capability not in self._capabilities:
            raise UnsupportedOperationError(
                f"{self._entity_type.value} does not support {capability.value}"
            )

    def get(self, entity_id: str) -> Entity:
        """Get an entity by id.

        Raises:
            EntityNotFoundError: If no entity has this id
        """
        try:
            return self._entities[entity_id]
        except KeyError:
            raise EntityNotFoundError(f"No {self._entity_type.value} with id {entity_id!r}") from None

    def resolve(self, reference: str) -> Entity:
        """Resolve an id or name to a stored entity.

        Matching order: exact id, case-insensitive label, then a unique
        label containing the reference (with a trailing entity noun removed,
        so "marathon goal" finds "run a marathon").

        Raises:
            EntityNotFoundError: If nothing matches
            EntityValidationError: If the reference matches several entities
        """
        if reference in self._entities:
            return self._entities[reference]

        wanted = reference.casefold().strip()
        exact = [e for e in self._entities.values() if e.label.casefold() == wanted]
        if len(exact) == 1:
            return exact[0]

        noun = f" {self._entity_type.value}"
        core = wanted[: -len(noun)] if wanted.endswith(noun) else wanted
        partial = [e for e in self._entities.values() if core and core in e.label.casefold()]
        if len(partial) == 1:
            return partial[0]
        if len(exact) > 1 or len(partial) > 1:
            raise EntityValidationError(
                f"{reference!r} matches {max(len(exact), len(partial))} {self._entity_type.value}s"
            )
        raise EntityNotFoundError(f"No {self._entity_type.value} matching {reference!r}")

    def _label_for(self, params: Mapping[str, Any]) -> str:
        key = LABEL_FIELDS[self._entity_type]
        if key is None:
            rating = params.get("mood_rating")
            if rating is None:
                raise EntityValidationError("mood entries need a mood rating")
            day = params.get("entry_date") or self._clock().date()
            return f"mood {rating}/10 on {day.isoformat()}"
        label = params.get(key)
        if not label or not str(label).strip():
            raise EntityValidationError(f"{self._entity_type.value} needs a {key}")
        return str(label).strip()

    @staticmethod
    def _check_ranges(params: Mapping[str, Any]) -> None:
        for key in ("mood_rating", "energy_level", "significance", "conviction"):
            value = params.get(key)
            if value is not None and not 1 <= value <= 10:
                raise EntityValidationError(f"{key} must be between 1 and 10, got {value}")
        progress = params.get("progress")
        if progress is not None and not 0 <= progress <= 100:
            raise EntityValidationError(f"progress must be between 0 and 100, got {progress}")

    async def create(self, params: Mapping[str, Any]) -> Entity:
        self._require(Capability.CREATE)
        self._check_ranges(params)
        entity = Entity(
            id=f"{self._entity_type.value}-{next(self._ids)}",
            entity_type=self._entity_type,
            label=self._label_for(params),
            attributes={k: _storable(v) for k, v in params.items()},
            created_at=self._clock(),
        )
        self._entities[entity.id] = entity
        logger.debug(f"Created {entity.id}: {entity.label}")
        return entity

    async def update(self, entity_id: str, params: Mapping[str, Any]) -> Entity:
        self._require(Capability.UPDATE)
        self._check_ranges(params)
        entity = self.resolve(entity_id)

        for key, value in params.items():
            value = _storable(value)
            if key == "steps":
                steps = list(entity.attributes.get("steps", []))
                steps.extend(s for s in value if s not in steps)
                entity.attributes["steps"] = steps
            elif key == "action":
                counter = "reinforced" if value == "reinforce" else "challenged"
                entity.attributes[counter] = entity.attributes.get(counter, 0) + 1
            else:
                entity.attributes[key] = value

        if entity.attributes.get("progress") == 100:
            entity.status = "completed"
        entity.updated_at = self._clock()
        return entity

    async def complete(self, entity_id: str) -> Entity:
        self._require(Capability.COMPLETE)
        entity = self.resolve(entity_id)
        today = self._clock().date()

        if self._entity_type is EntityType.ROUTINE:
            # Routines recur; each completion is recorded once per day
            if today not in entity.completions:
                entity.completions.append(today)
        else:
            if entity.status == "completed":
                raise EntityValidationError(f"{entity.label!r} is already completed")
            entity.status = "completed"
            if self._entity_type is EntityType.GOAL:
                entity.attributes["progress"] = 100
        entity.updated_at = self._clock()
        return entity

    async def list(self, filters: Mapping[str, Any]) -> list[Entity]:
        self._require(Capability.LIST)
        results = list(self._entities.values())

        for key in _EQUALITY_FILTERS:
            if key in filters:
                results = [e for e in results if e.attributes.get(key) == filters[key]]
        if "status" in filters:
            results = [e for e in results if e.status == filters["status"]]
        if "tags" in filters:
            wanted = set(filters["tags"])
            results = [e for e in results if wanted & set(e.attributes.get("tags", ()))]
        if "days" in filters:
            since = self._clock().date() - timedelta(days=int(filters["days"]))
            results = [e for e in results if e.reference_date() >= since]

        results.sort(key=lambda e: (e.reference_date(), e.created_at))
        return results


def build_memory_services(
    clock: Callable[[], datetime] | None = None,
) -> dict[EntityType, InMemoryService]:
    """Create one in-memory service per entity type."""
    return {entity_type: InMemoryService(entity_type, clock=clock) for entity_type in EntityType}


__all__ = [
    "CAPABILITY_FOR_INTENT",
    "Capability",
    "DomainService",
    "Entity",
    "InMemoryService",
    "build_memory_services",
]

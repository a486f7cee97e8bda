"""
Domain events base classes and infrastructure.

Domain events represent something that happened in the domain.
They are used for decoupling modules and enabling event-driven architecture.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

_BASE_FIELDS = ("event_id", "occurred_at", "aggregate_id")


def _serialize(value: Any) -> Any:
    """Convert event payload values into JSON-friendly primitives."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class DomainEvent(ABC):
    """
    Base class for all domain events.

    Subclasses set their payload attributes in ``__init__`` after calling
    ``super().__init__``; every non-base attribute becomes part of
    ``to_dict()``.
    """

    event_type: str = "DomainEvent"

    def __init_subclass__(cls, **kwargs):
        """Automatically set event_type for subclasses."""
        super().__init_subclass__(**kwargs)
        cls.event_type = cls.__name__

    def __init__(
        self,
        aggregate_id: str,
        occurred_at: Optional[datetime] = None,
        event_id: Optional[UUID] = None,
    ):
        self.event_id = event_id or uuid4()
        self.occurred_at = occurred_at or datetime.now(timezone.utc)
        self.aggregate_id = str(aggregate_id)

    def payload(self) -> Dict[str, Any]:
        """Return the event-specific attributes."""
        return {
            name: _serialize(value)
            for name, value in vars(self).items()
            if name not in _BASE_FIELDS
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        data = {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
        }
        data.update(self.payload())
        return data

    def __repr__(self) -> str:
        return f"<{self.event_type} aggregate_id={self.aggregate_id}>"


class EventHandler(ABC):
    """
    Base class for event handlers.

    Event handlers process domain events asynchronously.
    """

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """
        Handle a domain event.

        Args:
            event: The domain event to handle
        """
        pass


class EventBus(ABC):
    """
    Abstract event bus for publishing and subscribing to domain events.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event.

        Args:
            event: The domain event to publish
        """
        pass

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Subscribe to a domain event type.

        Args:
            event_type: The type of event to subscribe to
            handler: The handler to call when event is published
        """
        pass

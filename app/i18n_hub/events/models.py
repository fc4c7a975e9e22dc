"""Event models for the registry event bus.

Provides the Event record handed to subscribers that want the full envelope
rather than the positional arguments of an emit call.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Tuple
from uuid import UUID, uuid4


@dataclass
class Event:
    """Record of something that happened on the registry.

    Attributes:
        event_type: The type of event (e.g., 'plugin-registered').
        args: Positional arguments the event was emitted with.
        timestamp: When the event occurred.
        correlation_id: Unique ID to track related log lines.
    """

    event_type: str
    args: Tuple[Any, ...] = ()
    timestamp: datetime = field(default_factory=datetime.now)
    correlation_id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to dictionary.

        Returns:
            Dictionary representation with ISO format timestamp and UUID as
            string.
        """
        return {
            "event_type": self.event_type,
            "args": list(self.args),
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": str(self.correlation_id),
        }

    def __hash__(self) -> int:
        """Hash based on correlation_id and timestamp."""
        return hash((self.correlation_id, self.timestamp))

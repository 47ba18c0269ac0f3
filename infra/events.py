"""
Progress events produced by the outline pipeline.

Events are a tagged union of started / progress / completed / error, each carrying
a timestamp and a free-form data dict whose "step" key names the stage. The pipeline
only produces them; delivery (SSE, websockets, console) belongs to the sink.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional


class EventType(str, Enum):
    STARTED = "started"
    PROGRESS = "progress"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class ProgressEvent:
    type: EventType
    timestamp: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def step(self) -> Optional[str]:
        return self.data.get("step")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp,
            "data": self.data,
        }


EventSink = Callable[[ProgressEvent], None]


class EventEmitter:
    """Stamps events for one stage and forwards them to an optional sink."""

    def __init__(self, sink: Optional[EventSink], step: str):
        self.sink = sink
        self.step = step

    def emit(self, event_type: EventType, **data) -> Optional[ProgressEvent]:
        if self.sink is None:
            return None

        event = ProgressEvent(
            type=event_type,
            timestamp=datetime.now(timezone.utc).isoformat(),
            data={"step": self.step, **data},
        )
        self.sink(event)
        return event

    def started(self, **data):
        return self.emit(EventType.STARTED, **data)

    def progress(self, **data):
        return self.emit(EventType.PROGRESS, **data)

    def completed(self, **data):
        return self.emit(EventType.COMPLETED, **data)

    def error(self, **data):
        return self.emit(EventType.ERROR, **data)

"""Build event models — what the tracker observes and how it aggregates."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """The two build transitions recognized in the build output."""

    STARTED = "started"
    FINISHED = "finished"


class BuildEvent(BaseModel):
    """A component identity entering or leaving compilation."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    name: str

    @classmethod
    def started(cls, name: str) -> BuildEvent:
        return cls(kind=EventKind.STARTED, name=name)

    @classmethod
    def finished(cls, name: str) -> BuildEvent:
        return cls(kind=EventKind.FINISHED, name=name)


class BuildEventSets(BaseModel):
    """Live aggregate of build events.

    Mutated only by the consuming side (``BuildHandle.poll``), never by
    the reader threads.  Re-applying an event is a no-op.  The two output
    streams are read independently, so a ``Started`` may arrive after the
    matching ``Finished``; it is ignored then.
    """

    active: set[str] = Field(default_factory=set)
    completed: set[str] = Field(default_factory=set)

    def apply(self, event: BuildEvent) -> None:
        if event.kind == EventKind.STARTED:
            if event.name not in self.completed:
                self.active.add(event.name)
        else:
            self.active.discard(event.name)
            self.completed.add(event.name)

    def is_active(self, name: str) -> bool:
        return name in self.active

    def is_completed(self, name: str) -> bool:
        return name in self.completed

"""Data models for the state store."""

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass
class StateEntry:
    """Represents a stored state and its lock status."""

    name: str
    locked: bool = False


class StateSummary(BaseModel):
    """A single roster item."""

    name: str
    locked: bool


class RosterResponse(BaseModel):
    """Response body for the state listing."""

    status: str = "ok"
    states: list[StateSummary] = Field(default_factory=list)

    @classmethod
    def from_entries(cls, entries: list[StateEntry]) -> "RosterResponse":
        return cls(
            states=[StateSummary(name=e.name, locked=e.locked) for e in entries]
        )

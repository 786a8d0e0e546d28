"""JSON value nodes produced by the grammar."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class JsonNumber:
    value: float


@dataclass(frozen=True)
class JsonString:
    value: str  # verbatim, escapes not decoded


@dataclass(frozen=True)
class JsonBool:
    value: bool


@dataclass(frozen=True)
class JsonNull:
    pass


@dataclass(frozen=True)
class JsonArray:
    items: list[JsonValue] = field(default_factory=list)


@dataclass(frozen=True)
class JsonObject:
    # Insertion order, duplicate keys kept
    members: list[tuple[str, JsonValue]] = field(default_factory=list)

    def keys(self) -> list[str]:
        return [key for key, _ in self.members]


JsonValue = Union[JsonNumber, JsonString, JsonBool, JsonNull, JsonArray, JsonObject]


def to_python(value: JsonValue) -> Any:
    """Convert to builtin objects; the last duplicate key wins."""
    if isinstance(value, JsonArray):
        return [to_python(item) for item in value.items]
    if isinstance(value, JsonObject):
        return {key: to_python(item) for key, item in value.members}
    if isinstance(value, JsonNull):
        return None
    return value.value

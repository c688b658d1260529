from __future__ import annotations


class CardStudioError(Exception):
    """Base class for engine errors."""


class MalformedDocument(CardStudioError):
    """The template is missing required structure; the session cannot render it."""


class ZoneOverflow(CardStudioError):
    """Text still overflows its zone at the minimum font size."""

    def __init__(self, zone_id: str, size: int) -> None:
        super().__init__(f"Zone {zone_id} overflows at {size}px")
        self.zone_id = zone_id
        self.size = size


class InputRejected(CardStudioError):
    def __init__(self, zone_id: str, length: int, max_chars: int) -> None:
        super().__init__(f"Zone {zone_id}: {length} chars exceeds limit of {max_chars}")
        self.zone_id = zone_id
        self.length = length
        self.max_chars = max_chars


class FontLoadFailure(CardStudioError):
    def __init__(self, family: str, reason: str) -> None:
        super().__init__(f"Font {family!r} unavailable: {reason}")
        self.family = family
        self.reason = reason


class DraftCorrupt(CardStudioError):
    """Stored draft payload could not be decoded."""


class InvalidTransition(CardStudioError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"No transition from {current} to {target}")
        self.current = current
        self.target = target


class UnknownZone(CardStudioError, KeyError):
    def __init__(self, zone_id: str) -> None:
        super().__init__(zone_id)
        self.zone_id = zone_id

    def __str__(self) -> str:
        return f"Unknown dynamic zone: {self.zone_id}"


class ReadOnlyStore(CardStudioError):
    """Write attempted on a store built without edit capability."""


class StoreNotReady(CardStudioError):
    """Write attempted before the draft for this template was hydrated."""

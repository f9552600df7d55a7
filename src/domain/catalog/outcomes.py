"""Result variants produced by a track resolution.

Every variant knows how to render itself as ``(payload, http_status)`` so the
HTTP layer never inspects the shape of a result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from src.domain.catalog.errors import ErrorKind
from src.models.dto import TrackRecord

NOT_FOUND_MESSAGE = "Track not found on Spotify. Try different search terms or add manually."


@dataclass(frozen=True)
class Single:
    record: TrackRecord

    label = "single"

    def to_response(self) -> Tuple[dict, int]:
        return self.record.to_payload(), 200


@dataclass(frozen=True)
class Multiple:
    records: Tuple[TrackRecord, ...]

    label = "multiple"

    def __post_init__(self) -> None:
        if len(self.records) < 2:
            raise ValueError("Multiple requires at least two records")

    def to_response(self) -> Tuple[dict, int]:
        return {"results": [record.to_payload() for record in self.records], "multiple": True}, 200


@dataclass(frozen=True)
class NotFound:
    label = "not_found"

    def to_response(self) -> Tuple[dict, int]:
        # A structural miss answers 500, which is what existing clients expect.
        return {"error": NOT_FOUND_MESSAGE}, 500


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    status: Optional[int] = None

    @property
    def label(self) -> str:
        return self.kind.value

    def to_response(self) -> Tuple[dict, int]:
        return {"error": self.message}, 500


ResolutionOutcome = Union[Single, Multiple, NotFound, Failure]

__all__ = [
    "NOT_FOUND_MESSAGE",
    "Single",
    "Multiple",
    "NotFound",
    "Failure",
    "ResolutionOutcome",
]

# mehu/domain/entities/media.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind


@dataclass(frozen=True)
class MediaIdentity:
    """
    Identity pair of a media item: the opaque file reference issued by the
    Bot API plus the media kind. The pair is globally unique.
    """
    file_reference: str
    kind: MediaKind

    def __post_init__(self) -> None:
        if not self.file_reference:
            raise ValueError("file_reference is required")
        if not isinstance(self.kind, MediaKind):
            object.__setattr__(self, "kind", MediaKind(self.kind))

    def as_key(self) -> Tuple[str, str]:
        return (self.file_reference, self.kind.value)


@dataclass(frozen=True)
class Media:
    id: int
    file_reference: str
    kind: MediaKind
    score: int = 0  # aggregate tag counter when produced by a ranked query

    @property
    def identity(self) -> MediaIdentity:
        return MediaIdentity(self.file_reference, self.kind)


@dataclass(frozen=True)
class Tag:
    id: int
    media_id: int
    text: str
    counter: int = 0


@dataclass(frozen=True)
class Access:
    id: int
    media_id: int
    owner_id: int
    owner_kind: OwnerKind

# mehu/domain/dataclasses/events.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from mehu.domain.enums.action_kind import ActionKind
from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind

# signed 64-bit: the widest integer the store can bind
ID_MIN, ID_MAX = -(2 ** 63), 2 ** 63 - 1


def parse_id(raw: object) -> Optional[int]:
    """Parse an echoed numeric id; None when it is not an integer or out of range."""
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if ID_MIN <= value <= ID_MAX else None


# ---------------------------------------------------------------------------
# Typed events produced by the classifier and consumed by the Dispatcher.
# All of them are immutable values; they cross the poller thread boundary.
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class InlineQuery:
    query_id: str
    query_text: str
    from_id: Optional[int] = None


@dataclass(frozen=True)
class SelectedResult:
    """A user picked one of our inline results. ``result_id`` is echoed back verbatim."""
    result_id: str
    query_text: str

    @property
    def media_id(self) -> Optional[int]:
        return parse_id(self.result_id)


@dataclass(frozen=True)
class IncomingMedia:
    file_reference: str
    kind: MediaKind
    caption_tags: Tuple[str, ...] = ()
    owner_id: Optional[int] = None
    owner_kind: Optional[OwnerKind] = None


@dataclass(frozen=True)
class IncomingDocument:
    file_reference: str
    mime_type: str
    caption_tags: Tuple[str, ...] = ()
    owner_id: Optional[int] = None
    owner_kind: Optional[OwnerKind] = None


@dataclass(frozen=True)
class InteractiveAction:
    action_kind: ActionKind
    subject_id: int
    callback_id: str = ""
    from_id: Optional[int] = None


@dataclass(frozen=True)
class ReplyToPrompt:
    prompt_message_id: int
    reply_text: str


@dataclass(frozen=True)
class NoEvent:
    """Returned by non-blocking receives when the channel is empty."""


Event = Union[
    InlineQuery,
    SelectedResult,
    IncomingMedia,
    IncomingDocument,
    InteractiveAction,
    ReplyToPrompt,
]

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from mehu.services.telegram.schemas import InlineResult


class BotApiPort(Protocol):
    """Outbound operations the Dispatcher issues against the remote bot API."""

    def send_request(self, method: str, payload: Mapping[str, Any]) -> Any: ...

    def answer_query(self, query_id: str, items: Sequence["InlineResult"], *, cache_time: int = 0) -> None: ...

    def send_photo_with_prompt(self, target_id: int, file_reference: str, prompt_text: str) -> int: ...

    def answer_callback(self, callback_id: str, text: Optional[str] = None) -> None: ...

# mehu/services/dispatch/correlator.py
from __future__ import annotations

from typing import Dict, Optional


class Correlator:
    """
    Outgoing prompt message id -> media id awaiting tags.

    In-memory only and owned by the dispatcher thread. Entries are consumed
    once by ``take``; prompts that never get a reply stay until restart.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, int] = {}

    def register(self, prompt_message_id: int, media_id: int) -> None:
        self._pending[prompt_message_id] = media_id

    def peek(self, prompt_message_id: int) -> Optional[int]:
        return self._pending.get(prompt_message_id)

    def take(self, prompt_message_id: int) -> Optional[int]:
        return self._pending.pop(prompt_message_id, None)

    def pending(self) -> Dict[int, int]:
        return dict(self._pending)

    def __contains__(self, prompt_message_id: object) -> bool:
        return prompt_message_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

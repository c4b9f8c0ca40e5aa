from __future__ import annotations

from typing import Any, List, Optional, Tuple

import pytest

from mehu.common.settings import DispatchConfig
from mehu.domain.errors import TransportError
from mehu.services.dispatch.correlator import Correlator
from mehu.services.dispatch.dispatcher import Dispatcher


class FakeBot:
    """Records outbound calls; set ``fail`` to a method name to make it raise."""

    def __init__(self, next_message_id: int = 900) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.next_message_id = next_message_id
        self.fail: Optional[str] = None

    def _maybe_fail(self, name: str) -> None:
        if self.fail == name:
            raise TransportError(f"{name}: simulated outage")

    def send_request(self, method, payload):
        self.calls.append((method, payload))
        return True

    def answer_query(self, query_id, items, *, cache_time=0):
        self.calls.append(("answer_query", (query_id, list(items), cache_time)))
        self._maybe_fail("answer_query")

    def send_photo_with_prompt(self, target_id, file_reference, prompt_text) -> int:
        self.calls.append(("send_photo_with_prompt", (target_id, file_reference, prompt_text)))
        self._maybe_fail("send_photo_with_prompt")
        mid = self.next_message_id
        self.next_message_id += 1
        return mid

    def answer_callback(self, callback_id, text=None):
        self.calls.append(("answer_callback", callback_id))
        self._maybe_fail("answer_callback")

    def named(self, name: str) -> List[Any]:
        return [args for (n, args) in self.calls if n == name]


@pytest.fixture()
def bot() -> FakeBot:
    return FakeBot()


@pytest.fixture()
def dispatch_cfg() -> DispatchConfig:
    return DispatchConfig(tag_prompt_text="tags?", record_access=True)


@pytest.fixture()
def dispatcher(store, bot, dispatch_cfg) -> Dispatcher:
    return Dispatcher(store, bot, Correlator(), cfg=dispatch_cfg)

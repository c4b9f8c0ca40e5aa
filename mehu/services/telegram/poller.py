# mehu/services/telegram/poller.py
from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Iterator, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from mehu.common.logging import get_logger
from mehu.common.settings import TelegramConfig
from mehu.domain.dataclasses.events import Event, NoEvent
from mehu.domain.errors import MalformedResponse, TransportError
from mehu.services.telegram.classifier import classify_update
from mehu.services.telegram.client import BotApiClient
from mehu.services.telegram.schemas import (
    AnswerCallbackQuery,
    AnswerInlineQuery,
    ForceReply,
    InlineResult,
    Message,
    SendPhoto,
    Update,
)

logger = get_logger(__name__)


class ChannelClosed(Exception):
    """The event channel is closed and fully drained."""


class EventChannel:
    """
    Bounded, single-producer/single-consumer event queue between the poller
    thread and the dispatcher.

    Either side may close it: the poller closes it when it stops, the
    consumer closes it to tell the poller nobody is listening any more.
    Queued events stay readable after close until drained.
    """

    def __init__(self, maxsize: int = 100, *, poll_interval: float = 0.25) -> None:
        self._q: "queue.Queue[Event]" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()
        self.poll_interval = poll_interval

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def put(self, event: Event, *, stop: Optional[threading.Event] = None) -> bool:
        """Block until there is room. False if the channel closed or ``stop`` fired first."""
        while not self._closed.is_set():
            if stop is not None and stop.is_set():
                return False
            try:
                self._q.put(event, timeout=self.poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def try_receive(self) -> Union[Event, NoEvent]:
        try:
            return self._q.get_nowait()
        except queue.Empty:
            if self._closed.is_set():
                raise ChannelClosed()
            return NoEvent()

    def __iter__(self) -> Iterator[Event]:
        while True:
            try:
                yield self._q.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._closed.is_set():
                    return

    def qsize(self) -> int:
        return self._q.qsize()


class PollerState(StrEnum):
    idle = "idle"
    fetching = "fetching"
    delivering = "delivering"
    stopped = "stopped"


@dataclass
class PollerStats:
    start_ts: float
    polls: int = 0
    failures: int = 0
    updates_received: int = 0
    events_delivered: int = 0

    @property
    def uptime_sec(self) -> float:
        return time.time() - self.start_ts


class Poller:
    """
    Background long-poll loop over ``getUpdates``.

    - Owns the update cursor: after a decoded batch the next offset is
      ``max(update_id) + 1`` and never moves backwards.
    - Transport/decoding failures are logged, the cursor stays put, and the
      loop retries after ``retry_delay`` seconds. No retry budget.
    - Events go onto a bounded EventChannel in API order; a full channel
      blocks the loop rather than dropping.
    - ``stop()`` (or leaving the ``with`` block) ends the loop after the
      in-flight poll returns; the channel is then closed.
    - Outbound sends go through ``send_request`` on the same client; the
      typed helpers make the poller the dispatcher's BotApiPort.
    """

    def __init__(
        self,
        client: BotApiClient,
        *,
        poll_timeout: int = 60,
        retry_delay: float = 1.0,
        queue_maxsize: int = 100,
        allowed_updates: Optional[Sequence[str]] = None,
        classify: Callable[[Update], Optional[Event]] = classify_update,
        offset: Optional[int] = None,
    ) -> None:
        self._client = client
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.allowed_updates = list(allowed_updates) if allowed_updates else None
        self._classify = classify

        self._offset = offset
        self._last_ok = True
        self._state = PollerState.idle
        self._stats = PollerStats(start_ts=time.time())
        self._lock = threading.Lock()

        self._stop = threading.Event()
        self._channel = EventChannel(maxsize=queue_maxsize)
        self._thread: Optional[threading.Thread] = None
        self._failure: Optional[BaseException] = None

    @classmethod
    def from_settings(cls, client: BotApiClient, cfg: TelegramConfig) -> "Poller":
        """Build from a TelegramConfig."""
        return cls(
            client,
            poll_timeout=cfg.poll_timeout_sec,
            retry_delay=cfg.retry_delay_sec,
            queue_maxsize=cfg.queue_maxsize,
            allowed_updates=cfg.allowed_updates,
        )

    # -------------------------
    # Introspection
    # -------------------------
    @property
    def offset(self) -> Optional[int]:
        return self._offset

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def events(self) -> EventChannel:
        return self._channel

    def stats(self) -> PollerStats:
        """Return a *snapshot* of current stats."""
        with self._lock:
            return PollerStats(
                start_ts=self._stats.start_ts,
                polls=self._stats.polls,
                failures=self._stats.failures,
                updates_received=self._stats.updates_received,
                events_delivered=self._stats.events_delivered,
            )

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def failure(self) -> Optional[BaseException]:
        """The exception that ended the loop, if it did not stop on request."""
        return self._failure

    # -------------------------
    # One iteration
    # -------------------------
    def poll_once(self) -> List[Event]:
        """
        One getUpdates round trip. Returns the classified events (possibly
        empty). On failure returns [] and leaves the cursor untouched.
        """
        self._state = PollerState.fetching
        with self._lock:
            self._stats.polls += 1
        try:
            updates = self._client.get_updates(
                offset=self._offset,
                timeout=self.poll_timeout,
                allowed_updates=self.allowed_updates,
            )
        except TransportError as e:
            self._last_ok = False
            with self._lock:
                self._stats.failures += 1
            logger.warning("getUpdates failed (offset=%s): %s", self._offset, e)
            return []

        self._last_ok = True
        if not updates:
            return []

        out: List[Event] = []
        for u in updates:
            try:
                event = self._classify(u)
            except Exception:
                # one bad update must not stall the cursor on the whole batch
                logger.exception("Skipping update %s: classification failed", u.update_id)
                continue
            if event is not None:
                out.append(event)

        next_offset = max(u.update_id for u in updates) + 1
        if self._offset is None or next_offset > self._offset:
            self._offset = next_offset
        with self._lock:
            self._stats.updates_received += len(updates)
        logger.debug("Fetched %d update(s), %d event(s); next offset %s", len(updates), len(out), self._offset)
        return out

    # -------------------------
    # Outbound sends (BotApiPort)
    # -------------------------
    def send_request(self, method: str, payload: Mapping[str, Any] | BaseModel) -> Any:
        """Synchronous outbound call on the poller's client. Failures raise; nothing is retried."""
        return self._client.send_request(method, payload)

    def answer_query(self, query_id: str, items: Sequence[InlineResult], *, cache_time: int = 0) -> None:
        req = AnswerInlineQuery(inline_query_id=query_id, results=list(items), cache_time=cache_time)
        self.send_request("answerInlineQuery", req)

    def send_photo_with_prompt(self, target_id: int, file_reference: str, prompt_text: str) -> int:
        """Send a cached photo with a forced-reply prompt; returns the new message id."""
        req = SendPhoto(chat_id=target_id, photo=file_reference, caption=prompt_text, reply_markup=ForceReply())
        result = self.send_request("sendPhoto", req)
        try:
            return Message.model_validate(result).message_id
        except ValidationError as e:
            raise MalformedResponse(f"sendPhoto: {e}") from e

    def answer_callback(self, callback_id: str, text: Optional[str] = None) -> None:
        self.send_request("answerCallbackQuery", AnswerCallbackQuery(callback_query_id=callback_id, text=text))

    # -------------------------
    # Lifecycle
    # -------------------------
    def start(self) -> EventChannel:
        """Spawn the polling thread and return the channel it feeds. Does not block."""
        if self._thread is not None:
            raise RuntimeError("poller already started")
        self._thread = threading.Thread(target=self._run, name="mehu-poller", daemon=True)
        self._thread.start()
        return self._channel

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Ask the loop to exit after the current iteration. Safe to call multiple times."""
        self._stop.set()
        t = self._thread
        if wait and t is not None and t is not threading.current_thread():
            t.join(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def __enter__(self) -> "Poller":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop(wait=True)

    def _should_stop(self) -> bool:
        # consumer closing the channel counts as a shutdown request
        return self._stop.is_set() or self._channel.closed

    def _deliver(self, events: List[Event]) -> bool:
        self._state = PollerState.delivering
        for i, event in enumerate(events):
            if not self._channel.put(event, stop=self._stop):
                logger.warning("Shutting down with %d undelivered event(s)", len(events) - i)
                return False
            with self._lock:
                self._stats.events_delivered += 1
        return True

    def _run(self) -> None:
        logger.info("Poller started (offset=%s, timeout=%ss)", self._offset, self.poll_timeout)
        try:
            while not self._should_stop():
                events = self.poll_once()
                if not self._last_ok:
                    self._state = PollerState.idle
                    self._stop.wait(self.retry_delay)
                    continue
                if events and not self._deliver(events):
                    break
                self._state = PollerState.idle
        except Exception as e:
            self._failure = e
            logger.exception("Poller loop crashed")
        finally:
            self._state = PollerState.stopped
            self._channel.close()
            logger.info("Poller stopped (offset=%s)", self._offset)

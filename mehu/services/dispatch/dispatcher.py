# mehu/services/dispatch/dispatcher.py
from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

from mehu.common.logging import get_logger
from mehu.common.settings import DispatchConfig, get_settings
from mehu.common.strings.splitters import words_to_tags
from mehu.database.store import Store
from mehu.domain.dataclasses.events import (
    Event,
    IncomingDocument,
    IncomingMedia,
    InlineQuery,
    InteractiveAction,
    ReplyToPrompt,
    SelectedResult,
)
from mehu.domain.dataclasses.reports import DispatchReport
from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.errors import NotFound, TransportError
from mehu.domain.ports.bot_api import BotApiPort
from mehu.services.dispatch.correlator import Correlator
from mehu.services.mappers.inline_results import to_inline_results

logger = get_logger(__name__)


class Dispatcher:
    """
    Event -> action rulebook. Processes one event completely (store writes,
    correlator updates, outbound sends) before taking the next.

    Error policy:
      - outbound send failures are logged and dropped, never retried
      - NotFound is logged and the event dropped
      - ConstraintViolation (and anything unexpected) propagates and ends run()
    """

    def __init__(
        self,
        store: Store,
        bot: BotApiPort,
        correlator: Optional[Correlator] = None,
        *,
        cfg: Optional[DispatchConfig] = None,
    ) -> None:
        self.store = store
        self.bot = bot
        self.correlator = correlator if correlator is not None else Correlator()
        self.cfg = cfg or get_settings().dispatch
        self.report = DispatchReport()

        self._routes: Dict[type, Callable[..., None]] = {
            InlineQuery: self._on_inline_query,
            SelectedResult: self._on_selected_result,
            IncomingMedia: self._on_incoming_media,
            IncomingDocument: self._on_incoming_document,
            InteractiveAction: self._on_interactive_action,
            ReplyToPrompt: self._on_reply_to_prompt,
        }

    # ------------------------------------------------------------------ loop
    def run(self, events: Iterable[Event]) -> DispatchReport:
        """Consume until ``events`` is exhausted (the channel closed)."""
        self.report.start()
        try:
            for event in events:
                self.dispatch(event)
        finally:
            self.report.stop()
        return self.report

    def dispatch(self, event: Event) -> None:
        self.report.events += 1
        handler = self._routes.get(type(event))
        if handler is None:
            logger.debug("No rule for %s", type(event).__name__)
            self.report.ignored += 1
            return
        handler(event)

    # --------------------------------------------------------------- helpers
    def _send(self, what: str, fn: Callable[[], object]):
        try:
            return True, fn()
        except TransportError as e:
            logger.error("%s failed: %s", what, e)
            self.report.send_failures += 1
            self.report.add_error(what, str(e))
            return False, None

    # ----------------------------------------------------------------- rules
    def _on_inline_query(self, e: InlineQuery) -> None:
        q = e.query_text.strip()
        limit = self.cfg.inline_results_limit
        rows = self.store.query_media_by_tag_prefix(q, limit=limit) if q else self.store.query_media(limit=limit)
        results = to_inline_results(rows, button_text=self.cfg.tag_button_text, limit=limit)

        ok, _ = self._send(
            "answerInlineQuery",
            lambda: self.bot.answer_query(e.query_id, results, cache_time=self.cfg.inline_cache_time_sec),
        )
        if ok:
            self.report.handled += 1
            logger.debug("Answered inline query %s (%r) with %d result(s)", e.query_id, q, len(results))

    def _on_selected_result(self, e: SelectedResult) -> None:
        media_id = e.media_id
        if media_id is None:
            logger.error("Chosen result id %r is not a media id; ignoring", e.result_id)
            self.report.ignored += 1
            self.report.add_error("chosen_inline_result", f"bad result id {e.result_id!r}")
            return
        self.store.bump_tag_counter(media_id, e.query_text.strip())
        self.report.handled += 1

    def _on_incoming_media(self, e: IncomingMedia) -> None:
        media_id = self.store.upsert_media(e.file_reference, e.kind)

        if self.cfg.record_access and e.owner_id is not None and e.owner_kind is not None:
            self.store.record_access(media_id, e.owner_id, e.owner_kind)

        for token in e.caption_tags:
            tag = token.strip().lower()
            if tag:
                self.store.upsert_tag(media_id, tag)
        self.report.handled += 1

    def _on_incoming_document(self, e: IncomingDocument) -> None:
        kind_value = self.cfg.document_kinds.get((e.mime_type or "").lower())
        if kind_value is None:
            logger.debug("Ignoring document with MIME type %r", e.mime_type)
            self.report.ignored += 1
            return
        self._on_incoming_media(
            IncomingMedia(
                file_reference=e.file_reference,
                kind=MediaKind(kind_value),
                caption_tags=e.caption_tags,
                owner_id=e.owner_id,
                owner_kind=e.owner_kind,
            )
        )

    def _on_interactive_action(self, e: InteractiveAction) -> None:
        try:
            self._prompt_for_tags(e)
        finally:
            if e.callback_id:
                self._send("answerCallbackQuery", lambda: self.bot.answer_callback(e.callback_id))

    def _prompt_for_tags(self, e: InteractiveAction) -> None:
        try:
            media = self.store.fetch_media_by_id(e.subject_id)
        except NotFound:
            logger.info("Tag request for unknown media id %s; dropping", e.subject_id)
            self.report.not_found += 1
            return

        if media.kind != MediaKind.photo:
            logger.debug("Media %s is %s; only photos get a tag prompt", media.id, media.kind.value)
            self.report.ignored += 1
            return
        if e.from_id is None:
            logger.warning("Tag request for media %s has no sender; cannot prompt", media.id)
            self.report.ignored += 1
            return

        ok, message_id = self._send(
            "sendPhoto",
            lambda: self.bot.send_photo_with_prompt(e.from_id, media.file_reference, self.cfg.tag_prompt_text),
        )
        if not ok:
            return
        self.correlator.register(message_id, media.id)
        self.report.handled += 1
        logger.info("Awaiting tags for media %s on prompt message %s", media.id, message_id)

    def _on_reply_to_prompt(self, e: ReplyToPrompt) -> None:
        media_id = self.correlator.peek(e.prompt_message_id)
        if media_id is None:
            logger.debug("Reply to message %s is not a pending tag prompt", e.prompt_message_id)
            self.report.ignored += 1
            return

        for tag in words_to_tags(e.reply_text):
            self.store.upsert_tag(media_id, tag)
        self.correlator.take(e.prompt_message_id)
        self.report.handled += 1

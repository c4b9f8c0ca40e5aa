# mehu/services/telegram/classifier.py
from __future__ import annotations

from typing import Optional, Tuple

from mehu.common.logging import get_logger
from mehu.domain.dataclasses import events as ev
from mehu.domain.enums import ActionKind, MediaKind, OwnerKind
from mehu.services.telegram import schemas as wire

logger = get_logger(__name__)


def _caption_tokens(text: Optional[str]) -> Tuple[str, ...]:
    return tuple((text or "").split())


def _owner_of(msg: wire.Message) -> Tuple[Optional[int], Optional[OwnerKind]]:
    """
    private chat -> the sending user; anything else -> the chat as a group.
    """
    if msg.chat is None:
        if msg.from_ is not None:
            return msg.from_.id, OwnerKind.user
        return None, None
    if msg.chat.type == "private":
        uid = msg.from_.id if msg.from_ is not None else msg.chat.id
        return uid, OwnerKind.user
    return msg.chat.id, OwnerKind.group


def classify_message(msg: wire.Message) -> Optional[ev.Event]:
    if msg.reply_to_message is not None and msg.text:
        return ev.ReplyToPrompt(prompt_message_id=msg.reply_to_message.message_id, reply_text=msg.text)

    owner_id, owner_kind = _owner_of(msg)
    if msg.photo:
        # variants arrive smallest first; the last one is the full resolution
        best = msg.photo[-1]
        return ev.IncomingMedia(
            file_reference=best.file_id,
            kind=MediaKind.photo,
            caption_tags=_caption_tokens(msg.caption),
            owner_id=owner_id,
            owner_kind=owner_kind,
        )
    if msg.document is not None:
        return ev.IncomingDocument(
            file_reference=msg.document.file_id,
            mime_type=msg.document.mime_type or "",
            caption_tags=_caption_tokens(msg.caption),
            owner_id=owner_id,
            owner_kind=owner_kind,
        )
    return None


def classify_callback(cb: wire.CallbackQuery) -> Optional[ev.Event]:
    subject_id = ev.parse_id(cb.data or "")
    if subject_id is None:
        logger.warning("Ignoring callback %s with non-numeric or out-of-range payload %r", cb.id, cb.data)
        return None
    return ev.InteractiveAction(
        action_kind=ActionKind.tag,
        subject_id=subject_id,
        callback_id=cb.id,
        from_id=cb.from_.id if cb.from_ is not None else None,
    )


def classify_update(update: wire.Update) -> Optional[ev.Event]:
    """Map one decoded update to a typed event, or None when nothing applies."""
    if update.inline_query is not None:
        q = update.inline_query
        return ev.InlineQuery(
            query_id=q.id,
            query_text=q.query,
            from_id=q.from_.id if q.from_ is not None else None,
        )
    if update.chosen_inline_result is not None:
        r = update.chosen_inline_result
        return ev.SelectedResult(result_id=r.result_id, query_text=r.query)
    if update.callback_query is not None:
        return classify_callback(update.callback_query)
    if update.message is not None:
        return classify_message(update.message)

    logger.debug("Update %s carries nothing we handle", update.update_id)
    return None

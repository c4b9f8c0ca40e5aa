from __future__ import annotations

import pytest

from mehu.common.settings import DispatchConfig
from mehu.domain.dataclasses.events import (
    IncomingDocument,
    IncomingMedia,
    InlineQuery,
    InteractiveAction,
    ReplyToPrompt,
    SelectedResult,
)
from mehu.domain.enums.action_kind import ActionKind
from mehu.domain.enums.media_kind import MediaKind
from mehu.domain.enums.owner_kind import OwnerKind
from mehu.domain.errors import ConstraintViolation
from mehu.services.dispatch.dispatcher import Dispatcher
from mehu.services.telegram.classifier import classify_update
from mehu.services.telegram.schemas import CachedGifResult, CachedMpeg4GifResult, CachedPhotoResult, Update


def _counters(store, media_id):
    return {t.text: t.counter for t in store.tags_for_media(media_id)}


def _tag_action(media_id: int, *, callback_id: str = "cb1", from_id=77) -> InteractiveAction:
    return InteractiveAction(action_kind=ActionKind.tag, subject_id=media_id, callback_id=callback_id, from_id=from_id)


# ---------------------------------------------------------------- ingest

def test_incoming_photo_stores_media_caption_tags_and_owner(dispatcher, store):
    dispatcher.dispatch(IncomingMedia(
        file_reference="F1",
        kind=MediaKind.photo,
        caption_tags=("Red", "car", "RED"),
        owner_id=77,
        owner_kind=OwnerKind.user,
    ))

    mid = store.upsert_media("F1", MediaKind.photo)
    assert _counters(store, mid) == {"red": 0, "car": 0}
    assert [(a.owner_id, a.owner_kind) for a in store.access_for_media(mid)] == [(77, OwnerKind.user)]
    assert dispatcher.report.handled == 1


def test_access_not_recorded_when_disabled(store, bot):
    d = Dispatcher(store, bot, cfg=DispatchConfig(record_access=False))
    d.dispatch(IncomingMedia(file_reference="F2", kind=MediaKind.photo, owner_id=1, owner_kind=OwnerKind.user))
    mid = store.upsert_media("F2", MediaKind.photo)
    assert store.access_for_media(mid) == []


def test_redelivered_media_is_idempotent(dispatcher, store):
    e = IncomingMedia(file_reference="F3", kind=MediaKind.photo, caption_tags=("x",))
    dispatcher.dispatch(e)
    dispatcher.dispatch(e)
    mid = store.upsert_media("F3", MediaKind.photo)
    assert _counters(store, mid) == {"x": 0}
    assert len(store.query_media()) == 1


def test_document_kind_mapping(dispatcher, store):
    dispatcher.dispatch(IncomingDocument(file_reference="D1", mime_type="Video/MP4", caption_tags=("loop",)))
    dispatcher.dispatch(IncomingDocument(file_reference="D2", mime_type="application/pdf", caption_tags=("doc",)))

    rows = store.query_media()
    assert [(r.file_reference, r.kind) for r in rows] == [("D1", MediaKind.animated_gif)]
    assert dispatcher.report.ignored == 1


# ---------------------------------------------------------------- inline

def test_inline_query_empty_lists_everything(dispatcher, store, bot):
    a = store.upsert_media("P", MediaKind.photo)
    b = store.upsert_media("G", MediaKind.animated_gif)
    c = store.upsert_media("V", MediaKind.video_loop)
    for mid in (a, b, c):
        store.upsert_tag(mid, "t")

    dispatcher.dispatch(InlineQuery(query_id="q1", query_text="   "))

    [(query_id, items, cache_time)] = bot.named("answer_query")
    assert query_id == "q1"
    assert cache_time == 0
    assert [type(i) for i in items] == [CachedPhotoResult, CachedGifResult, CachedMpeg4GifResult]
    assert [i.id for i in items] == [str(a), str(b), str(c)]
    # button payload is the media id
    assert items[0].reply_markup.inline_keyboard[0][0].callback_data == str(a)


def test_inline_query_with_text_filters_by_prefix(dispatcher, store, bot):
    car = store.upsert_media("CAR", MediaKind.photo)
    bike = store.upsert_media("BIKE", MediaKind.photo)
    store.upsert_tag(car, "cars")
    store.upsert_tag(bike, "bike")

    dispatcher.dispatch(InlineQuery(query_id="q2", query_text="car"))
    [(_, items, _)] = bot.named("answer_query")
    assert [i.id for i in items] == [str(car)]


def test_inline_query_respects_limit(store, bot):
    for i in range(4):
        store.upsert_tag(store.upsert_media(f"M{i}", MediaKind.photo), "t")
    d = Dispatcher(store, bot, cfg=DispatchConfig(inline_results_limit=2))
    d.dispatch(InlineQuery(query_id="q3", query_text=""))
    [(_, items, _)] = bot.named("answer_query")
    assert len(items) == 2


def test_inline_answer_failure_is_logged_not_raised(dispatcher, bot, caplog):
    bot.fail = "answer_query"
    dispatcher.dispatch(InlineQuery(query_id="q4", query_text=""))
    assert dispatcher.report.send_failures == 1
    assert "answerInlineQuery failed" in caplog.text


# ---------------------------------------------------------------- selection

def test_red_car_selection_bumps_only_matching_tag(dispatcher, store, bot):
    dispatcher.dispatch(IncomingMedia(file_reference="F1", kind=MediaKind.photo, caption_tags=("red", "car")))
    mid = store.upsert_media("F1", MediaKind.photo)

    dispatcher.dispatch(InlineQuery(query_id="q", query_text="red"))
    [(_, items, _)] = bot.named("answer_query")
    assert [i.id for i in items] == [str(mid)]

    dispatcher.dispatch(SelectedResult(result_id=str(mid), query_text="red"))
    assert _counters(store, mid) == {"red": 1, "car": 0}


def test_selection_with_empty_query_bumps_every_tag(dispatcher, store):
    mid = store.upsert_media("F", MediaKind.photo)
    store.upsert_tag(mid, "a")
    store.upsert_tag(mid, "b")
    dispatcher.dispatch(SelectedResult(result_id=str(mid), query_text=""))
    assert _counters(store, mid) == {"a": 1, "b": 1}


def test_selection_with_bad_result_id_is_ignored(dispatcher):
    dispatcher.dispatch(SelectedResult(result_id="not-a-number", query_text="x"))
    assert dispatcher.report.ignored == 1
    assert dispatcher.report.error_details


# ---------------------------------------------------------------- tag prompt

def test_tag_prompt_round_trip(dispatcher, store, bot):
    mid = store.upsert_media("PHOTO", MediaKind.photo)

    dispatcher.dispatch(_tag_action(mid))
    assert bot.named("send_photo_with_prompt") == [(77, "PHOTO", "tags?")]
    assert bot.named("answer_callback") == ["cb1"]
    assert dispatcher.correlator.peek(900) == mid

    dispatcher.dispatch(ReplyToPrompt(prompt_message_id=900, reply_text="Blue  bike"))
    assert _counters(store, mid) == {"blue": 0, "bike": 0}
    assert 900 not in dispatcher.correlator

    # a second reply to the same prompt does nothing
    dispatcher.dispatch(ReplyToPrompt(prompt_message_id=900, reply_text="green"))
    assert _counters(store, mid) == {"blue": 0, "bike": 0}


def test_reply_to_unknown_message_is_ignored(dispatcher):
    dispatcher.dispatch(ReplyToPrompt(prompt_message_id=1, reply_text="hello"))
    assert dispatcher.report.ignored == 1


def test_tag_action_for_missing_media_still_answers_callback(dispatcher, bot):
    dispatcher.dispatch(_tag_action(404))
    assert dispatcher.report.not_found == 1
    assert bot.named("send_photo_with_prompt") == []
    assert bot.named("answer_callback") == ["cb1"]


def test_tag_action_on_non_photo_is_ignored(dispatcher, store, bot):
    mid = store.upsert_media("GIF", MediaKind.animated_gif)
    dispatcher.dispatch(_tag_action(mid))
    assert bot.named("send_photo_with_prompt") == []
    assert len(dispatcher.correlator) == 0


def test_failed_prompt_send_registers_nothing(dispatcher, store, bot):
    mid = store.upsert_media("PHOTO", MediaKind.photo)
    bot.fail = "send_photo_with_prompt"
    dispatcher.dispatch(_tag_action(mid))
    assert len(dispatcher.correlator) == 0
    assert dispatcher.report.send_failures == 1


# ---------------------------------------------------------------- loop

def test_run_consumes_until_exhausted(dispatcher, store):
    report = dispatcher.run([
        IncomingMedia(file_reference="A", kind=MediaKind.photo, caption_tags=("one",)),
        ReplyToPrompt(prompt_message_id=5, reply_text="nope"),
    ])
    assert report.events == 2
    assert report.handled == 1
    assert report.ignored == 1
    assert report.started_at is not None and report.finished_at is not None


def test_constraint_violation_ends_run(dispatcher, store, monkeypatch):
    def _boom(media_id, tag_text):
        raise ConstraintViolation("UNIQUE constraint failed: tag.media_id, tag.tag_text")

    monkeypatch.setattr(store, "upsert_tag", _boom)
    with pytest.raises(ConstraintViolation):
        dispatcher.run([IncomingMedia(file_reference="A", kind=MediaKind.photo, caption_tags=("x",))])
    assert dispatcher.report.finished_at is not None


# ---------------------------------------------------------------- oversized ids

HUGE_ID = "99999999999999999999"


def test_oversized_callback_payload_is_dropped(dispatcher, bot):
    update = Update.model_validate({
        "update_id": 1,
        "callback_query": {"id": "cb9", "from": {"id": 77}, "data": HUGE_ID},
    })
    event = classify_update(update)
    assert event is None

    dispatcher.dispatch(event)
    assert dispatcher.report.ignored == 1
    assert bot.named("send_photo_with_prompt") == []


def test_oversized_subject_id_is_not_found(dispatcher, bot):
    dispatcher.dispatch(_tag_action(int(HUGE_ID)))
    assert dispatcher.report.not_found == 1
    assert bot.named("answer_callback") == ["cb1"]


def test_oversized_selected_result_is_ignored(dispatcher, store):
    mid = store.upsert_media("F", MediaKind.photo)
    store.upsert_tag(mid, "x")

    dispatcher.dispatch(SelectedResult(result_id=HUGE_ID, query_text="x"))
    assert dispatcher.report.ignored == 1
    assert _counters(store, mid) == {"x": 0}

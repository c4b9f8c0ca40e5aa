# mehu/services/mappers/inline_results.py
from __future__ import annotations

from typing import Iterable, List

from mehu.domain.entities.media import Media
from mehu.domain.enums.media_kind import MediaKind
from mehu.services.telegram.schemas import (
    CachedGifResult,
    CachedMpeg4GifResult,
    CachedPhotoResult,
    InlineKeyboardMarkup,
    InlineResult,
)


def to_inline_result(media: Media, *, button_text: str = "Tag") -> InlineResult:
    """
    Map a stored media row to the inline result shape for its kind.
    result id and button payload are both the stringified media id.
    """
    rid = str(media.id)
    keyboard = InlineKeyboardMarkup.single(button_text, rid)
    if media.kind == MediaKind.photo:
        return CachedPhotoResult(id=rid, photo_file_id=media.file_reference, reply_markup=keyboard)
    if media.kind == MediaKind.animated_gif:
        return CachedGifResult(id=rid, gif_file_id=media.file_reference, reply_markup=keyboard)
    if media.kind == MediaKind.video_loop:
        return CachedMpeg4GifResult(id=rid, mpeg4_file_id=media.file_reference, reply_markup=keyboard)
    raise ValueError(f"unsupported media kind: {media.kind!r}")


def to_inline_results(rows: Iterable[Media], *, button_text: str = "Tag", limit: int = 50) -> List[InlineResult]:
    out: List[InlineResult] = []
    for m in rows:
        if len(out) >= limit:
            break
        out.append(to_inline_result(m, button_text=button_text))
    return out

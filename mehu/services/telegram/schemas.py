# mehu/services/telegram/schemas.py
"""
Pydantic models for the subset of the Bot API wire format we read and write.

Inbound models ignore unknown fields so new API additions never break
decoding. Outbound inline results form a closed union keyed by ``type``.
"""
from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Inbound(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ----------------------------- inbound -------------------------------------
class User(_Inbound):
    id: int
    is_bot: bool = False
    first_name: Optional[str] = None
    username: Optional[str] = None


class Chat(_Inbound):
    id: int
    type: str = "private"  # private|group|supergroup|channel


class PhotoSize(_Inbound):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int = 0
    height: int = 0
    file_size: Optional[int] = None


class Document(_Inbound):
    file_id: str
    file_unique_id: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None


class Message(_Inbound):
    message_id: int
    chat: Optional[Chat] = None
    from_: Optional[User] = Field(default=None, alias="from")
    date: Optional[int] = None
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: List[PhotoSize] = Field(default_factory=list)
    document: Optional[Document] = None
    reply_to_message: Optional["Message"] = None


class InlineQuery(_Inbound):
    id: str
    from_: Optional[User] = Field(default=None, alias="from")
    query: str = ""
    offset: str = ""


class ChosenInlineResult(_Inbound):
    result_id: str
    from_: Optional[User] = Field(default=None, alias="from")
    query: str = ""
    inline_message_id: Optional[str] = None


class CallbackQuery(_Inbound):
    id: str
    from_: Optional[User] = Field(default=None, alias="from")
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None


class Update(_Inbound):
    update_id: int
    message: Optional[Message] = None
    inline_query: Optional[InlineQuery] = None
    chosen_inline_result: Optional[ChosenInlineResult] = None
    callback_query: Optional[CallbackQuery] = None


class ApiResponse(_Inbound):
    """Envelope every Bot API method answers with."""
    ok: bool
    result: Any = None
    description: Optional[str] = None
    error_code: Optional[int] = None


class GetUpdatesResponse(ApiResponse):
    result: List[Update] = Field(default_factory=list)


Message.model_rebuild()


# ----------------------------- outbound ------------------------------------
class InlineKeyboardButton(BaseModel):
    text: str
    callback_data: str


class InlineKeyboardMarkup(BaseModel):
    inline_keyboard: List[List[InlineKeyboardButton]]

    @classmethod
    def single(cls, text: str, callback_data: str) -> "InlineKeyboardMarkup":
        return cls(inline_keyboard=[[InlineKeyboardButton(text=text, callback_data=callback_data)]])


class ForceReply(BaseModel):
    force_reply: bool = True
    selective: bool = False


class CachedPhotoResult(BaseModel):
    type: Literal["photo"] = "photo"
    id: str
    photo_file_id: str
    reply_markup: Optional[InlineKeyboardMarkup] = None


class CachedGifResult(BaseModel):
    type: Literal["gif"] = "gif"
    id: str
    gif_file_id: str
    reply_markup: Optional[InlineKeyboardMarkup] = None


class CachedMpeg4GifResult(BaseModel):
    type: Literal["mpeg4_gif"] = "mpeg4_gif"
    id: str
    mpeg4_file_id: str
    reply_markup: Optional[InlineKeyboardMarkup] = None


InlineResult = Union[CachedPhotoResult, CachedGifResult, CachedMpeg4GifResult]


class AnswerInlineQuery(BaseModel):
    inline_query_id: str
    results: List[InlineResult] = Field(default_factory=list)
    cache_time: int = 0
    is_personal: bool = False


class SendPhoto(BaseModel):
    chat_id: int
    photo: str
    caption: Optional[str] = None
    reply_markup: Optional[ForceReply] = None


class AnswerCallbackQuery(BaseModel):
    callback_query_id: str
    text: Optional[str] = None


class GetUpdates(BaseModel):
    offset: Optional[int] = None
    timeout: int = 0
    allowed_updates: Optional[List[str]] = None

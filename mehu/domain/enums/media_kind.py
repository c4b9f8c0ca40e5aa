from __future__ import annotations
from enum import StrEnum

class MediaKind(StrEnum):
    photo = "photo"
    animated_gif = "animated_gif"
    video_loop = "video_loop"

"""Route modules."""

from .auth import router as auth_router
from .comments import router as comments_router
from .dubbing import router as dubbing_router
from .rendered_videos import router as rendered_videos_router
from .tasks import router as tasks_router
from .transcription import router as transcription_router
from .videos import router as videos_router

__all__ = [
    "auth_router",
    "comments_router",
    "dubbing_router",
    "rendered_videos_router",
    "tasks_router",
    "transcription_router",
    "videos_router",
]

"""Entity kinds addressable by the store and the access-control layer."""

from enum import Enum


class EntityKind(str, Enum):
    USER = "user"
    VIDEO = "video"
    TRANSCRIPT = "transcript"
    DUBBING = "dubbing"
    RENDERED_VIDEO = "rendered_video"
    TASK = "task"
    COMMENT = "comment"

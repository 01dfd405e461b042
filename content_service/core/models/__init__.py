"""Database models package.

Import all models here to make them available to Alembic for auto-generation.
"""

from __future__ import annotations

from .aggregates import PostAggregate, TopicAggregate
from .post import Comment, Like, Post, Viewer
from .topic import Follower, Topic
from .user import User

__all__ = [
    "Comment",
    "Follower",
    "Like",
    "Post",
    "PostAggregate",
    "Topic",
    "TopicAggregate",
    "User",
    "Viewer",
]

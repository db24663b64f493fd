from __future__ import annotations

import logging

from ..common.validators import require_non_empty
from ..core.exceptions import ValidationError
from ..policies.context import require_caller
from ..policies.secured import SecuredPosts
from ..profiles.service import ProfileService
from .model import Post

logger = logging.getLogger(__name__)


class PostService:
    """Use case: class announcements (read for everyone in the class, write for teachers)."""

    def __init__(self, posts: SecuredPosts, profiles: ProfileService):
        self._posts = posts
        self._profiles = profiles

    def list_class_posts(self) -> list[Post]:
        me = self._profiles.get_me()
        if not me or not me.class_id:
            return []
        return self._posts.select(class_id=me.class_id)

    def list_my_posts(self) -> list[Post]:
        return self._posts.select(teacher_id=require_caller())

    def create_post(self, *, title: str, content: str) -> Post:
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")

        me = self._profiles.get_me()
        if not me or not me.class_id:
            raise ValidationError("You must be assigned to a class to create posts")

        post = self._posts.insert(teacher_id=me.id, class_id=me.class_id, title=title, content=content)
        logger.info("Post %s created by teacher=%s in class=%s", post.id, me.id, me.class_id)
        return post

    def update_post(self, post_id: str, *, title: str, content: str) -> Post:
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")
        return self._posts.update(post_id, title=title, content=content)

    def delete_post(self, post_id: str) -> None:
        self._posts.delete(post_id)
        logger.info("Post %s deleted by %s", post_id, require_caller())

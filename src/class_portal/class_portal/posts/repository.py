from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Post


class PostRepository(Protocol):
    def get_by_id(self, post_id: str) -> Optional[Post]:
        raise NotImplementedError

    def find(
        self,
        *,
        post_id: Optional[str] = None,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[Post]:
        """Newest first, with ``author_name`` filled."""
        raise NotImplementedError

    def create(self, *, teacher_id: str, class_id: str, title: str, content: str) -> Post:
        raise NotImplementedError

    def update(self, post_id: str, *, title: str, content: str) -> Optional[Post]:
        raise NotImplementedError

    def delete_by_id(self, post_id: str) -> bool:
        raise NotImplementedError

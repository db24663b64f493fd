from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, redirect, request, url_for

from ..common.web import flash_failure, json_error, login_required, teacher_required
from ..container import Container
from ..core.exceptions import DomainError
from .model import Post

logger = logging.getLogger(__name__)


def _post_json(p: Post) -> dict:
    return {
        "id": p.id,
        "title": p.title,
        "content": p.content,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "class_id": p.class_id,
        "teacher_id": p.teacher_id,
        "author_name": p.author_name,
    }


def register(app: Flask, container: Container) -> None:
    def _back_to_posts():
        return redirect(url_for("dashboard", tab="posts"))

    @app.route("/teacher/posts", methods=["POST"], endpoint="post_create")
    @teacher_required
    def post_create():
        try:
            container.post_service.create_post(
                title=request.form.get("title", ""),
                content=request.form.get("content", ""),
            )
            flash("Post created successfully", "success")
        except DomainError as e:
            flash_failure(e, "Failed to create post")
        except Exception:
            logger.exception("Unexpected error while creating post")
            flash("Failed to create post", "danger")
        return _back_to_posts()

    @app.route("/teacher/posts/<post_id>/edit", methods=["POST"], endpoint="post_update")
    @teacher_required
    def post_update(post_id: str):
        try:
            container.post_service.update_post(
                post_id,
                title=request.form.get("title", ""),
                content=request.form.get("content", ""),
            )
            flash("Post updated", "success")
        except DomainError as e:
            flash_failure(e, "Failed to update post")
        except Exception:
            logger.exception("Unexpected error while updating post %s", post_id)
            flash("Failed to update post", "danger")
        return _back_to_posts()

    @app.route("/teacher/posts/<post_id>/delete", methods=["POST"], endpoint="post_delete")
    @teacher_required
    def post_delete(post_id: str):
        try:
            container.post_service.delete_post(post_id)
            flash("Post deleted", "success")
        except DomainError as e:
            flash_failure(e, "Failed to delete post")
        except Exception:
            logger.exception("Unexpected error while deleting post %s", post_id)
            flash("Failed to delete post", "danger")
        return _back_to_posts()

    # ===== JSON =====

    @app.route("/api/posts", methods=["GET"], endpoint="api_posts")
    @login_required
    def api_posts():
        try:
            if request.args.get("mine"):
                posts = container.post_service.list_my_posts()
            else:
                posts = container.post_service.list_class_posts()
            return jsonify({"success": True, "posts": [_post_json(p) for p in posts]})
        except Exception as e:
            if not isinstance(e, DomainError):
                logger.exception("Unexpected error while fetching posts")
            return json_error(e, "Failed to fetch posts")

    @app.route("/api/posts", methods=["POST"], endpoint="api_post_create")
    @login_required
    def api_post_create():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            data = {}
        try:
            post = container.post_service.create_post(title=data.get("title", ""), content=data.get("content", ""))
            return jsonify({"success": True, "post": _post_json(post)}), 201
        except Exception as e:
            if not isinstance(e, DomainError):
                logger.exception("Unexpected error while creating post")
            return json_error(e, "Failed to create post")

from __future__ import annotations

from flask import Blueprint, jsonify

from models.comment import Comment
from models.schemas.comment import (
    CommentCreateSchema,
    CommentNestedCreateSchema,
    CommentUpdateSchema,
    CommentOutSchema,
)
from utils.decorators import AuthenticatedIdentity, auth_required, store_errors
from utils.exceptions import NotFound

from .deps import get_json_body, get_storage, parse_pagination
from .posts import get_post_or_404

bp = Blueprint("comments", __name__, url_prefix="/comment")

create_schema = CommentCreateSchema()
nested_create_schema = CommentNestedCreateSchema()
update_schema = CommentUpdateSchema()
out_schema = CommentOutSchema()
out_list_schema = CommentOutSchema(many=True)


def _get_comment_or_404(comment_id: str) -> Comment:
    comment = get_storage().get(Comment, comment_id)
    if not comment:
        raise NotFound("Comment not found")
    return comment


def _add_comment(post_id: str, content: str, identity: AuthenticatedIdentity) -> Comment:
    storage = get_storage()
    post = get_post_or_404(post_id)
    comment = Comment(post_id=post.id, content=content, author_id=identity.user_id)
    storage.new(comment)
    storage.save()
    return comment


@bp.get("")
@auth_required
@store_errors("Failed to get comments")
def list_comments(identity: AuthenticatedIdentity):
    """
    List all comments
    ---
    tags: [Comments]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    session = get_storage().get_session()
    page, limit = parse_pagination()
    query = session.query(Comment)
    total = query.count()
    rows = query.order_by(Comment.created_at.asc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "data": out_list_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    ), 200


@bp.get("/post/<post_id>")
@auth_required
@store_errors("Failed to get comments")
def list_post_comments(post_id: str, identity: AuthenticatedIdentity):
    """
    List the comments of one post
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: post_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Post not found }
    """
    post = get_post_or_404(post_id)
    session = get_storage().get_session()
    rows = (
        session.query(Comment)
        .filter(Comment.post_id == post.id)
        .order_by(Comment.created_at.asc())
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows)}), 200


@bp.get("/<comment_id>")
@auth_required
@store_errors("Failed to get comment")
def get_comment(comment_id: str, identity: AuthenticatedIdentity):
    """
    Get one comment
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: comment_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Comment not found }
    """
    return jsonify({"data": out_schema.dump(_get_comment_or_404(comment_id))}), 200


@bp.post("")
@auth_required
@store_errors("Failed to create comment")
def create_comment(identity: AuthenticatedIdentity):
    """
    Comment on a post given in the body
    ---
    tags: [Comments]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [postId, content]
          properties:
            postId: { type: string }
            content: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      404: { description: Post not found }
    """
    data = create_schema.load(get_json_body())
    comment = _add_comment(data["post_id"], data["content"], identity)
    return jsonify({"data": out_schema.dump(comment)}), 201


@bp.post("/post/<post_id>")
@auth_required
@store_errors("Failed to create comment")
def create_post_comment(post_id: str, identity: AuthenticatedIdentity):
    """
    Comment on the post in the path
    ---
    tags: [Comments]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - { in: path, name: post_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [content]
          properties:
            content: { type: string }
    responses:
      201: { description: Created }
      404: { description: Post not found }
    """
    data = nested_create_schema.load(get_json_body())
    comment = _add_comment(post_id, data["content"], identity)
    return jsonify({"data": out_schema.dump(comment)}), 201


@bp.put("/<comment_id>")
@auth_required
@store_errors("Failed to update comment")
def update_comment(comment_id: str, identity: AuthenticatedIdentity):
    """
    Edit a comment's content
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: comment_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      200: { description: OK }
      404: { description: Comment not found }
    """
    data = update_schema.load(get_json_body())
    storage = get_storage()
    comment = _get_comment_or_404(comment_id)
    comment.content = data["content"]
    storage.new(comment)
    storage.save()
    return jsonify({"data": out_schema.dump(comment)}), 200


@bp.delete("/<comment_id>")
@auth_required
@store_errors("Failed to delete comment")
def delete_comment(comment_id: str, identity: AuthenticatedIdentity):
    """
    Delete a comment
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: comment_id, type: string, required: true }
    responses:
      200: { description: Deleted }
      404: { description: Comment not found }
    """
    storage = get_storage()
    comment = _get_comment_or_404(comment_id)
    storage.delete(comment)
    storage.save()
    return jsonify({"message": "Comment deleted successfully"}), 200

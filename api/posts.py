from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.post import Post
from models.schemas.common import is_valid_id
from models.schemas.post import PostCreateSchema, PostUpdateSchema, PostOutSchema
from utils.decorators import AuthenticatedIdentity, auth_required, store_errors
from utils.exceptions import NotFound, RequestValidationError

from .deps import get_json_body, get_storage, parse_pagination

bp = Blueprint("posts", __name__, url_prefix="/post")

# Schemas
post_create_schema = PostCreateSchema()
post_update_schema = PostUpdateSchema()
post_out_schema = PostOutSchema()
posts_out_schema = PostOutSchema(many=True)


def get_post_or_404(post_id: str) -> Post:
    post = get_storage().get(Post, post_id)
    if not post:
        raise NotFound("Post not found")
    return post


@bp.post("")
@auth_required
@store_errors("Failed to create post")
def create_post(identity: AuthenticatedIdentity):
    """
    Create a post authored by the caller
    ---
    tags: [Posts]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title, content]
          properties:
            title: { type: string, maxLength: 255 }
            content: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      403: { description: Not authorized }
    """
    data = post_create_schema.load(get_json_body())
    storage = get_storage()
    post = Post(title=data["title"], content=data["content"], sender_id=identity.user_id)
    storage.new(post)
    storage.save()
    return jsonify({"data": post_out_schema.dump(post)}), 201


@bp.get("")
@auth_required
@store_errors("Failed to get posts")
def list_posts(identity: AuthenticatedIdentity):
    """
    List posts, optionally only those of one sender
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: sender, type: string, description: "user id" }
      - { in: query, name: page, type: integer }
      - { in: query, name: limit, type: integer }
    responses:
      200: { description: OK }
      400: { description: Invalid sender id }
    """
    session = get_storage().get_session()
    page, limit = parse_pagination()

    query = session.query(Post)
    sender = request.args.get("sender")
    if sender is not None:
        if not is_valid_id(sender):
            raise RequestValidationError("Invalid sender id")
        query = query.filter(Post.sender_id == sender)

    total = query.count()
    rows = query.order_by(Post.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "data": posts_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    ), 200


@bp.get("/<post_id>")
@auth_required
@store_errors("Failed to get post by ID")
def get_post(post_id: str, identity: AuthenticatedIdentity):
    """
    Get one post
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: post_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Post not found }
    """
    return jsonify({"data": post_out_schema.dump(get_post_or_404(post_id))}), 200


@bp.put("/<post_id>")
@auth_required
@store_errors("Failed to update post")
def update_post(post_id: str, identity: AuthenticatedIdentity):
    """
    Update title and/or content of a post
    ---
    tags: [Posts]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - { in: path, name: post_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            title: { type: string }
            content: { type: string }
    responses:
      200: { description: OK }
      404: { description: Post not found }
    """
    data = post_update_schema.load(get_json_body())
    storage = get_storage()
    post = get_post_or_404(post_id)
    for key, value in data.items():
        setattr(post, key, value)
    storage.new(post)
    storage.save()
    return jsonify({"data": post_out_schema.dump(post)}), 200


@bp.delete("/<post_id>")
@auth_required
@store_errors("Failed to delete post")
def delete_post(post_id: str, identity: AuthenticatedIdentity):
    """
    Delete a post and its comments
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: post_id, type: string, required: true }
    responses:
      200: { description: Deleted }
      404: { description: Post not found }
    """
    storage = get_storage()
    post = get_post_or_404(post_id)
    storage.delete(post)
    storage.save()
    return jsonify({"message": "Post deleted successfully"}), 200

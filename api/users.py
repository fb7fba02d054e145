from __future__ import annotations

from flask import Blueprint, jsonify

from models.user import User
from models.schemas.user import UserOutSchema, UserUpdateSchema
from utils.decorators import AuthenticatedIdentity, auth_required, store_errors
from utils.exceptions import NotFound, RequestValidationError
from utils.security import hash_password

from .deps import get_json_body, get_storage, parse_pagination

bp = Blueprint("users", __name__, url_prefix="/user")

user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)
user_update_schema = UserUpdateSchema()


def _get_user_or_404(user_id: str) -> User:
    user = get_storage().get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@bp.get("")
@auth_required
@store_errors("Failed to get users")
def list_users(identity: AuthenticatedIdentity):
    """
    List all users
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer }
      - { in: query, name: limit, type: integer }
    responses:
      200: { description: OK }
      403: { description: Not authorized }
    """
    session = get_storage().get_session()
    page, limit = parse_pagination()

    query = session.query(User)
    total = query.count()
    rows = query.order_by(User.username.asc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    )


@bp.get("/me")
@auth_required
def me(identity: AuthenticatedIdentity):
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      403:
        description: Not authorized
    """
    return jsonify({"data": user_out_schema.dump(identity.user)}), 200


@bp.get("/<user_id>")
@auth_required
@store_errors("Failed to get user")
def get_user(user_id: str, identity: AuthenticatedIdentity):
    """
    Get a user by id
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: User not found }
    """
    return jsonify({"data": user_out_schema.dump(_get_user_or_404(user_id))}), 200


@bp.put("/<user_id>")
@auth_required
@store_errors("Failed to update user")
def update_user(user_id: str, identity: AuthenticatedIdentity):
    """
    Update a user. Username and email are immutable; only the password may change.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            password: { type: string }
    responses:
      200: { description: OK }
      400: { description: Attempt to change username or email }
      404: { description: User not found }
    """
    payload = get_json_body()
    if "username" in payload or "email" in payload:
        raise RequestValidationError("Updating username or email is not allowed")
    data = user_update_schema.load(payload)

    storage = get_storage()
    user = _get_user_or_404(user_id)
    if "password" in data:
        user.password_hash = hash_password(data["password"])
    storage.new(user)
    storage.save()
    return jsonify(
        {
            "message": "User updated successfully",
            "data": user_out_schema.dump(user),
        }
    ), 200


@bp.delete("/<user_id>")
@auth_required
@store_errors("Failed to delete user")
def delete_user(user_id: str, identity: AuthenticatedIdentity):
    """
    Delete a user along with their posts and comments
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: Deleted }
      404: { description: User not found }
    """
    storage = get_storage()
    user = _get_user_or_404(user_id)
    storage.delete(user)
    storage.save()
    return jsonify({"message": "User deleted successfully"}), 200

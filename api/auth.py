"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/logout
- POST /auth/refresh-token

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and long-lived refresh tokens (JWTs signed
  with HS256, one secret per kind)
- Keeps exactly one refresh token per user, on the user row: set at login,
  cleared at logout, compared byte-for-byte at refresh
"""
from __future__ import annotations

from flask import Blueprint, jsonify

from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserPublicSchema
from utils.decorators import AuthenticatedIdentity, auth_required

from .deps import get_auth_service, get_json_body

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_public_schema = UserPublicSchema()


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password]
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Validation error, or username/email already taken
      500:
        description: Registration failed
    """
    data = user_register_schema.load(get_json_body())
    user = get_auth_service().register(data["username"], data["email"], data["password"])
    return jsonify(
        {
            "message": "User registered successfully",
            "user": user_public_schema.dump(user),
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Invalid credentials
    """
    data = user_login_schema.load(get_json_body())
    tokens = get_auth_service().login(data["email"], data["password"])
    return jsonify({"message": "Login successful", **tokens}), 200


@bp.post("/logout")
@auth_required
def logout(identity: AuthenticatedIdentity):
    """
    Logout: clears the caller's refresh token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      403:
        description: Not authorized
    """
    get_auth_service().logout(identity.user)
    return jsonify({"message": "Logged out successfully"}), 200


@bp.post("/refresh-token")
def refresh_token():
    """
    Use the refresh token to obtain a new access token (no rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New access token
      400:
        description: Missing, invalid or expired refresh token
      403:
        description: Refresh token is not the user's current one
    """
    token = get_json_body().get("refreshToken")
    if token is not None and not isinstance(token, str):
        token = None
    tokens = get_auth_service().refresh(token)
    return jsonify(tokens), 200

from marshmallow import Schema, fields, pre_load, validates, ValidationError, EXCLUDE

from models.schemas.common import not_blank

def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v

class UserRegisterSchema(Schema):
    username = fields.String(required=True, validate=not_blank(64))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if isinstance(data.get("username"), str):
                data["username"] = data["username"].strip()
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value:
            raise ValidationError("Password must not be empty.")

class UserLoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data

class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    password = fields.String(allow_none=False)

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value:
            raise ValidationError("Password must not be empty.")

class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")

class UserPublicSchema(Schema):
    """Projection echoed back on registration."""
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()

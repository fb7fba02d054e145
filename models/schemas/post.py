from marshmallow import Schema, fields, EXCLUDE

from models.schemas.common import not_blank


class PostCreateSchema(Schema):
    class Meta:
        # senderId always comes from the authenticated identity
        unknown = EXCLUDE

    title = fields.String(required=True, validate=not_blank(255))
    content = fields.String(required=True, validate=not_blank())


class PostUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=not_blank(255))
    content = fields.String(validate=not_blank())


class PostOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    content = fields.String()
    sender_id = fields.String(data_key="senderId")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")

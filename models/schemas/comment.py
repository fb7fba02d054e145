from marshmallow import Schema, fields, EXCLUDE

from models.schemas.common import not_blank


class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    post_id = fields.String(data_key="postId", required=True, validate=not_blank(36))
    content = fields.String(required=True, validate=not_blank())


class CommentNestedCreateSchema(Schema):
    """Body for POST /comment/post/<post_id>; the post comes from the path."""

    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=not_blank())


class CommentUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=not_blank())


class CommentOutSchema(Schema):
    id = fields.String()
    post_id = fields.String(data_key="postId")
    author_id = fields.String(data_key="authorId")
    content = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")

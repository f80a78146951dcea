from marshmallow import Schema, fields


class VideoOwnerSchema(Schema):
    id = fields.String()
    username = fields.String()
    fullname = fields.String()
    avatar = fields.String()


class WatchHistoryVideoSchema(Schema):
    id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    video_file = fields.String(data_key="videoFile")
    thumbnail = fields.String(allow_none=True)
    duration = fields.Integer()
    views = fields.Integer()
    is_published = fields.Boolean(data_key="isPublished")
    created_at = fields.DateTime(data_key="createdAt")
    owner = fields.Nested(VideoOwnerSchema)

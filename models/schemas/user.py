from marshmallow import Schema, fields, pre_load, validates, validate, ValidationError, EXCLUDE


def _strip_fields(data, lower=(), strip=()):
    """Return a copy of a load payload with selected string fields normalized."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for key in lower:
        if isinstance(data.get(key), str):
            data[key] = data[key].strip().lower()
    for key in strip:
        if isinstance(data.get(key), str):
            data[key] = data[key].strip()
    return data


class UserRegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=64))
    email = fields.Email(required=True)
    fullname = fields.String(required=True, validate=validate.Length(min=1, max=255))
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip_fields(data, lower=("username", "email"), strip=("fullname",))

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None)
    username = fields.String(load_default=None)
    password = fields.String(load_default=None, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip_fields(data, lower=("username", "email"))


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    current_password = fields.String(required=True, data_key="currentPassword", validate=validate.Length(min=1))
    new_password = fields.String(required=True, data_key="newPassword")

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class UserDetailsUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    fullname = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        return _strip_fields(data, lower=("email",), strip=("fullname",))


class RefreshTokenSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(load_default=None, allow_none=True, data_key="refreshToken")


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    fullname = fields.String()
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class ChannelDetailsOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    fullname = fields.String()
    email = fields.String()
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage")
    subscribers_count = fields.Integer(data_key="subscribersCount")
    subscribed_channel_count = fields.Integer(data_key="subscribedChannelCount")
    is_subscribed = fields.Boolean(data_key="isSubscribed")

from marshmallow import Schema, fields, pre_load, validate, EXCLUDE


class SubscribeSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    channel = fields.String(required=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("channel"), str):
            data = dict(data)
            data["channel"] = data["channel"].strip().lower()
        return data


class SubscriptionOutSchema(Schema):
    id = fields.String()
    subscriber_id = fields.String(data_key="subscriber")
    channel_id = fields.String(data_key="channel")
    created_at = fields.DateTime(data_key="createdAt")

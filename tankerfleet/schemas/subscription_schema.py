from marshmallow import Schema, fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from tankerfleet.models.owner import Owner
from tankerfleet.models.subscription_key import SubscriptionKey
from tankerfleet.utils.timezone_utils import format_datetime_for_api


class OwnerSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Owner
        load_instance = True
    id = auto_field(dump_only=True)
    name = auto_field(validate=validate.Length(min=1, max=128))
    email = auto_field(validate=validate.Email())
    phone = auto_field()
    subscription_key = auto_field(dump_only=True)
    subscription_expires_at = fields.Method('get_expires_at', dump_only=True)

    def get_expires_at(self, obj):
        return format_datetime_for_api(obj.subscription_expires_at) or None


class SubscriptionKeySchema(SQLAlchemyAutoSchema):
    class Meta:
        model = SubscriptionKey
        include_fk = True
    key = auto_field(dump_only=True)
    is_used = auto_field(dump_only=True)
    used_by = auto_field(dump_only=True)
    created_at = fields.Method('get_created_at', dump_only=True)
    expires_at = fields.Method('get_expires_at', dump_only=True)

    def get_created_at(self, obj):
        return format_datetime_for_api(obj.created_at)

    def get_expires_at(self, obj):
        return format_datetime_for_api(obj.expires_at)


class RenewSchema(Schema):
    subscription_key = fields.String(required=True, validate=validate.Length(min=1))

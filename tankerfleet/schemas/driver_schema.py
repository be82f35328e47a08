from marshmallow import Schema, fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from tankerfleet.models.driver import Driver
from tankerfleet.utils.timezone_utils import format_datetime_for_api


class DriverSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Driver
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    owner_id = auto_field(dump_only=True)
    name = auto_field(validate=validate.Length(min=1, max=128))
    phone = auto_field()
    is_active = auto_field()
    device_token = auto_field(load_only=True)
    latitude = auto_field(dump_only=True)
    longitude = auto_field(dump_only=True)
    heading = auto_field(dump_only=True)
    location_updated_at = fields.Method('get_location_updated_at', dump_only=True)

    def get_location_updated_at(self, obj):
        return format_datetime_for_api(obj.location_updated_at) or None


class LocationSchema(Schema):
    latitude = fields.Float(required=True, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(required=True, validate=validate.Range(min=-180, max=180))
    heading = fields.Float(allow_none=True, validate=validate.Range(min=0, max=360))


class DriverLocationSchema(Schema):
    """Fleet map marker."""
    driver_id = fields.Integer(attribute='id')
    name = fields.String()
    latitude = fields.Float()
    longitude = fields.Float()
    heading = fields.Float(allow_none=True)
    location_updated_at = fields.Method('get_location_updated_at')

    def get_location_updated_at(self, obj):
        return format_datetime_for_api(obj.location_updated_at) or None

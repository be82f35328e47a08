from marshmallow import Schema, ValidationError, fields, validate, validates
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from tankerfleet.models.trip import Trip
from tankerfleet.utils.timezone_utils import format_datetime_for_api, parse_datetime_string


class TripSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Trip
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    owner_id = auto_field(dump_only=True)
    driver_id = auto_field()
    route_id = auto_field()
    job_id = auto_field(dump_only=True)
    count = auto_field()
    date = fields.Method('get_date', dump_only=True)
    events = fields.List(fields.Dict(), dump_only=True)
    trip_type = auto_field(dump_only=True)

    def get_date(self, obj):
        return format_datetime_for_api(obj.date)


class ManualTripSchema(Schema):
    driver_id = fields.Integer(required=True)
    route_id = fields.Integer(required=True)
    # ISO datetime or date; naive values are in the display timezone
    date = fields.String(required=True, validate=validate.Length(min=1))
    count = fields.Integer(required=True, validate=validate.Range(min=1))

    @validates('date')
    def validate_date(self, value, **kwargs):
        try:
            parse_datetime_string(value)
        except ValueError as e:
            raise ValidationError(str(e))

from marshmallow import Schema, fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow_sqlalchemy import fields as ma_fields

from tankerfleet.models.job import Job
from tankerfleet.models.job_event import JobEvent
from tankerfleet.services.job_lifecycle import LOGGABLE_KINDS
from tankerfleet.utils.timezone_utils import format_datetime_for_api


class JobEventSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = JobEvent
        include_fk = True
    sequence = auto_field(dump_only=True)
    stop_index = auto_field(dump_only=True)
    location = auto_field(dump_only=True)
    kind = auto_field(dump_only=True)
    action = auto_field(dump_only=True)
    notes = auto_field(dump_only=True)
    timestamp = fields.Method('get_timestamp', dump_only=True)

    def get_timestamp(self, obj):
        return format_datetime_for_api(obj.timestamp)


class JobSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Job
        include_fk = True
    id = auto_field(dump_only=True)
    owner_id = auto_field(dump_only=True)
    driver_id = auto_field(dump_only=True)
    route_id = auto_field(dump_only=True)
    route_name = auto_field(dump_only=True)
    status = auto_field(dump_only=True)
    version = auto_field(dump_only=True)
    assigned_at = fields.Method('get_assigned_at', dump_only=True)
    completed_at = fields.Method('get_completed_at', dump_only=True)
    driver_name = fields.Method('get_driver_name', dump_only=True)
    events = ma_fields.Nested(JobEventSchema, many=True, dump_only=True)

    def get_assigned_at(self, obj):
        return format_datetime_for_api(obj.assigned_at)

    def get_completed_at(self, obj):
        return format_datetime_for_api(obj.completed_at) or None

    def get_driver_name(self, obj):
        return obj.driver.name if obj.driver else None


class JobAssignSchema(Schema):
    driver_id = fields.Integer(required=True)
    route_id = fields.Integer(required=True)


class JobRequestSchema(Schema):
    route_id = fields.Integer(required=True)


class JobActionSchema(Schema):
    stop_index = fields.Integer(required=True, validate=validate.Range(min=0))
    kind = fields.String(required=True, validate=validate.OneOf([k.value for k in LOGGABLE_KINDS]))
    notes = fields.String(load_default="")


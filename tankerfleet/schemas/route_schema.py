from marshmallow import fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from tankerfleet.models.route import Route


class RouteSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Route
        load_instance = False
        include_fk = True
    id = auto_field(dump_only=True)
    owner_id = auto_field(dump_only=True)
    # Defaults to "source → destinations" when left out
    name = auto_field(required=False, validate=validate.Length(max=256))
    source = auto_field(validate=validate.Length(min=1, max=256))
    destinations = fields.List(fields.String(validate=validate.Length(min=1)), required=True,
                               validate=validate.Length(min=1))
    rate_per_trip = auto_field(validate=validate.Range(min=0))
    is_active = auto_field()
    source_coords = fields.Dict(allow_none=True)
    destination_coords = fields.List(fields.Dict(), allow_none=True)
    label = fields.String(dump_only=True)

from marshmallow import ValidationError, validate, validates_schema
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from tankerfleet.models.payout_slab import PayoutSlab


class PayoutSlabSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = PayoutSlab
        load_instance = False
        include_fk = True
    id = auto_field(dump_only=True)
    owner_id = auto_field(dump_only=True)
    min_trips = auto_field(validate=validate.Range(min=0))
    max_trips = auto_field(validate=validate.Range(min=0))
    payout_amount = auto_field(validate=validate.Range(min=0))

    @validates_schema
    def validate_range(self, data, **kwargs):
        if 'min_trips' in data and 'max_trips' in data and data['max_trips'] < data['min_trips']:
            raise ValidationError("max_trips must be greater than or equal to min_trips.", 'max_trips')

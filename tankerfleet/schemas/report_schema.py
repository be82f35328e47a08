from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class SettlementRequestSchema(Schema):
    start_date = fields.Date(required=True)
    end_date = fields.Date(required=True)
    driver_id = fields.Integer(allow_none=True)
    route_id = fields.Integer(allow_none=True)
    # driver id -> amount
    deductions = fields.Dict(keys=fields.Integer(), values=fields.Float(validate=validate.Range(min=0)),
                             load_default=dict)
    paid_amounts = fields.Dict(keys=fields.Integer(), values=fields.Float(validate=validate.Range(min=0)),
                               load_default=dict)

    @validates_schema
    def validate_dates(self, data, **kwargs):
        if data.get('start_date') and data.get('end_date') and data['end_date'] < data['start_date']:
            raise ValidationError("end_date must not be before start_date.", 'end_date')

from sqlalchemy import true
from tankerfleet.extensions import db


class Driver(db.Model):
    __tablename__ = 'driver'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('owner.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, server_default=true())
    # FCM registration token of the driver's device, for job notifications
    device_token = db.Column(db.String(512), nullable=True)

    # Last reported GPS fix
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    heading = db.Column(db.Float, nullable=True)
    location_updated_at = db.Column(db.DateTime, nullable=True)

    owner = db.relationship('Owner', back_populates='drivers', lazy='select')

    @classmethod
    def query_active(cls):
        """Query active drivers only"""
        return cls.query.filter_by(is_active=True)

    @property
    def has_location(self):
        return self.latitude is not None and self.longitude is not None

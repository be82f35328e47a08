from sqlalchemy import true
from sqlalchemy.types import JSON
from tankerfleet.extensions import db


class Route(db.Model):
    __tablename__ = 'route'
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('owner.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(256), nullable=False)
    source = db.Column(db.String(256), nullable=False)
    # Ordered list of destination names
    destinations = db.Column(JSON, nullable=False, default=list)
    rate_per_trip = db.Column(db.Float, nullable=False, default=0.0)
    is_active = db.Column(db.Boolean, default=True, nullable=False, server_default=true())
    # Optional map coordinates: {"latitude": .., "longitude": ..} and a list of the same
    source_coords = db.Column(JSON, nullable=True)
    destination_coords = db.Column(JSON, nullable=True)

    __table_args__ = (
        db.CheckConstraint('rate_per_trip >= 0', name='check_route_rate_non_negative'),
    )

    @staticmethod
    def describe(source, destinations):
        """Human label used as default route name and as trip type."""
        return f"{source} → {', '.join(destinations)}"

    @property
    def label(self):
        return self.describe(self.source, self.destinations or [])

from sqlalchemy import false
from tankerfleet.extensions import db


class SubscriptionKey(db.Model):
    __tablename__ = 'subscription_key'
    key = db.Column(db.String(32), primary_key=True)
    is_used = db.Column(db.Boolean, default=False, nullable=False, server_default=false())
    used_by = db.Column(db.Integer, db.ForeignKey('owner.id', ondelete='SET NULL'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

from tankerfleet.extensions import db


class Owner(db.Model):
    __tablename__ = 'owner'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(128), nullable=True, unique=True)
    phone = db.Column(db.String(32), nullable=True)
    subscription_key = db.Column(db.String(32), nullable=True)
    # Naive UTC
    subscription_expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    drivers = db.relationship('Driver', back_populates='owner', lazy='select')

    def has_active_subscription(self, now):
        """`now` is a naive UTC datetime."""
        return self.subscription_expires_at is not None and self.subscription_expires_at > now

    def __repr__(self):
        return f"<Owner id={self.id} name={self.name!r}>"

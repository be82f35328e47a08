import logging
import uuid
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.owner import Owner
from tankerfleet.models.subscription_key import SubscriptionKey
from tankerfleet.services.errors import NotFoundError, ServiceError
from tankerfleet.utils.timezone_utils import as_naive_utc, utc_now


def generate_key():
    return f"KEY-{uuid.uuid4().hex[:8].upper()}"


class SubscriptionService:
    """Owner subscriptions.

    A key carries the subscription end date it grants. Admin activation
    issues a key and redeems it for the owner in one step; an owner can
    also redeem an unused key handed out by an admin.
    """

    @staticmethod
    def _term():
        return timedelta(days=current_app.config.get('SUBSCRIPTION_TERM_DAYS', 365))

    @staticmethod
    def _get_owner(owner_id):
        owner = db.session.get(Owner, owner_id)
        if not owner:
            raise NotFoundError("Owner not found")
        return owner

    @staticmethod
    def issue_key(now=None):
        now = as_naive_utc(now or utc_now())
        key = SubscriptionKey(key=generate_key(), is_used=False, created_at=now,
                              expires_at=now + SubscriptionService._term())
        try:
            db.session.add(key)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error issuing subscription key: {e}", exc_info=True)
            raise ServiceError("Could not issue subscription key. Please try again later.")
        logging.info(f"Subscription key {key.key} issued, valid until {key.expires_at}")
        return key

    @staticmethod
    def _redeem(owner, key):
        key.is_used = True
        key.used_by = owner.id
        owner.subscription_key = key.key
        owner.subscription_expires_at = key.expires_at

    @staticmethod
    def activate(owner_id, now=None):
        """Admin activation: a fresh key, used straight away by the owner."""
        owner = SubscriptionService._get_owner(owner_id)
        key = SubscriptionService.issue_key(now)
        try:
            SubscriptionService._redeem(owner, key)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error activating subscription for owner {owner_id}: {e}", exc_info=True)
            raise ServiceError("Could not activate subscription. Please try again later.")
        logging.info(f"Subscription activated for owner {owner.id} until {owner.subscription_expires_at}")
        return owner

    @staticmethod
    def renew(owner_id, key_value, now=None):
        now = as_naive_utc(now or utc_now())
        owner = SubscriptionService._get_owner(owner_id)
        key = db.session.get(SubscriptionKey, (key_value or '').strip().upper())
        if not key or key.is_used:
            raise ServiceError("Invalid or already used subscription key.")
        if key.expires_at <= now:
            raise ServiceError("This subscription key has expired.")
        try:
            SubscriptionService._redeem(owner, key)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error renewing subscription for owner {owner_id}: {e}", exc_info=True)
            raise ServiceError("Could not renew subscription. Please try again later.")
        logging.info(f"Owner {owner.id} renewed subscription with key {key.key}")
        return owner

    @staticmethod
    def is_active(owner_id, now=None):
        owner = db.session.get(Owner, owner_id)
        return bool(owner) and owner.has_active_subscription(as_naive_utc(now or utc_now()))

"""
Acting identity for API requests.

Authentication happens in front of this service; the gateway forwards the
caller's role and id in the X-Actor-Role and X-Actor-Id headers.
"""

import functools
import logging
from collections import namedtuple

from flask import g, jsonify, request

from tankerfleet.extensions import db
from tankerfleet.models.driver import Driver
from tankerfleet.models.owner import Owner
from tankerfleet.utils.timezone_utils import as_naive_utc, utc_now

ROLE_HEADER = 'X-Actor-Role'
ID_HEADER = 'X-Actor-Id'
ROLES = ('owner', 'driver', 'admin')

Actor = namedtuple('Actor', ['role', 'id'])


def current_actor():
    """Actor from the request headers, or None when they are missing or malformed."""
    role = (request.headers.get(ROLE_HEADER) or '').strip().lower()
    raw_id = (request.headers.get(ID_HEADER) or '').strip()
    if role not in ROLES or not raw_id.isdigit():
        return None
    return Actor(role, int(raw_id))


def actor_required(*roles):
    """Reject the request unless the caller has one of `roles`. Sets g.actor."""
    def decorator(f):
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            if actor is None:
                return jsonify({'error': 'Authentication required'}), 401
            if roles and actor.role not in roles:
                logging.warning(f"{actor.role} {actor.id} denied access to {request.path}")
                return jsonify({'error': 'Access forbidden'}), 403
            g.actor = actor
            return f(*args, **kwargs)
        return wrapper
    return decorator


def acting_owner_id():
    """Owner whose data the current request works on: the owner, or the driver's owner."""
    actor = g.actor
    if actor.role == 'owner':
        return actor.id
    if actor.role == 'driver':
        driver = db.session.get(Driver, actor.id)
        return driver.owner_id if driver else None
    return None


def subscription_required(f):
    """Owner-scoped endpoints need a live subscription. Use below actor_required."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        if g.actor.role == 'admin':
            return f(*args, **kwargs)
        owner_id = acting_owner_id()
        owner = db.session.get(Owner, owner_id) if owner_id else None
        if owner is None:
            return jsonify({'error': 'Access forbidden'}), 403
        if not owner.has_active_subscription(as_naive_utc(utc_now())):
            return jsonify({'error': 'Subscription expired. Please renew to continue.'}), 402
        return f(*args, **kwargs)
    return wrapper


def can_view_driver(driver):
    """The driver themselves or the owner they work for."""
    actor = g.actor
    if actor.role == 'admin':
        return True
    if actor.role == 'driver':
        return driver.id == actor.id
    return driver.owner_id == actor.id

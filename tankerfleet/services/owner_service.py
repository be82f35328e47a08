import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.owner import Owner
from tankerfleet.services.errors import ServiceError


class OwnerService:
    @staticmethod
    def get_all():
        try:
            return Owner.query.order_by(Owner.name).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching owners: {e}", exc_info=True)
            raise ServiceError("Could not fetch owners. Please try again later.")

    @staticmethod
    def get_by_id(owner_id):
        return db.session.get(Owner, owner_id)

    @staticmethod
    def create(data):
        try:
            owner = Owner(**data)
            db.session.add(owner)
            db.session.commit()
            return owner
        except IntegrityError:
            db.session.rollback()
            raise ServiceError("An owner with this email already exists.")
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error creating owner: {e}", exc_info=True)
            raise ServiceError("Could not create owner. Please try again later.")

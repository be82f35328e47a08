import logging
from sqlalchemy.exc import SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.driver import Driver
from tankerfleet.services.errors import ServiceError
from tankerfleet.utils.timezone_utils import as_naive_utc, utc_now


class DriverService:
    @staticmethod
    def get_all(owner_id, include_inactive=False):
        try:
            query = Driver.query.filter_by(owner_id=owner_id)
            if not include_inactive:
                query = query.filter_by(is_active=True)
            return query.order_by(Driver.name).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching drivers: {e}", exc_info=True)
            raise ServiceError("Could not fetch drivers. Please try again later.")

    @staticmethod
    def get_by_id(owner_id, driver_id):
        try:
            driver = db.session.get(Driver, driver_id)
        except SQLAlchemyError as e:
            logging.error(f"Error fetching driver: {e}", exc_info=True)
            raise ServiceError("Could not fetch driver. Please try again later.")
        if not driver or driver.owner_id != owner_id:
            return None
        return driver

    @staticmethod
    def create(owner_id, data):
        try:
            driver = Driver(owner_id=owner_id, **data)
            db.session.add(driver)
            db.session.commit()
            return driver
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error creating driver: {e}", exc_info=True)
            raise ServiceError("Could not create driver. Please try again later.")

    @staticmethod
    def update(owner_id, driver_id, data):
        driver = DriverService.get_by_id(owner_id, driver_id)
        if not driver:
            return None
        try:
            for key, value in data.items():
                setattr(driver, key, value)
            db.session.commit()
            return driver
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error updating driver: {e}", exc_info=True)
            raise ServiceError("Could not update driver. Please try again later.")

    @staticmethod
    def deactivate(owner_id, driver_id):
        """Drivers keep their trip history, so they are deactivated rather than deleted."""
        driver = DriverService.update(owner_id, driver_id, {'is_active': False})
        if driver:
            logging.info(f"Driver {driver.id} deactivated by owner {owner_id}")
        return driver

    @staticmethod
    def update_location(driver_id, latitude, longitude, heading=None, now=None):
        driver = db.session.get(Driver, driver_id)
        if not driver:
            return None
        try:
            driver.latitude = latitude
            driver.longitude = longitude
            driver.heading = heading
            driver.location_updated_at = as_naive_utc(now or utc_now())
            db.session.commit()
            return driver
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error updating location for driver {driver_id}: {e}", exc_info=True)
            raise ServiceError("Could not update location. Please try again later.")

    @staticmethod
    def fleet_locations(owner_id):
        """Last known position of every active driver that has reported one."""
        return [d for d in DriverService.get_all(owner_id) if d.has_location]

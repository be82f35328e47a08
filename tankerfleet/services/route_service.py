import logging
from sqlalchemy.exc import SQLAlchemyError

from tankerfleet.extensions import db
from tankerfleet.models.route import Route
from tankerfleet.services.errors import ServiceError


class RouteService:
    @staticmethod
    def get_all(owner_id, include_inactive=False):
        try:
            query = Route.query.filter_by(owner_id=owner_id)
            if not include_inactive:
                query = query.filter_by(is_active=True)
            return query.order_by(Route.name).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching routes: {e}", exc_info=True)
            raise ServiceError("Could not fetch routes. Please try again later.")

    @staticmethod
    def get_by_id(owner_id, route_id):
        try:
            route = db.session.get(Route, route_id)
        except SQLAlchemyError as e:
            logging.error(f"Error fetching route: {e}", exc_info=True)
            raise ServiceError("Could not fetch route. Please try again later.")
        if not route or route.owner_id != owner_id:
            return None
        return route

    @staticmethod
    def create(owner_id, data):
        data = dict(data)
        if not data.get('name'):
            data['name'] = Route.describe(data['source'], data.get('destinations') or [])
        try:
            route = Route(owner_id=owner_id, **data)
            db.session.add(route)
            db.session.commit()
            return route
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error creating route: {e}", exc_info=True)
            raise ServiceError("Could not create route. Please try again later.")

    @staticmethod
    def update(owner_id, route_id, data):
        route = RouteService.get_by_id(owner_id, route_id)
        if not route:
            return None
        try:
            for key, value in data.items():
                setattr(route, key, value)
            if not route.name:
                route.name = route.label
            db.session.commit()
            return route
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error updating route: {e}", exc_info=True)
            raise ServiceError("Could not update route. Please try again later.")

    @staticmethod
    def deactivate(owner_id, route_id):
        # Jobs and trips keep pointing at the route, so it is only hidden
        return RouteService.update(owner_id, route_id, {'is_active': False})

import logging

from firebase_admin import messaging
from firebase_admin.exceptions import FirebaseError

from tankerfleet.firebase_client import initialize_firebase

logger = logging.getLogger(__name__)


class PushNotificationService:
    _available = None

    @classmethod
    def is_available(cls):
        if cls._available is None:
            cls._available = initialize_firebase()
            if cls._available:
                logger.info("Firebase features enabled")
            else:
                logger.info("Firebase features disabled - driver notifications unavailable")
        return cls._available

    @classmethod
    def send(cls, token, title, body, data=None) -> bool:
        if not token:
            return False
        if not cls.is_available():
            logger.warning("Firebase not available, skipping notification")
            return False

        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            token=token,
            data={k: str(v) for k, v in (data or {}).items()},
        )
        try:
            response = messaging.send(message)
            logger.info(f"FCM Notification sent: {response}")
            return True
        except (FirebaseError, ValueError) as e:
            logger.error(f"Error sending notification: {e}", exc_info=True)
            return False

    @classmethod
    def notify_job_assigned(cls, driver, job) -> bool:
        """Tell a driver a job is waiting for them. Best effort."""
        return cls.send(
            driver.device_token,
            "New job assigned",
            f"{job.route_name}",
            data={'job_id': job.id, 'status': job.status},
        )

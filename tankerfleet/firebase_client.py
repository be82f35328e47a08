import os
import logging

import firebase_admin
from firebase_admin import credentials

logger = logging.getLogger(__name__)


def initialize_firebase():
    """Initialize the Firebase Admin app from FIREBASE_* environment variables.

    Returns False when credentials are not configured; push notifications are
    then skipped.
    """
    if firebase_admin._apps:
        return True

    private_key = os.getenv("FIREBASE_PRIVATE_KEY")
    if not private_key:
        logger.warning("FIREBASE_PRIVATE_KEY environment variable not set.")
        return False

    cred_dict = {
        "type": os.getenv("FIREBASE_TYPE", "service_account"),
        "project_id": os.getenv("FIREBASE_PROJECT_ID"),
        "private_key_id": os.getenv("FIREBASE_PRIVATE_KEY_ID"),
        "private_key": private_key.replace("\\n", "\n"),
        "client_email": os.getenv("FIREBASE_CLIENT_EMAIL"),
        "client_id": os.getenv("FIREBASE_CLIENT_ID"),
        "auth_uri": os.getenv("FIREBASE_AUTH_URI", "https://accounts.google.com/o/oauth2/auth"),
        "token_uri": os.getenv("FIREBASE_TOKEN_URI", "https://oauth2.googleapis.com/token"),
        "auth_provider_x509_cert_url": os.getenv("FIREBASE_AUTH_PROVIDER_CERT_URL"),
        "client_x509_cert_url": os.getenv("FIREBASE_CLIENT_CERT_URL"),
        "universe_domain": os.getenv("FIREBASE_UNIVERSE_DOMAIN", "googleapis.com"),
    }

    try:
        cred = credentials.Certificate(cred_dict)
        firebase_admin.initialize_app(cred)
    except (ValueError, IOError) as e:
        logger.error(f"Firebase initialization failed: {e}", exc_info=True)
        return False
    logger.info("Firebase initialized successfully")
    return True

import os
from pathlib import Path


class Config:
    """Base configuration - shared across all environments"""

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Reporting timezone used for month boundaries and trip dates
    DISPLAY_TIMEZONE = os.environ.get('DISPLAY_TIMEZONE', 'Asia/Kolkata')

    # Subscriptions
    SUBSCRIPTION_TERM_DAYS = int(os.environ.get('SUBSCRIPTION_TERM_DAYS', 365))

    # Generative insights collaborator
    INSIGHTS_API_URL = os.environ.get(
        'INSIGHTS_API_URL',
        'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent')
    INSIGHTS_API_KEY = os.environ.get('INSIGHTS_API_KEY')
    INSIGHTS_MODEL = os.environ.get('INSIGHTS_MODEL', 'gemini-2.0-flash')
    INSIGHTS_TIMEOUT_SECONDS = int(os.environ.get('INSIGHTS_TIMEOUT_SECONDS', 15))
    PAST_MONTHS_FOR_INSIGHTS = 3

    # Drivers push GPS fixes frequently; keep the limit generous
    LOCATION_UPDATE_RATE_LIMIT = os.environ.get('LOCATION_UPDATE_RATE_LIMIT', '120 per minute')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    FRONTEND_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'FRONTEND_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
        ).split(',')
        if origin.strip()
    ]

    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    LOGS_DIR = os.environ.get('LOGS_DIR', os.path.join(BASE_DIR, 'logs'))


class DevConfig(Config):
    """Development configuration"""
    DEBUG = True
    FLASK_HOST = '0.0.0.0'
    FLASK_PORT = 5000

    STORAGE_PATH = str(Path(__file__).resolve().parents[1] / "tankerfleet-storage" / "database")
    DB_PATH = os.path.join(STORAGE_PATH, 'tankerfleet.db')
    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI', f"sqlite:///{DB_PATH}")


class TestConfig(Config):
    """Test configuration - in-memory database, no external calls"""
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    INSIGHTS_API_KEY = None
    RATELIMIT_ENABLED = False
    LOGS_DIR = None


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    FLASK_HOST = '::'
    FLASK_PORT = 5000

    # Production database - MUST be set via environment
    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI')

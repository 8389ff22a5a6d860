import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration class with all settings as static attributes."""

    # Core configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-change-me'
    DEBUG = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    VERSION = '1.0.0'

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///visits.db'

    # Heroku-style URLs still use the deprecated scheme
    if SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    # Disable track modifications for performance
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # SQLAlchemy engine options
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "pool_pre_ping": True,  # Check connection health before use
    }

    # JSON API only
    WTF_CSRF_ENABLED = False

    # CORS
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', '*')
    CORS_ALLOW_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'X-Dashboard-Password']

    # Dashboard gate, empty means open
    DASHBOARD_PASSWORD = os.environ.get('DASHBOARD_PASSWORD', '').strip()

    # Listing
    LIST_DEFAULT_LIMIT = 100
    LIST_MAX_LIMIT = 500

    # Credential rendering
    SITE_NAME = os.environ.get('SITE_NAME', 'School Open Day')
    QR_BOX_SIZE = 10
    QR_BORDER = 2

    # Directory configuration
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get('SQL_DEBUG', 'false').lower() == 'true'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }

    @staticmethod
    def validate():
        """Production needs real secrets, checked when the app is built."""
        missing = [key for key in ('SECRET_KEY', 'DATABASE_URL') if not os.environ.get(key)]
        if missing:
            raise ValueError(f"{', '.join(missing)} environment variable(s) must be set in production")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    DASHBOARD_PASSWORD = ''
    CORS_ORIGIN = '*'
    LOG_TO_FILE = False


# Configuration dictionary
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}

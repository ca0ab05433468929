import os

ENV_DEVELOPMENT = 'development'


def _postgres_url() -> str:
    """Build a DSN from the libpq-style PG* variables."""
    return 'postgresql://{user}:{password}@{host}:{port}/{dbname}?sslmode={sslmode}'.format(
        user=os.getenv('PGUSER', 'sport'),
        password=os.getenv('PGPASSWORD', 'sport'),
        host=os.getenv('PGHOST', 'localhost'),
        port=os.getenv('PGPORT', '5432'),
        dbname=os.getenv('PGDATABASE', 'sportmanager'),
        sslmode=os.getenv('PGSSLMODE', 'require'),
    )


class Config:
    # Database
    DATABASE_URL = os.getenv('DATABASE_URL') or _postgres_url()
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Server
    PORT = int(os.getenv('PORT', '8080'))
    HEALTH_CHECK_PATH = '/health'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')

    # Match defaults
    DEFAULT_VENUE_NAME = os.getenv('DEFAULT_VENUE_NAME', 'Nova Sports Soccer Field')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv('SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

"""
Configuration settings for Restaurant Analytics
"""

import os


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name, default):
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """Base configuration"""
    # App
    APP_NAME = "Restaurant Analytics"
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Cash-flow forecast
    FORECAST_LOOKBACK_MONTHS = _env_int('FORECAST_LOOKBACK_MONTHS', 3)
    FORECAST_HORIZON_MONTHS = _env_int('FORECAST_HORIZON_MONTHS', 6)
    FORECAST_STARTING_BALANCE = _env_float('FORECAST_STARTING_BALANCE', 0.0)
    FORECAST_MIN_BUFFER = _env_float('FORECAST_MIN_BUFFER', 0.0)

    # Rent / lease schedule
    SCHEDULE_HORIZON_MONTHS = _env_int('SCHEDULE_HORIZON_MONTHS', 12)

    # Alert rules
    FOOD_COST_ALERT_PCT = _env_float('FOOD_COST_ALERT_PCT', 40.0)
    LABOR_ALERT_PCT = _env_float('LABOR_ALERT_PCT', 30.0)
    EBITDA_STREAK_MONTHS = _env_int('EBITDA_STREAK_MONTHS', 2)
    ALERT_OUTLET_DISPLAY_LIMIT = _env_int('ALERT_OUTLET_DISPLAY_LIMIT', 3)


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    LOG_LEVEL = 'WARNING'
    FORECAST_LOOKBACK_MONTHS = 3
    FORECAST_HORIZON_MONTHS = 6
    FORECAST_STARTING_BALANCE = 0.0
    FORECAST_MIN_BUFFER = 0.0
    SCHEDULE_HORIZON_MONTHS = 12
    FOOD_COST_ALERT_PCT = 40.0
    LABOR_ALERT_PCT = 30.0
    EBITDA_STREAK_MONTHS = 2
    ALERT_OUTLET_DISPLAY_LIMIT = 3


# Config mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get config based on environment"""
    env = os.environ.get('ANALYTICS_ENV', 'development')
    return config.get(env, config['default'])

"""
Application configuration settings.
"""
import os

from nasstore import defaults


class Config:
    """Base configuration."""
    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev')

    # CORS settings - default, will be overridden by the config file if available
    CORS_ORIGINS = []

    # File paths
    NASSTORE_CONFIG = defaults.get_config_path()
    FACTORY_CONFIG = defaults.FACTORY_CONFIG
    HOMESERVER_LOG_DIR = defaults.HOMESERVER_LOG_DIR

    # Admin settings - default, will be overridden by the config file
    ADMIN_PIN = '1'

    # Block device queries
    DEV_ROOT = defaults.DEV_ROOT
    SYSFS_ROOT = defaults.SYSFS_ROOT
    BLOCKDEV_BIN = defaults.BLOCKDEV_BIN
    UDEVADM_BIN = defaults.UDEVADM_BIN
    DEVICE_WAIT_MAX = 60  # Upper bound for device wait requests, seconds

    # Shared folder mount units
    SYSTEMCTL_BIN = defaults.SYSTEMCTL_BIN
    SUDO_BIN = defaults.SUDO_BIN
    SYSTEMD_UNIT_DIR = defaults.SYSTEMD_UNIT_DIR
    SHAREDFOLDERS_DIR = defaults.SHAREDFOLDERS_DIR
    MOUNT_UNITS_COMMAND = defaults.MOUNT_UNITS_COMMAND


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    # Use temporary directories for testing
    HOMESERVER_LOG_DIR = '/tmp/test_logs'
    NASSTORE_CONFIG = '/tmp/test_config.json'
    FACTORY_CONFIG = '/tmp/test_config.factory'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False


# Map environment names to config classes
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}

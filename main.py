"""
Main application entry point.
"""
import os

from nasstore import create_app
from config import config

# Get config based on environment
config_name = os.getenv('FLASK_ENV', 'default')
config_class = config[config_name]
app = create_app(config_class)

if __name__ == '__main__':
    app.run(host=os.getenv('NASSTORE_HOST', '127.0.0.1'), port=int(os.getenv('NASSTORE_PORT', '5000')))

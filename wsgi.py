#!/usr/bin/env python3
"""
WSGI entry point for production deployment
"""
import os

from pawcare import create_app

# Create the Flask application
application = create_app(os.getenv('FLASK_ENV', 'production'))

if __name__ == "__main__":
    application.run()

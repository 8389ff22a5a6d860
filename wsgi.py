# wsgi.py
"""
Process entry point: `gunicorn -c gunicorn_config.py` loads `wsgi:app`,
`python wsgi.py` runs the development server.
"""

import os
import atexit

from school_visits import create_app
from school_visits.extensions import db, dispose_engine


def create_application():
    """
    Build the app for this process and release the engine pool at exit.
    Outside production the visits table is created on start, production runs
    `flask db upgrade` instead.
    """
    config_name = os.environ.get('FLASK_ENV', 'development')
    application = create_app(config_name)

    if config_name != 'production':
        with application.app_context():
            db.create_all()

    atexit.register(dispose_engine, application)
    return application


app = create_application()


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = app.config.get('DEBUG', False)

    app.logger.info(f"Development server on port {port} (debug={debug})")
    app.run(host='0.0.0.0', port=port, debug=debug, threaded=True)

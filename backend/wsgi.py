"""
WSGI entry point for the BBT tracker API.

Builds the application from the configuration named by ``FLASK_CONFIG``
(``development`` when unset) so a WSGI server can reference it::

    gunicorn --chdir backend wsgi:app

"""

import os

from bbt_tracker import create_app

app = create_app(os.environ.get('FLASK_CONFIG', 'default'))

__all__ = ["app"]

"""
docserver - a minimal HTTP document server.

Documents below the public folder can be read by anyone with GET, and
created, replaced or removed with PUT and DELETE by the configured user.

This module offers a WSGI application, so any WSGI server can host the
document server with ``docserver:application``. The configuration is taken
from the environment of the process.

"""

import os
import threading

from docserver import config, log
from docserver.app import Application
from docserver.log import logger

VERSION = "1.0.0"

_application = None
_application_lock = threading.Lock()


def _init_application(wsgi_errors):
    global _application
    with _application_lock:
        if _application is not None:
            return
        log.setup()
        with log.register_stream(wsgi_errors):
            configuration = config.load(os.environ)
            log.set_level(configuration.get("logging", "level"))
            for source in configuration.sources():
                logger.info("Loaded %s", source)
            _application = Application(configuration)


def application(environ, start_response):
    """Entry point for external WSGI servers."""
    if _application is None:
        _init_application(environ["wsgi.errors"])
    return _application(environ, start_response)

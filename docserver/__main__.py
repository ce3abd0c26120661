"""
docserver executable module.

This module can be executed from a command line with ``$python -m
docserver``. It takes no arguments, the configuration comes from the
environment.

"""

import os
import signal
import socket
import sys

from docserver import config, log, server
from docserver.log import logger


def run():
    """Run the document server as a standalone program."""
    log.setup()

    try:
        configuration = config.load(os.environ)
    except Exception as e:
        logger.fatal("Invalid configuration: %s", e, exc_info=True)
        sys.exit(1)
    log.set_level(configuration.get("logging", "level"))
    for source in configuration.sources():
        logger.info("Loaded %s", source)

    # Closing one end wakes up the server loop waiting on the other
    shutdown_socket, shutdown_socket_out = socket.socketpair()

    def shutdown_signal_handler(signal_number, stack_frame):
        shutdown_socket.close()
    signal.signal(signal.SIGTERM, shutdown_signal_handler)
    signal.signal(signal.SIGINT, shutdown_signal_handler)

    try:
        server.serve(configuration, shutdown_socket_out)
    except Exception as e:
        logger.fatal("An exception occurred during server startup: %s", e,
                     exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()

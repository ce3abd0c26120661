"""
Built-in WSGI server.

Every connection is served in its own thread and closed after one response.

"""

import select
import socket
import socketserver
import sys
import wsgiref.simple_server
from urllib.parse import unquote, urlsplit

from docserver import httputils
from docserver.app import Application
from docserver.log import logger


def format_address(address):
    host, port = address[:2]
    return "%s:%d" % (host or "*", port)


class ParallelHTTPServer(socketserver.ThreadingMixIn,
                         wsgiref.simple_server.WSGIServer):

    # Don't wait for the request threads when the server is closed
    block_on_close = False
    daemon_threads = True

    def __init__(self, configuration, address, RequestHandlerClass):
        self.configuration = configuration
        super().__init__(address, RequestHandlerClass)

    def get_request(self):
        request, client_address = super().get_request()
        timeout = self.configuration.get("server", "timeout")
        if timeout:
            request.settimeout(timeout)
        return request, client_address

    def handle_error(self, request, client_address):
        if issubclass(sys.exc_info()[0], socket.timeout):
            logger.info("Client timed out", exc_info=True)
        else:
            logger.error("An exception occurred during request: %s",
                         sys.exc_info()[1], exc_info=True)


class ServerHandler(wsgiref.simple_server.ServerHandler):

    # Don't pollute WSGI environ with OS environment
    os_environ = {}
    http_version = "1.1"

    error_headers = [("Content-Type", "text/plain")]
    error_body = httputils.INTERNAL_SERVER_ERROR[2].encode("utf-8")

    def cleanup_headers(self):
        super().cleanup_headers()
        # Hop-by-hop headers can't be set by the WSGI application
        self.headers["Connection"] = "close"
        if "Date" not in self.headers:
            self.headers["Date"] = httputils.http_date()

    def finish_content(self):
        # The parent class sets "Content-Length: 0" on empty responses
        if not self.headers_sent and self.status.startswith("204"):
            self.send_headers()
        else:
            super().finish_content()

    def log_exception(self, exc_info):
        logger.error("An exception occurred during request: %s",
                     exc_info[1], exc_info=exc_info)


class RequestHandler(wsgiref.simple_server.WSGIRequestHandler):
    """HTTP requests handler for WSGI applications."""

    def log_request(self, code="-", size="-"):
        pass  # Disable request logging.

    def log_error(self, format_, *args):
        logger.error("An error occurred during request: %s", format_ % args)

    def get_environ(self):
        env = super().get_environ()
        target = self.path
        if not target.startswith("/"):
            # Absolute-form request target
            target = urlsplit(target).path or "/"
        # Parent class only tries latin1 encoding
        env["PATH_INFO"] = unquote(target.split("?", 1)[0])
        return env

    def handle(self):
        """Copy of WSGIRequestHandler.handle with different ServerHandler"""

        self.raw_requestline = self.rfile.readline(65537)
        if len(self.raw_requestline) > 65536:
            self.requestline = ""
            self.request_version = ""
            self.command = ""
            self.send_error(414)
            return

        if not self.parse_request():
            return

        handler = ServerHandler(
            self.rfile, self.wfile, self.get_stderr(), self.get_environ()
        )
        handler.request_handler = self
        handler.run(self.server.get_app())


def serve(configuration, shutdown_socket=None):
    """Serve the document server with the built-in server.

    Runs until ``shutdown_socket`` becomes readable (e.g. it was closed on the
    other end) or forever when it is ``None``.

    """
    logger.info("Starting docserver")

    application = Application(configuration)
    address = (configuration.get("server", "host"),
               configuration.get("server", "port"))
    try:
        server = ParallelHTTPServer(configuration, address, RequestHandler)
    except OSError as e:
        raise RuntimeError("Failed to start server %r: %s" % (
            format_address(address), e)) from e
    server.set_app(application)
    try:
        logger.info("Listening on %s", format_address(server.server_address))
        logger.info("Serving files from %r",
                    configuration.get("storage", "public_folder"))
        rlist = [server.socket]
        if shutdown_socket is not None:
            rlist.append(shutdown_socket)
        while True:
            readable, _, _ = select.select(rlist, [], [])
            if shutdown_socket in readable:
                logger.info("Stopping docserver")
                break
            if server.socket in readable:
                server.handle_request()
    finally:
        server.server_close()

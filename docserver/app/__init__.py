"""
The document server as a WSGI application.

``Application`` dispatches every request to the ``do_<METHOD>`` method of
one of its mixins. Those return ``(status, headers, answer)`` triples that
``_handle_request`` turns into the WSGI response.

"""

import datetime
import pprint
import time
from http import client

from docserver import auth, httputils, log, pathutils
from docserver.app.delete import ApplicationDeleteMixin
from docserver.app.get import ApplicationGetMixin
from docserver.app.put import ApplicationPutMixin
from docserver.log import logger


class Application(
        ApplicationDeleteMixin, ApplicationGetMixin, ApplicationPutMixin):

    def __init__(self, configuration):
        """Initialize Application.

        ``configuration`` see ``docserver.config`` module. It is read once
        here; later changes to it have no effect on this instance.

        """
        super().__init__()
        self.configuration = configuration
        self._auth = auth.Auth(configuration)
        self._public_folder = configuration.get("storage", "public_folder")
        self._realm = configuration.get("auth", "realm")
        self._auth_delay = configuration.get("auth", "delay")
        self._max_content_length = configuration.get(
            "server", "max_content_length")
        self._mask_passwords = configuration.get("logging", "mask_passwords")

    def _headers_log(self, environ):
        """Sanitize headers for logging."""
        request_environ = dict(environ)

        authorization = request_environ.get("HTTP_AUTHORIZATION", "")
        if self._mask_passwords and authorization.startswith("Basic"):
            request_environ["HTTP_AUTHORIZATION"] = "Basic **masked**"
        if request_environ.get("HTTP_COOKIE"):
            request_environ["HTTP_COOKIE"] = "**masked**"

        return request_environ

    def __call__(self, environ, start_response):
        with log.register_stream(environ["wsgi.errors"]):
            try:
                status, headers, answers = self._handle_request(environ)
            except Exception as e:
                try:
                    method = str(environ["REQUEST_METHOD"])
                except Exception:
                    method = "unknown"
                try:
                    path = str(environ.get("PATH_INFO", ""))
                except Exception:
                    path = ""
                logger.error("An exception occurred during %s request on %r: "
                             "%s", method, path, e, exc_info=True)
                status, headers, answer = httputils.INTERNAL_SERVER_ERROR
                answer = answer.encode("utf-8")
                status = "%d %s" % (
                    status, client.responses.get(status, "Unknown"))
                headers = list(headers) + [
                    ("Content-Length", str(len(answer))),
                    ("Date", httputils.http_date())]
                answers = [answer]
            start_response(status, headers)
        return answers

    def _handle_request(self, environ):
        """Manage a request."""
        def response(status, headers=(), answer=None):
            headers = dict(headers)
            if status == client.NO_CONTENT:
                headers.pop("Content-Type", None)
                answer = None
            else:
                if answer is None:
                    answer = b""
                elif hasattr(answer, "encode"):
                    answer = answer.encode("utf-8")
                headers["Content-Length"] = str(len(answer))
            headers["Date"] = httputils.http_date()

            time_end = datetime.datetime.now()
            status = "%d %s" % (
                status, client.responses.get(status, "Unknown"))
            logger.info(
                "%s response status for %r in %.3f seconds: %s",
                environ["REQUEST_METHOD"], environ.get("PATH_INFO", ""),
                (time_end - time_begin).total_seconds(), status)
            return status, list(headers.items()), [answer] if answer else []

        remote_host = "unknown"
        if environ.get("REMOTE_HOST"):
            remote_host = repr(environ["REMOTE_HOST"])
        elif environ.get("REMOTE_ADDR"):
            remote_host = environ["REMOTE_ADDR"]
        if environ.get("HTTP_X_FORWARDED_FOR"):
            remote_host = "%s (forwarded for %r)" % (
                remote_host, environ["HTTP_X_FORWARDED_FOR"])
        remote_useragent = ""
        if environ.get("HTTP_USER_AGENT"):
            remote_useragent = " using %r" % environ["HTTP_USER_AGENT"]
        time_begin = datetime.datetime.now()
        logger.info(
            "%s request for %r received from %s%s",
            environ["REQUEST_METHOD"], environ.get("PATH_INFO", ""),
            remote_host, remote_useragent)
        logger.debug("Request headers:\n%s",
                     pprint.pformat(self._headers_log(environ)))

        function = getattr(self, "do_%s" % environ["REQUEST_METHOD"], None)
        if not function:
            return response(*httputils.METHOD_NOT_ALLOWED)

        path = environ.get("PATH_INFO", "")
        try:
            filesystem_path = pathutils.resolve_public_path(
                self._public_folder, path)
        except pathutils.UnsafePathError as e:
            logger.info("Refused path outside of public folder %r: %s",
                        path, e)
            return response(*httputils.FORBIDDEN)
        logger.debug("Resolved path %r to %r", path, filesystem_path)

        return response(*function(environ, path, filesystem_path))

    def _authorized(self, environ):
        """Check the Basic credentials of the request."""
        credentials = auth.parse_basic_authorization(
            environ.get("HTTP_AUTHORIZATION", ""))
        if credentials is None:
            logger.debug("Missing or malformed credentials")
            return False
        login, password = credentials
        if self._auth.login(login, password):
            logger.debug("Successful login: %r", login)
            return True
        logger.info("Failed login attempt: %r", login)
        if self._auth_delay:
            time.sleep(self._auth_delay)
        return False

    def _unauthorized(self):
        logger.debug("Asking client for authentication")
        status, headers, answer = httputils.UNAUTHORIZED
        headers = dict(headers)
        headers["WWW-Authenticate"] = "Basic realm=\"%s\"" % self._realm
        return status, headers, answer

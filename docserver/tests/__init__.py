"""
Tests for the document server.

"""

import base64
import logging
import sys
from io import BytesIO

from docserver import log

# Enable debug output
log.setup(logging.DEBUG)


class BaseTest:
    """Base class for tests."""

    def request(self, method, path, data=None, login=None, **kwargs):
        """Send a request."""
        for key in list(kwargs):
            value = kwargs[key]
            if isinstance(value, str):
                value = value.encode("utf-8").decode("latin1")
            kwargs[key] = value
        if login:
            kwargs["HTTP_AUTHORIZATION"] = "Basic " + base64.b64encode(
                login.encode("utf-8")).decode()
        environ = {"REQUEST_METHOD": method, "PATH_INFO": path}
        if data is not None:
            if isinstance(data, str):
                data = data.encode("utf-8")
            environ["wsgi.input"] = BytesIO(data)
            environ["CONTENT_LENGTH"] = str(len(data))
        environ["wsgi.errors"] = sys.stderr
        environ.update(kwargs)
        status = headers = None

        def start_response(status_, headers_):
            nonlocal status, headers
            status = status_
            headers = headers_
        answers = self.application(environ, start_response)
        assert isinstance(status, str)
        assert isinstance(headers, list)

        return (int(status.split()[0]), dict(headers),
                b"".join(answers))

    @staticmethod
    def _check_status(status, good_status, check=True):
        if check is True:
            assert status == good_status
        elif check is not False:
            assert status == check
        return status == good_status

    def get(self, path, check=True, **kwargs):
        status, headers, answer = self.request("GET", path, **kwargs)
        self._check_status(status, 200, check)
        return status, headers, answer

    def put(self, path, data, check=True, **kwargs):
        status, headers, answer = self.request("PUT", path, data, **kwargs)
        self._check_status(status, 201, check)
        return status, headers, answer

    def delete(self, path, check=True, **kwargs):
        status, headers, answer = self.request("DELETE", path, **kwargs)
        self._check_status(status, 204, check)
        return status, headers, answer

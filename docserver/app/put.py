import os
from http import client

from docserver import httputils
from docserver.log import logger


class ApplicationPutMixin:
    def do_PUT(self, environ, path, filesystem_path):
        """Manage PUT request.

        The whole body replaces the document, missing parent directories
        are created.

        """
        if not self._authorized(environ):
            return self._unauthorized()
        content_length = httputils.content_length(environ)
        if (self._max_content_length and
                content_length > self._max_content_length):
            logger.info("Request body too large: %d", content_length)
            return httputils.REQUEST_ENTITY_TOO_LARGE
        content = httputils.read_raw_request_body(environ)
        try:
            os.makedirs(os.path.dirname(filesystem_path), exist_ok=True)
            existed = os.path.exists(filesystem_path)
            with open(filesystem_path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error("Failed to write %r: %s", filesystem_path, e,
                         exc_info=True)
            return httputils.INTERNAL_SERVER_ERROR
        logger.debug("Wrote %d bytes to %r", len(content), filesystem_path)
        status = client.NO_CONTENT if existed else client.CREATED
        return status, {"Content-Type": "text/plain"}, None

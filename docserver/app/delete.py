import os
from http import client

from docserver import httputils
from docserver.log import logger


class ApplicationDeleteMixin:
    def do_DELETE(self, environ, path, filesystem_path):
        """Manage DELETE request.

        Removal is not recursive: deleting a directory that still has
        content, or the public folder itself, fails with an internal server
        error.

        """
        if not self._authorized(environ):
            return self._unauthorized()
        if not os.path.exists(filesystem_path):
            return httputils.NOT_FOUND
        if filesystem_path == os.path.abspath(self._public_folder):
            logger.error("Refused to delete the public folder %r",
                         filesystem_path)
            return httputils.INTERNAL_SERVER_ERROR
        try:
            if os.path.isdir(filesystem_path):
                os.rmdir(filesystem_path)
            else:
                os.remove(filesystem_path)
        except OSError as e:
            logger.error("Failed to delete %r: %s", filesystem_path, e,
                         exc_info=True)
            return httputils.INTERNAL_SERVER_ERROR
        return client.NO_CONTENT, {}, None

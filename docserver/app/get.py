import os
from http import client

from docserver import httputils, pathutils
from docserver.log import logger


class ApplicationGetMixin:
    def do_GET(self, environ, path, filesystem_path):
        """Manage GET request.

        Documents are readable without authentication. Directories are
        served through their ``index.html``.

        """
        if pathutils.is_directory_request(path):
            target_path = os.path.join(filesystem_path, "index.html")
        else:
            target_path = filesystem_path
        if not os.path.exists(filesystem_path):
            return httputils.NOT_FOUND
        if (not pathutils.is_directory_request(path) and
                os.path.isdir(filesystem_path)):
            logger.debug("Serving index of directory %r", path)
            target_path = os.path.join(filesystem_path, "index.html")
        if not os.path.exists(target_path):
            return httputils.NOT_FOUND
        try:
            with open(target_path, "rb") as f:
                answer = f.read()
        except OSError as e:
            logger.error("Failed to read %r: %s", target_path, e,
                         exc_info=True)
            return httputils.INTERNAL_SERVER_ERROR
        headers = {"Content-Type": httputils.content_type(target_path)}
        return client.OK, headers, answer

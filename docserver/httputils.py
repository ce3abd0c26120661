"""
Helpers for HTTP.

Canned responses are ``(status, headers, answer)`` triples, the format
returned by the ``do_*`` methods of ``docserver.app.Application``.

"""

import os
import time
from http import client

from docserver.log import logger

FORBIDDEN = (
    client.FORBIDDEN, (("Content-Type", "text/plain"),), "Forbidden")
NOT_FOUND = (
    client.NOT_FOUND, (("Content-Type", "text/plain"),), "Not Found")
METHOD_NOT_ALLOWED = (
    client.METHOD_NOT_ALLOWED, (("Content-Type", "text/plain"),),
    "Method Not Allowed")
UNAUTHORIZED = (
    client.UNAUTHORIZED, (("Content-Type", "text/plain"),), "Unauthorized")
REQUEST_ENTITY_TOO_LARGE = (
    client.REQUEST_ENTITY_TOO_LARGE, (("Content-Type", "text/plain"),),
    "Request Entity Too Large")
INTERNAL_SERVER_ERROR = (
    client.INTERNAL_SERVER_ERROR, (("Content-Type", "text/plain"),),
    "Internal Server Error")

MIMETYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".txt": "text/plain",
    ".ico": "image/x-icon",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp"}
FALLBACK_MIMETYPE = "application/octet-stream"


def content_type(filesystem_path):
    """The MIME type of a file, chosen by its extension."""
    return MIMETYPES.get(os.path.splitext(filesystem_path)[1],
                         FALLBACK_MIMETYPE)


def http_date(timestamp=None):
    return time.strftime("%a, %d %b %Y %H:%M:%S GMT",
                         time.gmtime(timestamp))


def content_length(environ):
    try:
        return int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        return 0


def read_raw_request_body(environ):
    length = content_length(environ)
    if not length:
        return b""
    content = environ["wsgi.input"].read(length)
    if len(content) < length:
        raise RuntimeError("Request body too short: %d" % len(content))
    logger.debug("Request body: %d bytes", len(content))
    return content

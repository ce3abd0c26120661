"""
Mapping of request paths to files below the public folder.

The check is purely lexical: symbolic links inside the public folder are
followed by the filesystem calls that use the result.

"""

import os


class UnsafePathError(ValueError):
    def __init__(self, path):
        super().__init__("Can't translate path safely to filesystem: %r" %
                         path)


def is_directory_request(path):
    """Whether ``path`` names a directory (empty or with trailing slash)."""
    return not path or path.endswith("/")


def resolve_public_path(root, path):
    """Translate the decoded request ``path`` to a filesystem path.

    Leading slashes are stripped and the rest is joined to ``root``. The
    normalized result must be ``root`` itself or lie below it, otherwise
    ``UnsafePathError`` is raised.

    """
    if "\x00" in path:
        raise UnsafePathError(path)
    root = os.path.abspath(root)
    relative = path.lstrip("/") or os.curdir
    filesystem_path = os.path.normpath(os.path.join(root, relative))
    if (filesystem_path != root and
            not filesystem_path.startswith(root.rstrip(os.sep) + os.sep)):
        raise UnsafePathError(path)
    return filesystem_path

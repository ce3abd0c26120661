"""
Authentication of the user allowed to modify documents.

There is a single account configured with ``auth.user`` and
``auth.password``. The password is compared in constant time when
``auth.encryption`` is ``plain``. With ``md5`` or ``bcrypt`` the configured
password is an Apache MD5 or bcrypt hash, as produced by ``htpasswd``.

"""

import base64
import binascii
import functools
import hmac

from passlib.hash import apr_md5_crypt


class Auth:
    def __init__(self, configuration):
        self.configuration = configuration
        self._user = configuration.get("auth", "user")
        self._password = configuration.get("auth", "password")
        encryption = configuration.get("auth", "encryption")

        if encryption == "plain":
            self._verify = self._plain
        elif encryption == "md5":
            self._verify = self._md5apr1
        elif encryption == "bcrypt":
            try:
                from passlib.hash import bcrypt
            except ImportError as e:
                raise RuntimeError(
                    "The encryption method 'bcrypt' requires "
                    "the passlib[bcrypt] module.") from e
            bcrypt.hash("test-bcrypt-backend")
            self._verify = functools.partial(self._bcrypt, bcrypt)
        else:
            raise RuntimeError("The encryption method %r is not "
                               "supported." % encryption)

    def _plain(self, hash_value, password):
        return hmac.compare_digest(hash_value.encode(), password.encode())

    def _bcrypt(self, bcrypt, hash_value, password):
        return bcrypt.verify(password, hash_value.strip())

    def _md5apr1(self, hash_value, password):
        return apr_md5_crypt.verify(password, hash_value.strip())

    def login(self, login, password):
        """Check credentials.

        Returns ``login`` when the credentials are valid and an empty string
        otherwise.

        """
        login_ok = hmac.compare_digest(self._user.encode(), login.encode())
        password_ok = self._verify(self._password, password)
        if login_ok and password_ok:
            return login
        return ""


def parse_basic_authorization(authorization):
    """Split a ``Basic`` Authorization header into login and password.

    The decoded credentials are split on the first colon. Returns ``None``
    when the header is missing or malformed.

    """
    if not authorization or not authorization.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(
            authorization[len("Basic "):].strip().encode("ascii"))
        login, sep, password = decoded.decode("utf-8").partition(":")
    except (UnicodeError, binascii.Error):
        return None
    if not sep:
        return None
    return login, password

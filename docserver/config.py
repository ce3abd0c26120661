"""
Configuration of the document server.

The configuration is a layered store: the defaults from
``DEFAULT_CONFIG_SCHEMA`` come first and every later ``update`` (environment,
tests, ...) overrides single options. Values are converted and validated by
the ``type`` of their option when they are added.

"""

import contextlib
import math
import os
from collections import OrderedDict
from configparser import RawConfigParser

DEFAULT_PUBLIC_FOLDER = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "public")

# Environment variables read by ``load`` and the option each one sets.
ENVIRONMENT_OPTIONS = OrderedDict([
    ("PORT", ("server", "port")),
    ("AUTH_USER", ("auth", "user")),
    ("AUTH_PASS", ("auth", "password")),
    ("AUTH_ENCRYPTION", ("auth", "encryption")),
    ("LOG_LEVEL", ("logging", "level"))])


def positive_int(value):
    value = int(value)
    if value < 0:
        raise ValueError("value is negative: %d" % value)
    return value


def port_number(value):
    value = int(value)
    if not 0 <= value <= 65535:
        raise ValueError("port out of range: %d" % value)
    return value


def positive_float(value):
    value = float(value)
    if not math.isfinite(value):
        raise ValueError("value is infinite")
    if math.isnan(value):
        raise ValueError("value is not a number")
    if value < 0:
        raise ValueError("value is negative: %f" % value)
    return value


def logging_level(value):
    value = value.lower()
    if value not in ("debug", "info", "warning", "error", "critical"):
        raise ValueError("unsupported level: %r" % value)
    return value


def encryption_method(value):
    if value not in ("plain", "md5", "bcrypt"):
        raise ValueError("unsupported encryption method: %r" % value)
    return value


def filepath(value):
    if not value:
        return ""
    return os.path.abspath(os.path.expanduser(value))


def _convert_to_bool(value):
    if value.lower() not in RawConfigParser.BOOLEAN_STATES:
        raise ValueError("not a boolean: %r" % value)
    return RawConfigParser.BOOLEAN_STATES[value.lower()]


DEFAULT_CONFIG_SCHEMA = OrderedDict([
    ("server", OrderedDict([
        ("host", {
            "value": "",
            "help": "address to listen on, empty for all interfaces",
            "type": str}),
        ("port", {
            "value": "3000",
            "help": "TCP port to listen on",
            "type": port_number}),
        ("max_content_length", {
            "value": "100000000",
            "help": "maximum size of request body in bytes, 0 to disable",
            "type": positive_int}),
        ("timeout", {
            "value": "0",
            "help": "socket timeout in seconds, 0 to disable",
            "type": positive_float})])),
    ("auth", OrderedDict([
        ("user", {
            "value": "admin",
            "help": "user allowed to modify documents",
            "type": str}),
        ("password", {
            "value": "secret",
            "help": "password (or password hash) of the user",
            "type": str}),
        ("encryption", {
            "value": "plain",
            "help": "how the password is stored: plain, md5 or bcrypt",
            "type": encryption_method}),
        ("realm", {
            "value": "Document Server",
            "help": "message displayed when a password is needed",
            "type": str}),
        ("delay", {
            "value": "0",
            "help": "incorrect authentication delay",
            "type": positive_float})])),
    ("storage", OrderedDict([
        ("public_folder", {
            "value": DEFAULT_PUBLIC_FOLDER,
            "help": "directory served, written and deleted from",
            "type": filepath})])),
    ("logging", OrderedDict([
        ("level", {
            "value": "info",
            "help": "threshold for the logger",
            "type": logging_level}),
        ("mask_passwords", {
            "value": "True",
            "help": "mask passwords in logs",
            "type": bool})]))])


def load(environ=None):
    """Load the default configuration overlaid with ``environ``.

    Only the variables listed in ``ENVIRONMENT_OPTIONS`` are read.

    """
    configuration = Configuration(DEFAULT_CONFIG_SCHEMA)
    if environ is not None:
        config = {}
        for name, (section, option) in ENVIRONMENT_OPTIONS.items():
            value = environ.get(name)
            if value is not None:
                config.setdefault(section, {})[option] = value
        configuration.update(config, "environment")
    return configuration


class Configuration:
    def __init__(self, schema):
        self._schema = schema
        self._values = {}
        self._configs = []
        default = {section: {option: self._schema[section][option]["value"]
                             for option in self._schema[section]}
                   for section in self._schema}
        self.update(default, "default config")

    def update(self, config, source=None):
        """Update the configuration.

        ``config`` a dict of the format {SECTION: {OPTION: VALUE, ...}, ...}.
        Values are converted with the ``type`` of their option.

        ``source`` a description of the configuration source, used in error
        messages and logs.

        """
        source = source or "unspecified config"
        new_values = {}
        for section in config:
            if section not in self._schema:
                raise ValueError(
                    "Invalid section %r in %s" % (section, source))
            new_values[section] = {}
            for option in config[section]:
                if option not in self._schema[section]:
                    raise RuntimeError("Invalid option %r in section %r in "
                                       "%s" % (option, section, source))
                type_ = self._schema[section][option]["type"]
                raw_value = config[section][option]
                try:
                    if type_ == bool and not isinstance(raw_value, bool):
                        raw_value = _convert_to_bool(raw_value)
                    new_values[section][option] = type_(raw_value)
                except Exception as e:
                    raise RuntimeError(
                        "Invalid %s value for option %r in section %r in %s: "
                        "%r" % (type_.__name__, option, section, source,
                                raw_value)) from e
        self._configs.append((config, source))
        for section in new_values:
            self._values[section] = self._values.get(section, {})
            self._values[section].update(new_values[section])

    def get(self, section, option):
        """Get the value of ``option`` in ``section``."""
        with contextlib.suppress(KeyError):
            return self._values[section][option]
        raise KeyError(section, option)

    def get_raw(self, section, option):
        """Get the raw value of ``option`` in ``section``."""
        for config, _ in reversed(self._configs):
            if option in config.get(section, {}):
                return config[section][option]
        raise KeyError(section, option)

    def get_source(self, section, option):
        """Get the source that provides ``option`` in ``section``."""
        for config, source in reversed(self._configs):
            if option in config.get(section, {}):
                return source
        raise KeyError(section, option)

    def sections(self):
        return self._values.keys()

    def options(self, section):
        return self._values[section].keys()

    def sources(self):
        """The descriptions of all sources, in the order they were added."""
        return [source for _, source in self._configs]

    def copy(self):
        """Create a copy with the same layers of updates."""
        copy = type(self)(self._schema)
        # The first layer holds the defaults added by the constructor
        for config, source in self._configs[1:]:
            copy.update(config, source)
        return copy

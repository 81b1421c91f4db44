"""
Utilities for obtaining a configuration for stddata services and tools, and for setting up logging
according to it.

A configuration is a (possibly nested) dictionary.  It is typically read from a YAML or JSON file
via :py:func:`load_from_file` or, more generally, from a file path or URL via
:py:func:`resolve_configuration`.
"""
import os, sys, json, logging
from collections.abc import Mapping
from urllib.parse import urlparse

import yaml, requests

from . import ConfigurationException, system

__all__ = [ "ConfigurationException", "load_from_file", "resolve_configuration",
            "configure_log", "BLAB", "blab", "global_logdir", "global_logfile" ]

global_logdir = None
global_logfile = None

BLAB = logging.DEBUG - 1
DEF_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
DEF_LOG_LEVEL = logging.INFO
DEF_LOG_FILE = "stddata.log"

def load_from_file(configfile: str) -> Mapping:
    """
    read the configuration from the given file and return it as a dictionary.  The file format
    is inferred from the file's extension:  a file ending in ".json" is read as JSON; otherwise,
    it is read as YAML.

    :raises ConfigurationException:  if the file contents cannot be parsed or do not contain a
                                     dictionary
    :raises IOError:  if the file cannot be opened or read
    """
    with open(configfile) as fd:
        if str(configfile).endswith('.json'):
            try:
                out = json.load(fd)
            except ValueError as ex:
                raise ConfigurationException(f"{configfile}: JSON format error: {str(ex)}") from ex
        else:
            try:
                out = yaml.safe_load(fd)
            except yaml.YAMLError as ex:
                raise ConfigurationException(f"{configfile}: YAML format error: {str(ex)}") from ex

    if out is None:
        out = {}
    if not isinstance(out, Mapping):
        raise ConfigurationException(f"{configfile}: does not contain a configuration dictionary")
    return out

def resolve_configuration(location: str, timeout: float=10) -> Mapping:
    """
    return a configuration dictionary retrieved from the given location.  The location can be
    a local file path, a ``file:`` URL, or an ``http:`` or ``https:`` URL.  For a web URL, the
    format is taken from the response's content type (JSON if it mentions json, YAML otherwise).

    :param str location:  the file path or URL where the configuration can be found
    :param float timeout: the number of seconds to wait on a web URL before giving up
    :raises ConfigurationException:  if the configuration cannot be retrieved or parsed
    """
    url = urlparse(location)
    if url.scheme in ("http", "https"):
        try:
            resp = requests.get(location, timeout=timeout)
        except requests.RequestException as ex:
            raise ConfigurationException(f"{location}: failed to retrieve configuration: {str(ex)}") \
                from ex
        if resp.status_code >= 300:
            raise ConfigurationException(f"{location}: failed to retrieve configuration: "+
                                         f"{resp.status_code} {resp.reason}")
        try:
            if "json" in resp.headers.get("Content-Type", ""):
                out = resp.json()
            else:
                out = yaml.safe_load(resp.text)
        except (ValueError, yaml.YAMLError) as ex:
            raise ConfigurationException(f"{location}: config format error: {str(ex)}") from ex
        if not isinstance(out, Mapping):
            raise ConfigurationException(f"{location}: does not contain a configuration dictionary")
        return out

    if url.scheme == "file":
        location = url.path
    elif url.scheme and len(url.scheme) > 1:
        raise ConfigurationException(f"{location}: unsupported configuration URL scheme")

    try:
        return load_from_file(location)
    except (IOError, OSError) as ex:
        raise ConfigurationException(f"{location}: unable to read configuration: {str(ex)}") from ex

def configure_log(logfile: str=None, level: int=None, format: str=None, config: Mapping=None,
                  addstderr=False):
    """
    configure the root logger to write messages to a log file and/or standard error.

    :param str logfile:  the path to the file to write messages to.  If relative, it is taken to
                         be relative to the ``logdir`` configuration parameter (or the current
                         directory if not set).  If not provided, the ``logfile`` parameter is
                         consulted; if that is not set, "stddata.log" is used.
    :param int   level:  the minimum message level to record; if not provided, the ``loglevel``
                         configuration parameter is consulted (default: INFO)
    :param str  format:  the format to apply to messages (default: time, logger name, level, msg)
    :param dict config:  the configuration to draw logging parameters from
    :param addstderr:    if True, also send messages to standard error.  If a str, it will be
                         used as the format for messages sent to standard error.
    """
    global global_logdir
    global global_logfile
    if config is None:
        config = {}
    if not logfile:
        logfile = config.get('logfile', DEF_LOG_FILE)
    if not format:
        format = config.get('logformat', DEF_LOG_FORMAT)
    if level is None:
        level = config.get('loglevel', DEF_LOG_LEVEL)
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                raise ConfigurationException("loglevel: not a recognized level name: " +
                                             str(config.get('loglevel')))

    if not os.path.isabs(logfile):
        global_logdir = config.get('logdir', global_logdir)
        if global_logdir:
            logfile = os.path.join(global_logdir, logfile)
    global_logfile = logfile

    frmtr = logging.Formatter(format)
    rootlogger = logging.getLogger()
    rootlogger.setLevel(min(level, rootlogger.level or level))

    hdlr = logging.FileHandler(logfile)
    hdlr.setFormatter(frmtr)
    hdlr.setLevel(level)
    rootlogger.addHandler(hdlr)

    if addstderr:
        if not isinstance(addstderr, str):
            addstderr = format
        hdlr = logging.StreamHandler(sys.stderr)
        hdlr.setFormatter(logging.Formatter(addstderr))
        hdlr.setLevel(level)
        rootlogger.addHandler(hdlr)

    system.getSysLogger().info("Configured logging for %s to %s", system.system_abbrev, logfile)

def blab(log: logging.Logger, msg: str, *args, **kwargs):
    """
    log a verbose message. This uses a log level, BLAB, that is lower than
    DEBUG; in other words when a log's level is set to DEBUG, this message
    will not be displayed.  This is intended for messages that would appear
    voluminously if the level were set to BLAB.

    :param Logger log:  the Logger object to record to
    :param str    msg:  the message to write
    :param args:        treat msg as a template and insert these values
    :param kwargs:      other arbitrary keywords to pass to log.log()
    """
    log.log(BLAB, msg, *args, **kwargs)

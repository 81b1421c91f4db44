"""
Support for look-ups into standard reference data sets (e.g. ISO country and language codes).

A data set is served by a *provider* (see :py:mod:`stddata.provider`) which loads the data set's
records once and builds one or more named indexes over them.  Each index can then be searched with
a case-insensitive prefix query or dumped in its entirety.  The :py:mod:`stddata.wsgi` module exposes
the configured providers as a web service, and :py:mod:`stddata.cli` as a command-line tool.
"""
import logging

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

_STDDATASYSNAME = "Standard Data Look-up"
_STDDATASYSABBREV = "stddata"

class StdDataSystem(object):
    """
    a description of the overall stddata system, used for identification in log messages and
    service responses.
    """
    def __init__(self, subsysname="", subsysabbrev=""):
        self.system_name = _STDDATASYSNAME
        self.system_abbrev = _STDDATASYSABBREV
        self.subsystem_name = subsysname
        self.subsystem_abbrev = subsysabbrev
        self.system_version = __version__

    def getSysLogger(self):
        """
        return the Logger that serves as the parent for all loggers in this system
        """
        return logging.getLogger(self.system_abbrev)

system = StdDataSystem()

class StdDataException(Exception):
    """
    A general base class for exceptions that occur while loading or searching a data set
    """
    pass

class ConfigurationException(StdDataException):
    """
    an exception indicating that the configuration provided to a component is missing required
    data or is otherwise invalid.
    """
    pass

class ServiceError(StdDataException):
    """
    an exception to be surfaced to the client of a provider.  Besides a human-readable message,
    it carries ``code``, a hint as to the HTTP status that a web layer should respond with.
    """
    code = 500

    def __init__(self, message: str, code: int=None):
        super(ServiceError, self).__init__(message)
        self.message = message
        if code is not None:
            self.code = code

class ServiceUnavailable(ServiceError):
    """
    an exception indicating that the requested data cannot be provided because of a condition on
    the server-side (e.g. the data has not been loaded).  A client may retry later.
    """
    code = 503

class NotReady(ServiceUnavailable):
    """
    an exception indicating that a search was attempted on a provider whose data has not been
    (successfully) loaded.
    """

    def __init__(self, dataset: str=None, message: str=None):
        if not message:
            message = "Data set is not loaded"
            if dataset:
                message = f"{dataset}: data set is not loaded"
        super(NotReady, self).__init__(message)
        self.dataset = dataset

class SourceUnavailable(ServiceUnavailable):
    """
    an exception indicating that a data set could not be loaded because its source could not be
    read or contains a malformed record.
    """

    def __init__(self, source: str=None, message: str=None, cause: Exception=None):
        if not message:
            if source:
                message = f"Trouble reading data from {source}"
            else:
                message = "Trouble reading data source"
            if cause:
                message += ": "+str(cause)
        super(SourceUnavailable, self).__init__(message)
        self.source = source
        self.cause = cause

class BadRequest(ServiceError):
    """
    an exception indicating that a request could not be satisfied because it was not valid.
    """
    code = 400

class UnknownIndex(BadRequest):
    """
    an exception indicating that a search named an index that the provider does not have
    """

    def __init__(self, index: str, message: str=None):
        if not message:
            message = "No index on " + str(index)
        super(UnknownIndex, self).__init__(message)
        self.index = index

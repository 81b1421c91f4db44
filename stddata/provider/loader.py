"""
Support for reading the records of a data set from a delimited-text source.

A :py:class:`RecordSource` provides access to the raw text of a data set, whether it is embedded in
the code (:py:class:`TextSource`), stored in a local file (:py:class:`FileSource`), or retrieved from
the web (:py:class:`URLSource`).  A :py:class:`RecordLoader` reads that text as a sequence of
delimited records, each with a fixed number of fields, and converts each record into an entity
object (usually a ``namedtuple``) by position.
"""
import csv, logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Callable
from io import StringIO
from pathlib import Path
from typing import Iterator, List, TextIO, Union

import requests

from .. import SourceUnavailable, ConfigurationException, system
from ..config import blab

deflog = system.getSysLogger().getChild("loader")

DEF_ENCODING = "utf-8-sig"     # tolerates a leading byte-order mark
DEF_TIMEOUT = 30

class RecordSource(ABC):
    """
    a source of delimited text making up a data set
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def open(self) -> TextIO:
        """
        open the source for reading and return a text stream.  The caller is responsible for
        closing the stream (e.g. by using it in a ``with`` statement).
        :raises SourceUnavailable:  if the source cannot be opened
        """
        raise NotImplementedError()

    def __str__(self):
        return self.name

class TextSource(RecordSource):
    """
    a source whose text is provided as a string (e.g. a constant embedded in the code)
    """

    def __init__(self, text: str, name: str="embedded data"):
        super(TextSource, self).__init__(name)
        self._text = text

    def open(self) -> TextIO:
        return StringIO(self._text, newline='')

class FileSource(RecordSource):
    """
    a source that is stored in a local file
    """

    def __init__(self, path: Union[str, Path], encoding: str=DEF_ENCODING):
        super(FileSource, self).__init__(str(path))
        self.path = Path(path)
        self.encoding = encoding

    def open(self) -> TextIO:
        try:
            return open(self.path, encoding=self.encoding, newline='')
        except OSError as ex:
            raise SourceUnavailable(self.name, cause=ex) from ex

class URLSource(RecordSource):
    """
    a source that is retrieved from a web URL.  The entire document is retrieved when the source
    is opened.
    """

    def __init__(self, url: str, timeout: float=DEF_TIMEOUT, encoding: str=DEF_ENCODING):
        super(URLSource, self).__init__(url)
        self.url = url
        self.timeout = timeout
        self.encoding = encoding

    def open(self) -> TextIO:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
        except requests.RequestException as ex:
            raise SourceUnavailable(self.url, cause=ex) from ex

        if resp.status_code >= 300 or resp.status_code < 200:
            raise SourceUnavailable(self.url, f"Trouble retrieving data from {self.url}: "+
                                              f"{resp.status_code} {resp.reason}")
        try:
            return StringIO(resp.content.decode(self.encoding), newline='')
        except UnicodeDecodeError as ex:
            raise SourceUnavailable(self.url, cause=ex) from ex

def make_source(config: Mapping, default_url: str=None) -> RecordSource:
    """
    create a RecordSource from a ``source`` configuration dictionary.  The following parameters
    are recognized:

    ``file``
        _str_ a path to a local file containing the data.  If given, ``url`` is ignored.
    ``url``
        _str_ the URL to retrieve the data from.  If not given, ``default_url`` is used.
    ``timeout``
        _float_ the number of seconds to wait for a response from ``url`` (default: 30)
    ``encoding``
        _str_ the text encoding of the data (default: UTF-8, with or without a byte-order mark)

    :raises ConfigurationException:  if neither a file nor URL is available
    """
    if config is None:
        config = {}
    if not isinstance(config, Mapping):
        raise ConfigurationException("source: not a dictionary: "+str(config))

    encoding = config.get('encoding', DEF_ENCODING)
    if config.get('file'):
        return FileSource(config['file'], encoding)

    url = config.get('url', default_url)
    if not url:
        raise ConfigurationException("source: missing required parameter: file or url")
    try:
        timeout = float(config.get('timeout', DEF_TIMEOUT))
    except (TypeError, ValueError) as ex:
        raise ConfigurationException("source.timeout: not a number: "+
                                     str(config.get('timeout'))) from ex
    return URLSource(url, timeout, encoding)


class RecordLoader:
    """
    a reader of delimited records from a :py:class:`RecordSource`.  Every record must have the
    same number of fields; a record that does not fails the entire read.  Blank lines are skipped,
    and leading and trailing whitespace is removed from each field.
    """

    def __init__(self, source: RecordSource, nfields: int, delimiter: str='\t',
                 entity: Callable=None, log: logging.Logger=None):
        """
        initialize the loader
        :param RecordSource source:  the source of the records
        :param int         nfields:  the number of fields every record is expected to have
        :param str       delimiter:  the single character that separates fields
        :param Callable     entity:  a function or class that turns the fields of a record, passed
                                     as positional arguments, into an entity.  If not given,
                                     :py:meth:`entities` will return the fields as tuples.
        :param Logger          log:  the Logger to use for messages
        """
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise ConfigurationException(f"delimiter: must be a single character: {delimiter!r}")
        if nfields < 1:
            raise ConfigurationException(f"nfields: must be a positive number: {nfields}")
        self.source = source
        self.nfields = nfields
        self.delimiter = delimiter
        self.entity = entity or (lambda *fields: tuple(fields))
        if not log:
            log = deflog
        self.log = log

    def records(self) -> Iterator[List[str]]:
        """
        iterate through the records in the source, returning each as a list of field values
        :raises SourceUnavailable:  if the source cannot be read or contains a malformed record
        """
        with self.source.open() as stream:
            reader = csv.reader(stream, delimiter=self.delimiter, quoting=csv.QUOTE_NONE,
                                skipinitialspace=True)
            try:
                for rec in reader:
                    if not rec:
                        blab(self.log, "%s: skipping blank line %d", self.source.name, reader.line_num)
                        continue
                    if len(rec) != self.nfields:
                        raise SourceUnavailable(self.source.name,
                                                f"{self.source.name}, line {reader.line_num}: "+
                                                f"wrong number of fields ({len(rec)}; "+
                                                f"expected {self.nfields})")
                    yield [f.strip() for f in rec]

            except csv.Error as ex:
                raise SourceUnavailable(self.source.name,
                                        f"{self.source.name}, line {reader.line_num}: {str(ex)}") from ex
            except (OSError, UnicodeDecodeError) as ex:
                raise SourceUnavailable(self.source.name, cause=ex) from ex

    def entities(self) -> Iterator:
        """
        iterate through the records in the source, returning each as an entity
        :raises SourceUnavailable:  if the source cannot be read or contains a malformed record
        """
        for rec in self.records():
            yield self.entity(*rec)

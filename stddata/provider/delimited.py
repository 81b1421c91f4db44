"""
an implementation of :py:class:`~stddata.provider.base.IndexedProvider` whose record layout and
indexes are entirely described by configuration.  This allows a new delimited data set to be served
without writing a new provider class.
"""
import logging
from collections import namedtuple
from collections.abc import Mapping

from .base import IndexedProvider
from .index import IndexDefinition
from .loader import RecordLoader, make_source
from .. import ConfigurationException

class DelimitedFileProvider(IndexedProvider):
    """
    a provider for a delimited text data set described by configuration.  The following
    parameters are supported:

    ``fields``
        _list of str_ (required).  The names of the fields in each record, in order.  These become
        the attribute names of the loaded entities and so must be valid Python identifiers.
    ``indexes``
        _dict_ (required).  A mapping of index names to the name of the field that index is
        keyed on.
    ``primary``
        _str_ (optional).  The name of the primary index (default: the first in ``indexes``).
    ``delimiter``
        _str_ (optional).  The character separating fields (default: a tab).
    ``entity``
        _str_ (optional).  A type name for the entities (default: the data set name, capitalized).
    ``result_label``
        _str_ (optional).  The label to wrap search results with in web responses (default:
        "Results").
    ``source``
        _dict_ (required).  Where to read the data from; see
        :py:func:`~stddata.provider.loader.make_source`.
    """

    def __init__(self, name: str, config: Mapping, log: logging.Logger=None):
        self.cfg = config

        fields = config.get('fields')
        if not fields or not isinstance(fields, (list, tuple)):
            raise ConfigurationException(f"{name}: missing or invalid config param: fields")
        try:
            self.entity = namedtuple(config.get('entity', name.capitalize()), fields)
        except (TypeError, ValueError) as ex:
            raise ConfigurationException(f"{name}: bad entity definition: {str(ex)}") from ex

        indexes = config.get('indexes')
        if not indexes or not isinstance(indexes, Mapping):
            raise ConfigurationException(f"{name}: missing or invalid config param: indexes")
        defs = []
        for idxname, field in indexes.items():
            if field not in self.entity._fields:
                raise ConfigurationException(f"{name}: index {idxname}: not a defined field: {field}")
            defs.append(IndexDefinition.on_attribute(idxname, field))

        primary = config.get('primary')
        if primary and primary not in indexes:
            raise ConfigurationException(f"{name}: primary: not a defined index: {primary}")

        if not isinstance(config.get('source'), Mapping):
            raise ConfigurationException(f"{name}: missing required config param: source")

        super(DelimitedFileProvider, self).__init__(name, defs, primary, log)
        self.delimiter = config.get('delimiter', '\t')
        self.result_label = config.get('result_label', self.result_label)

    def create_loader(self) -> RecordLoader:
        return RecordLoader(make_source(self.cfg.get('source')), len(self.entity._fields),
                            self.delimiter, self.entity, self.log)

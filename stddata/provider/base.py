"""
the base provider interface and its generic, index-based implementation.

A :py:class:`Provider` serves searches on a single data set.  Its life cycle is simple:  it is
constructed empty, :py:meth:`~Provider.load` is called once to read the data set and build its
indexes, and afterward :py:meth:`~Provider.search` may be called any number of times (including
concurrently from multiple threads).  Once loaded, a provider's indexes never change.
"""
import logging, threading, json, csv
from io import StringIO
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Mapping, Iterable
from typing import List

from .. import NotReady, SourceUnavailable, system
from .index import IndexDefinition, IndexBuilder, Group
from .loader import RecordLoader

DUMP_QUERY = "_dump"

class Provider(ABC):
    """
    An abstract interface to a searchable data set
    """

    @abstractmethod
    def load(self) -> int:
        """
        load the data set, making the provider ready for searching.
        :return:  the number of distinct keys in the provider's primary index
                  :rtype: int
        :raises SourceUnavailable:  if the data could not be read; the provider remains not ready.
        """
        raise NotImplementedError()

    @abstractmethod
    def search(self, index: str, query: str) -> List[Group]:
        """
        return the groups of entities from the named index whose keys start with the given query
        string (ignoring case), in key order.  If ``query`` is "_dump", all groups in the index
        are returned.
        :raises NotReady:      if the data set has not been loaded
        :raises UnknownIndex:  if the provider has no index with the given name
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def ready(self) -> bool:
        """
        True if the data set has been loaded and can be searched
        """
        raise NotImplementedError()

class IndexedProvider(Provider):
    """
    a generic Provider that loads its data set via a :py:class:`~stddata.provider.loader.RecordLoader`
    and searches it via a set of named :py:class:`~stddata.provider.index.Index` instances.

    A subclass provides the loader (via :py:meth:`create_loader`) and passes the index definitions
    to this class's constructor.

    All of the indexes are built in a single pass over the loaded records.  They are only made
    visible to :py:meth:`search` once all of them are complete; thus, a search never sees a
    partially built index.  Loads are serialized with a lock; a load requested after a successful
    one has no effect.
    """
    result_label = "Results"
    entity = None

    def __init__(self, name: str, definitions: Iterable[IndexDefinition], primary: str=None,
                 log: logging.Logger=None):
        """
        initialize an empty provider
        :param str name:   a name for the data set (used in messages)
        :param definitions:  the definitions of the indexes to build
                           :type definitions: list of IndexDefinition
        :param str primary:  the name of the index whose key count is reported by :py:meth:`load`;
                           if not given, the first definition is the primary one.
        :param Logger log: the Logger to use for messages; if not provided, a child of the system
                           logger named after the data set is used.
        """
        self.name = name
        self.definitions = list(definitions)
        if not self.definitions:
            raise ValueError(f"{name}: at least one index definition is required")
        if not primary:
            primary = self.definitions[0].name
        if primary not in [d.name for d in self.definitions]:
            raise ValueError(f"{name}: primary index is not among the index definitions: {primary}")
        self.primary = primary

        if not log:
            log = system.getSysLogger().getChild(name)
        self.log = log

        self._lock = threading.Lock()
        self._store = None
        self._size = 0
        self._nrecs = 0

    @abstractmethod
    def create_loader(self) -> RecordLoader:
        """
        return a RecordLoader that will read this provider's data set
        """
        raise NotImplementedError()

    @property
    def ready(self) -> bool:
        return self._store is not None

    @property
    def size(self) -> int:
        """
        the number of distinct keys in the primary index (0 if not loaded)
        """
        return self._size

    @property
    def record_count(self) -> int:
        """
        the number of records that were loaded (0 if not loaded)
        """
        return self._nrecs

    @property
    def index_names(self) -> List[str]:
        """
        the names of the indexes that this provider supports
        """
        return [d.name for d in self.definitions]

    def load(self) -> int:
        with self._lock:
            if self._store is not None:
                self.log.debug("%s: data already loaded", self.name)
                return self._size

            loader = self.create_loader()
            self.log.info("Loading %s data from %s", self.name, loader.source.name)
            bldr = IndexBuilder(self.definitions)
            try:
                nrecs = bldr.add_all(loader.entities())
            except SourceUnavailable as ex:
                self.log.error("Failed to load %s data: %s", self.name, str(ex))
                raise
            store = bldr.build()

            self._nrecs = nrecs
            self._size = len(store.get(self.primary))
            self._store = store

        self.log.info("Loaded %d %s records (%d %s keys)", self._nrecs, self.name,
                      self._size, self.primary)
        return self._size

    def search(self, index: str, query: str) -> List[Group]:
        store = self._store
        if store is None:
            raise NotReady(self.name)
        if query is None:
            query = ''

        idx = store.get(index)   # may raise UnknownIndex
        if query == DUMP_QUERY:
            out = idx.dump()
        else:
            out = idx.select_startswith(query)

        self.log.debug("%s/%s: %r matched %d keys", self.name, index, query, len(out))
        return out

    @property
    def fields(self) -> List[str]:
        """
        the names of the attributes of this provider's entities
        """
        if self.entity is None:
            return []
        return list(self.entity._fields)

    def as_dict(self, entity) -> Mapping:
        """
        return the given entity as a dictionary of attribute names to values
        """
        return OrderedDict(entity._asdict())

    def export_as_json(self, groups: List[Group], pretty: bool=False) -> str:
        """
        serialize search results into JSON.  The output is an object with a single property,
        named by :py:attr:`result_label`, whose value is the list of groups, each given as a list
        of entity objects:

        .. code-block::

           { "Countries": [ [ { "english_name": "Albania", "alpha2_code": "AL", ... } ], ... ] }

        :param list groups:  the results of a call to :py:meth:`search`
        :param bool pretty:  if True, indent the output for readability
        """
        out = OrderedDict([
            (self.result_label, [[self.as_dict(e) for e in g] for g in groups])
        ])
        return json.dumps(out, indent=(4 if pretty else None))

    def export_as_csv(self, groups: List[Group], header: bool=True) -> str:
        """
        serialize search results into CSV.  Each entity is written as a row, in result order
        (so that members of a group appear together), preceded by a row of attribute names
        when ``header`` is True.
        """
        out = StringIO(newline='')
        wrtr = csv.writer(out, csv.unix_dialect, quoting=csv.QUOTE_MINIMAL)
        if header and self.fields:
            wrtr.writerow(self.fields)
        for grp in groups:
            for ent in grp:
                wrtr.writerow(list(ent))
        return out.getvalue()

    def status(self) -> Mapping:
        """
        return a summary of the state of this provider
        """
        return OrderedDict([
            ("name",    self.name),
            ("status",  "ready" if self.ready else "not ready"),
            ("size",    self.size),
            ("records", self.record_count),
            ("primary", self.primary),
            ("indexes", self.index_names)
        ])

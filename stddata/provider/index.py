"""
a module providing the named indexes that a provider searches.

An :py:class:`Index` groups the entities of a data set by a string key extracted from each entity
(as defined by an :py:class:`IndexDefinition`).  Entities sharing a key are kept together in a group
in the order they were loaded; they are never merged or de-duplicated.  Alongside the groups, an
Index keeps its distinct keys as a sorted sequence, which is what gives searches and dumps their
deterministic order.  Keys are sorted by code point which, for ``str`` values, is the same order as
a byte-wise comparison of their UTF-8 encodings.

An :py:class:`IndexBuilder` accumulates the groups for any number of index definitions in a single
pass over the entities and then freezes them into an :py:class:`IndexStore`.
"""
from collections import namedtuple
from collections.abc import Mapping, Iterable
from operator import attrgetter
from typing import List, Tuple, Sequence

from .. import UnknownIndex

Group = Tuple

class IndexDefinition(namedtuple("IndexDefinition", "name keyfunc")):
    """
    the definition of a named index:  a name and a function that extracts a string key from
    an entity.
    """

    @classmethod
    def on_attribute(cls, name: str, attr: str=None):
        """
        create a definition for an index keyed on an entity attribute
        :param str name:  the name of the index
        :param str attr:  the name of the attribute to key on; if not given, ``name`` is assumed
        """
        if not attr:
            attr = name
        return cls(name, attrgetter(attr))

class Index:
    """
    a frozen grouping of entities by key, with its keys in sorted order
    """

    def __init__(self, name: str, groups: Mapping[str, Sequence]):
        """
        freeze the given groups into an index
        :param str       name:  the name of the index
        :param Mapping groups:  a mapping of keys to the sequence of entities that share that key
        """
        self.name = name
        self._groups = dict((k, tuple(g)) for k, g in groups.items())
        self._keys = tuple(sorted(self._groups.keys()))

    @property
    def keys(self) -> Tuple[str]:
        """
        the distinct keys of this index in ascending order
        """
        return self._keys

    def __len__(self):
        return len(self._keys)

    def __contains__(self, key):
        return key in self._groups

    def group_for(self, key: str) -> Group:
        """
        return the group of entities having exactly the given key, or an empty tuple if there
        are none.
        """
        return self._groups.get(key, ())

    def dump(self) -> List[Group]:
        """
        return every group in this index in key order
        """
        return [self._groups[k] for k in self._keys]

    def select_startswith(self, prefix: str) -> List[Group]:
        """
        return, in key order, the groups whose key begins with the given prefix, ignoring case.
        A key shorter than the prefix never matches; an empty prefix matches every key.

        Comparison is character by character:  the first ``len(prefix)`` characters of a key are
        case-folded with :py:meth:`str.casefold` and compared to the case-folded prefix.  Note that
        ``casefold`` applies full Unicode folding, so it differs from simple one-to-one folding for
        a few characters that expand when folded (e.g. "ß" and the ligature "ﬁ"); such a key still
        only matches a prefix of the same length.
        """
        n = len(prefix)
        want = prefix.casefold()
        return [self._groups[k] for k in self._keys if len(k) >= n and k[:n].casefold() == want]

class IndexStore:
    """
    a collection of named indexes.  Indexes are added once via :py:meth:`store_data` and are
    never updated or removed afterward.
    """

    def __init__(self):
        self._indexes = {}

    def store_data(self, name: str, groups: Mapping[str, Sequence]) -> Index:
        """
        freeze the given key-to-group mapping into an :py:class:`Index` and save it under the
        given name.
        :raises ValueError:  if an index with that name has already been stored
        """
        if name in self._indexes:
            raise ValueError("IndexStore: index already stored: "+name)
        self._indexes[name] = Index(name, groups)
        return self._indexes[name]

    def get(self, name: str) -> Index:
        """
        return the index with the given name
        :raises UnknownIndex:  if no index with that name is stored
        """
        try:
            return self._indexes[name]
        except KeyError:
            raise UnknownIndex(name)

    def names(self) -> List[str]:
        """
        return the names of the stored indexes in the order they were stored
        """
        return list(self._indexes.keys())

    def __contains__(self, name):
        return name in self._indexes

    def __len__(self):
        return len(self._indexes)

class IndexBuilder:
    """
    a builder of the indexes for a set of index definitions.  Each entity added is filed into the
    groups of every index at once, so the entities need to be iterated only once.
    """

    def __init__(self, definitions: Iterable[IndexDefinition]):
        self.definitions = list(definitions)
        names = [d.name for d in self.definitions]
        if len(set(names)) != len(names):
            raise ValueError("IndexBuilder: duplicate index names: "+str(names))
        self._groups = dict((d.name, {}) for d in self.definitions)
        self.count = 0

    def add(self, entity):
        """
        file the given entity into the groups of every index
        """
        for defn in self.definitions:
            key = defn.keyfunc(entity)
            self._groups[defn.name].setdefault(key, []).append(entity)
        self.count += 1

    def add_all(self, entities: Iterable) -> int:
        """
        add all the given entities, returning the number added
        """
        n = 0
        for entity in entities:
            self.add(entity)
            n += 1
        return n

    def build(self) -> IndexStore:
        """
        freeze the accumulated groups into a new IndexStore
        """
        out = IndexStore()
        for defn in self.definitions:
            out.store_data(defn.name, self._groups[defn.name])
        return out

"""
A provider of searches against the ISO 639-2 language codes.

The source data is the list maintained by the US Library of Congress at
http://www.loc.gov/standards/iso639-2/ISO-639-2_utf-8.txt.  In that file, each line describes one
language with five pipe-delimited fields:  the alpha-3 bibliographic code, the alpha-3 terminologic
code (when different), the alpha-2 code (when one exists), the English name, and the French name.
A field that does not apply is left empty.

The following indexes are supported:

``alpha``
    the alpha-3 bibliographic code (e.g. "ger"); this is the primary index
``name``
    the English name of the language (e.g. "German")
"""
import logging
from collections import namedtuple
from collections.abc import Mapping

from ..provider.base import IndexedProvider
from ..provider.index import IndexDefinition
from ..provider.loader import RecordLoader, make_source

DEF_SOURCE_URL = "http://www.loc.gov/standards/iso639-2/ISO-639-2_utf-8.txt"

Language = namedtuple("Language",
                      "alpha3_bibliographic alpha3_terminologic alpha2 english_name french_name")

INDEXES = [
    IndexDefinition.on_attribute("alpha", "alpha3_bibliographic"),
    IndexDefinition.on_attribute("name",  "english_name")
]

class LanguageProvider(IndexedProvider):
    """
    a provider of ISO 639-2 language records.  The data is retrieved at load time from the
    location given by the ``source`` configuration parameter (see
    :py:func:`~stddata.provider.loader.make_source`); by default, it is fetched from the Library
    of Congress web site.
    """
    result_label = "Languages"
    entity = Language

    def __init__(self, config: Mapping=None, log: logging.Logger=None):
        if config is None:
            config = {}
        self.cfg = config
        super(LanguageProvider, self).__init__("language", INDEXES, "alpha", log)

    def create_loader(self) -> RecordLoader:
        return RecordLoader(make_source(self.cfg.get('source', {}), DEF_SOURCE_URL),
                            len(Language._fields), '|', Language, self.log)

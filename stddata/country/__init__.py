"""
A provider of searches against the ISO 3166-1 country codes.  The source data is embedded in
:py:mod:`stddata.country.data`.

The following indexes are supported:

``name``
    the English short name of the country (e.g. "Albania"); this is the primary index
``alpha2``
    the two-letter code (e.g. "AL")
``alpha3``
    the three-letter code (e.g. "ALB")
``number``
    the three-digit numeric code (e.g. "008")
"""
import logging
from collections import namedtuple
from collections.abc import Mapping

from ..provider.base import IndexedProvider
from ..provider.index import IndexDefinition
from ..provider.loader import RecordLoader, TextSource, make_source
from .data import COUNTRY_DATA

Country = namedtuple("Country", "english_name alpha2_code alpha3_code numeric_code")

INDEXES = [
    IndexDefinition.on_attribute("name",   "english_name"),
    IndexDefinition.on_attribute("alpha2", "alpha2_code"),
    IndexDefinition.on_attribute("alpha3", "alpha3_code"),
    IndexDefinition.on_attribute("number", "numeric_code")
]

class CountryProvider(IndexedProvider):
    """
    a provider of ISO 3166-1 country records.  By default, the data is read from the data set
    embedded in this package; however, a ``source`` configuration parameter (see
    :py:func:`~stddata.provider.loader.make_source`) can point to an alternate file or URL with
    the same tab-delimited layout.
    """
    result_label = "Countries"
    entity = Country

    def __init__(self, config: Mapping=None, log: logging.Logger=None):
        if config is None:
            config = {}
        self.cfg = config
        super(CountryProvider, self).__init__("country", INDEXES, "name", log)

    def create_loader(self) -> RecordLoader:
        if self.cfg.get('source'):
            src = make_source(self.cfg['source'])
        else:
            src = TextSource(COUNTRY_DATA, "embedded ISO 3166-1 data")
        return RecordLoader(src, len(Country._fields), '\t', Country, self.log)

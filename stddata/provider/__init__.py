"""
module providing the generic machinery for serving searches on standard data sets.  A
:py:class:`~stddata.provider.base.Provider` loads a data set (via a
:py:class:`~stddata.provider.loader.RecordLoader`) and builds named indexes over it (see
:py:mod:`~stddata.provider.index`) which can then be searched by key prefix.  The
:py:mod:`wsgi module<stddata.wsgi>` is responsible for exposing providers through a web interface.
"""
import logging
from collections.abc import Mapping

from .base import Provider, IndexedProvider, DUMP_QUERY
from .index import IndexDefinition, Index, IndexStore
from .. import ConfigurationException

DEF_PROVIDERS = {
    "country":  {},
    "language": {}
}

def create_provider(name: str, config: Mapping=None, log: logging.Logger=None) -> Provider:
    """
    instantiate a :py:class:`Provider` instance based on the given configuration.  The provider
    type is selected by the ``factory`` parameter, which defaults to the data set name.
    Supported values are "country", "language", and "delimited".
    :param str    name:  the name of the data set to be served
    :param dict config:  the provider's configuration
    :param Logger  log:  the Logger for the provider to use
    """
    if config is None:
        config = {}
    if not isinstance(config, Mapping):
        raise ConfigurationException(f"providers.{name} config: not a dictionary: "+str(config))

    factory = config.get("factory", name)
    if factory == "country":
        from ..country import CountryProvider
        return CountryProvider(config, log)

    elif factory == "language":
        from ..language import LanguageProvider
        return LanguageProvider(config, log)

    elif factory == "delimited":
        from .delimited import DelimitedFileProvider
        return DelimitedFileProvider(name, config, log)

    raise ConfigurationException(f"providers.{name}.factory type not supported: {factory}")

def create_providers(config: Mapping, log: logging.Logger=None) -> Mapping[str, Provider]:
    """
    instantiate all the providers described in the ``providers`` parameter of the given
    configuration.  If that parameter is not set, the country and language providers are
    created with their default configurations.
    :return:  a dictionary mapping data set names to providers
    """
    pcfg = config.get("providers")
    if pcfg is None:
        pcfg = DEF_PROVIDERS
    if not isinstance(pcfg, Mapping):
        raise ConfigurationException("providers: not a dictionary: "+str(pcfg))

    out = {}
    for name, cfg in pcfg.items():
        plog = log.getChild(name) if log else None
        out[name] = create_provider(name, cfg, plog)
    return out

"""
The WSGI implementation of the web API to the standard data providers.

Each configured data set (see :py:func:`~stddata.provider.create_providers`) is served under its own
path element below the app's base endpoint.  The endpoints are:

  ``/``
       a proof-of-life response that also lists the data sets served
  ``/<dataset>``
       GET returns the status of the data set's provider (with a 503 status if it is not ready);
       LOAD (re-)attempts to load a provider that is not ready.
  ``/<dataset>/<index>/<query>``
       GET returns the groups of records in the named index whose keys start with *query*
       (ignoring case); a *query* of ``_dump`` returns the whole index, and an omitted *query*
       matches every key.

For example, a GET to ``/country/alpha2/A`` returns all countries whose two-letter code starts with
"A", and ``/language/name/ger`` returns the languages whose English name starts with "ger".

The default format for search results is JSON.  CSV can be requested either via the ``format``
query parameter (``format=csv``) or by requesting the "text/csv" media type with the ``Accept``
HTTP request header.

This app looks for the following configuration parameters:

  ``name``
      a name for the app used in messages (default: "stddata")
  ``base_ep``
      the URL path that all requested paths must start with (default: "/")
  ``load_on_start``
      if True (default), all providers are loaded when the app is constructed
  ``providers``
      the data sets to serve; see :py:func:`~stddata.provider.create_providers`
"""
import logging
from logging import Logger
from collections import OrderedDict
from collections.abc import Mapping, Callable

from .web.rest import ServiceApp, Handler, WSGIAppSuite
from .web.rest.ready import ReadyApp, Ready
from .web.rest.jsonerr import ErrorHandling
from .web.formats import FormatSupport, Unacceptable, UnsupportedFormat, JSONSupport, CSVSupport
from .provider import Provider, create_providers
from . import ServiceError, system

deflog = logging.getLogger(system.system_abbrev).getChild('wsgi')

DEF_BASE_PATH = "/"

class ProviderHandler(Handler, ErrorHandling):
    """
    a base handler for requests on a data set
    """
    def __init__(self, provider: Provider, path: str, wsgienv: dict, start_resp: Callable,
                 config: dict={}, log: Logger=None, app=None):
        super(ProviderHandler, self).__init__(path, wsgienv, start_resp, config, log, app)
        self.prov = provider
        self._set_format_qp("format")

        fmtsup = FormatSupport()
        JSONSupport.add_support(fmtsup, True)
        self._set_default_format_support(fmtsup)

    def send_service_error(self, ex: ServiceError, ashead=None):
        """
        report a ServiceError raised by the provider as a JSON error message
        """
        if ex.code >= 500:
            self.log.warning("%s: %s", self.prov.name, ex.message)
            reason = "Service Unavailable" if ex.code == 503 else "Internal Server Error"
        else:
            self.log.debug("%s: bad request: %s", self.prov.name, ex.message)
            reason = "Bad Request"
        return self.send_error_obj(ex.code, reason, ex.message, ashead=ashead)

class StatusHandler(ProviderHandler):
    """
    Handle status and load requests on a data set ("/<dataset>")
    """
    def do_GET(self, path, ashead=False):
        try:
            self.select_format()
        except Unacceptable as ex:
            return self.send_unacceptable(content=str(ex), ashead=ashead)
        except UnsupportedFormat as ex:
            return self.send_error_obj(400, "Unsupported Format", str(ex), ashead=ashead)

        out = self.prov.status()
        if self.prov.ready:
            return self.send_json(out, ashead=ashead)
        return self.send_json(out, "Not Ready", 503, ashead=ashead)

    def do_LOAD(self, path):
        if self.prov.ready:
            return self.send_error_obj(200, "Already Loaded", f"{self.prov.name} data is already loaded")

        self.log.info("%s load requested", self.prov.name)
        try:
            n = self.prov.load()
        except ServiceError as ex:
            return self.send_service_error(ex)

        return self.send_error_obj(200, "Data Loaded",
                                   f"Successfully loaded {self.prov.name} data ({n} keys)")

    def do_OPTIONS(self, path):
        return self.send_options(["GET", "LOAD"])

class SearchHandler(ProviderHandler):
    """
    Handle search requests on a data set's index ("/<dataset>/<index>[/<query>]")
    """
    def __init__(self, provider: Provider, path: str, wsgienv: dict, start_resp: Callable,
                 config: dict={}, log: Logger=None, app=None):
        super(SearchHandler, self).__init__(provider, path, wsgienv, start_resp, config, log, app)
        CSVSupport.add_support(self._fmtsup)

    def do_GET(self, path, ashead=False):
        parts = path.split('/', 1)
        index = parts[0]
        query = parts[1] if len(parts) > 1 else ''

        try:
            format = self.select_format()
        except Unacceptable as ex:
            return self.send_unacceptable(content=str(ex), ashead=ashead)
        except UnsupportedFormat as ex:
            return self.send_error_obj(400, "Unsupported Format", str(ex), ashead=ashead)

        try:
            results = self.prov.search(index, query)
        except ServiceError as ex:
            return self.send_service_error(ex, ashead)

        if format.name == CSVSupport.FMT_CSV:
            return self.send_ok(self.prov.export_as_csv(results), format.ctype, ashead=ashead)
        return self.send_ok(self.prov.export_as_json(results), format.ctype, ashead=ashead)

    def do_OPTIONS(self, path):
        return self.send_options(["GET"])

class ProviderServiceApp(ServiceApp):
    """
    A ServiceApp wrapper around a data set Provider that can be deployed into a larger WSGI app.
    """
    def __init__(self, provider: Provider, log: Logger, config: Mapping=None, appname: str=None):
        if not appname:
            appname = provider.name
        super(ProviderServiceApp, self).__init__(appname, log, config)
        self.prov = provider

    def create_handler(self, env: Mapping, start_resp: Callable, path: str) -> Handler:
        path = path.strip('/')
        if not path:
            return StatusHandler(self.prov, path, env, start_resp, self.cfg, log=self.log, app=self)
        return SearchHandler(self.prov, path, env, start_resp, self.cfg, log=self.log, app=self)

class UnknownDataset(Handler, ErrorHandling):
    """
    a handler that responds to any request with a JSON-formatted 404 error
    """
    def handle(self):
        dataset = self._path.strip('/').split('/', 1)[0]
        return self.send_error_obj(404, "Not Found", f"{dataset}: not a recognized data set")

class RootApp(ReadyApp):
    """
    a sub-app that provides the proof-of-life response and rejects requests on unrecognized
    data sets
    """
    def __init__(self, log: Logger, appname: str, datasets: Mapping[str, Provider],
                 config: Mapping=None):
        super(RootApp, self).__init__(log, appname, config, "json")
        self.datasets = datasets

    def describe(self) -> Mapping:
        return OrderedDict([
            ("version",  system.system_version),
            ("datasets", OrderedDict((n, "ready" if p.ready else "not ready")
                                     for n, p in self.datasets.items()))
        ])

    def create_handler(self, env: dict, start_resp: Callable, path: str) -> Handler:
        if path.strip('/'):
            return UnknownDataset(path, env, start_resp, log=self.log, app=self)
        return Ready(path, env, start_resp, log=self.log, app=self, deffmt=self._deffmt)

class StdDataApp(WSGIAppSuite):
    """
    a web service providing look-ups into standard data sets
    """

    def __init__(self, config: Mapping, log: Logger=None, base_ep: str=None,
                 providers: Mapping[str, Provider]=None):
        """
        initialize the app
        :param dict config:  the configuration for the app
        :param Logger  log:  the Logger to use for messages; if None, a default is used.
        :param str base_ep:  the URL path to assume as the base of all services provided by
                             this app.  If not provided, the ``base_ep`` configuration parameter
                             is used (which itself defaults to "/").
        :param dict providers:  the providers to serve, keyed by data set name.  If not provided,
                             they are created from the ``providers`` configuration parameter.
        """
        if not log:
            log = deflog
        if base_ep is None:
            base_ep = config.get('base_ep', DEF_BASE_PATH)
        appname = config.get('name', system.system_abbrev)

        if providers is None:
            providers = create_providers(config, log)
        self.providers = OrderedDict(providers.items())

        svcapps = {
            '': RootApp(log, appname, self.providers, config)
        }
        for name, prov in self.providers.items():
            svcapps[name] = ProviderServiceApp(prov, log.getChild(name), config)

        super(StdDataApp, self).__init__(config, svcapps, log, base_ep)

        if self.cfg.get('load_on_start', True):
            self.load()

    def load(self) -> Mapping[str, bool]:
        """
        attempt to load each provider that is not yet ready.  A failure is logged but does not
        prevent the other providers from loading; a failed provider can be loaded later via a
        LOAD request.
        :return:  a dictionary mapping each data set name to whether it is now ready
        """
        out = OrderedDict()
        for name, prov in self.providers.items():
            if not prov.ready:
                try:
                    prov.load()
                except ServiceError as ex:
                    self.log.warning("%s data set not available: %s", name, ex.message)
            out[name] = prov.ready
        return out


app = StdDataApp

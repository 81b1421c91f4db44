"""
The base REST framework classes
"""
import re, json
from abc import ABCMeta, abstractmethod
from functools import reduce
from logging import Logger
from urllib.parse import parse_qs
from typing import Mapping, Callable, List
from wsgiref.headers import Headers

from ..utils import order_accepts
from ..formats import UnsupportedFormat, FormatSupport, Format
from ... import ConfigurationException

__all__ = ["Handler", "ServiceApp", "WSGIApp", "WSGIAppSuite", "WSGIServiceApp"]

class Handler(object):
    """
    a default web request handler that also serves as a base class for handlers specialized
    for particular resource paths.  A Handler is created for a single request; its
    :py:meth:`handle` method dispatches the request to a method of the form ``do_METH()``
    (e.g. ``do_GET()``), where *METH* is the requested HTTP method.
    """

    def __init__(self, path: str, wsgienv: dict, start_resp: Callable, config: dict={},
                 log: Logger=None, app=None):
        self._path = path
        self._env = wsgienv
        self._start = start_resp
        self._hdr = Headers([])
        self._code = 0
        self._msg = "unknown status"
        self.cfg = config
        self.log = log

        self._app = app
        if self._app and hasattr(app, 'include_headers'):
            self._hdr = Headers(list(app.include_headers.items()))

        # the output formats supported by this Handler; None means the client has no choice
        self._fmtsup = None

        # the name of the query parameter for requesting a named format (e.g. "format")
        self._format_qp = None

        self._meth = self._env.get('REQUEST_METHOD', 'GET')

    @property
    def app(self):
        """
        the ServiceApp instance that created this handler
        """
        return self._app

    @property
    def format_qp(self):
        """
        the name of the query parameter that clients can use to request a named output format,
        or None if such a parameter is not supported.
        """
        return self._format_qp

    def _set_format_qp(self, qpname):
        self._format_qp = qpname

    def send_error(self, code, message, content=None, contenttype=None, ashead=None,
                   encoding='utf-8'):
        """
        respond to the client with an error of a given code and reason.
        :param int code:        the HTTP response code to assign
        :param str message:     the short reason to send with the code in the HTTP status line
        :param content:         content to return as the body (str, bytes, or a list of either)
        :param str contenttype: the MIME type to associate with the returned content
        :param bool ashead:     if True, the body is withheld (as in response to a HEAD
                                request).  If not provided, it is set to True if the requested
                                method is HEAD.
        :param str encoding:    the encoding used to turn str content into bytes
        """
        return self._send(code, message, content, contenttype, ashead, encoding)

    def send_unacceptable(self, message="Not Acceptable", content=None, contenttype=None,
                          ashead=None, encoding='utf-8'):
        return self.send_error(406, message, content, contenttype, ashead, encoding)

    def send_ok(self, content=None, contenttype=None, message="OK", code=200, ashead=None,
                encoding='utf-8'):
        """
        respond to the client with a successful response.  The parameters have the same meaning
        as for :py:meth:`send_error`; ``code`` defaults to 200.
        """
        return self._send(code, message, content, contenttype, ashead, encoding)

    def send_json(self, data, message="OK", code=200, ashead=None, encoding='utf-8'):
        """
        send some data formatted as JSON.
        :param data:     the data to encode in JSON (a dict, list, or str)
        """
        return self._send(code, message, json.dumps(data, indent=2), "application/json",
                          ashead, encoding)

    def send_options(self, allowed_methods: List[str]=None, origin: str=None, extra=None):
        """
        send a response to an OPTIONS request, as for a CORS preflight request
        :param [str] allowed_methods:   the HTTP methods that are allowed on the resource
        :param str            origin:   a value for the Access-Control-Allow-Origin header
        :param dict|list       extra:   extra headers to include in the response, either as a
                                        dictionary or a list of name-value pairs
        """
        meths = list(allowed_methods or [])
        if 'OPTIONS' not in meths:
            meths.append('OPTIONS')
        self.add_header('Access-Control-Allow-Methods', ", ".join(meths))
        if origin:
            self.add_header('Access-Control-Allow-Origin', origin)
        self.add_header('Access-Control-Allow-Headers', "Content-Type")

        if isinstance(extra, Mapping):
            extra = extra.items()
        for k, v in (extra or []):
            self.add_header(k, v)

        return self.send_ok(message="No Content")

    def _send(self, code, message, content, contenttype, ashead, encoding):
        if ashead is None:
            ashead = self._meth.upper() == "HEAD"
        self.set_response(code, message)

        if content:
            if not isinstance(content, list):
                content = [ content ]
            if any(not isinstance(c, (str, bytes)) for c in content):
                raise TypeError("send_*: non-str/bytes found in content")
            if not contenttype:
                contenttype = (isinstance(content[0], str) and "text/plain") or \
                              "application/octet-stream"
        else:
            content = []
        content = [(isinstance(c, str) and c.encode(encoding)) or c for c in content]

        if contenttype:
            self.add_header("Content-Type", contenttype)
        if len(content) > 0:
            self.add_header("Content-Length", str(reduce(lambda x, t: x+len(t), content, 0)))

        self.end_headers()
        return (not ashead and content) or []

    def add_header(self, name, value):
        """
        record a name-value pair to be sent as part of the response header.
        :raises UnicodeEncodeError:  if name or value includes non-Latin-1 characters (see PEP 3333)
        """
        e = "ISO-8859-1"
        (name.encode(e), value.encode(e))

        self._hdr.add_header(name, value)

    def set_response(self, code, message):
        """
        record the response code and message to be sent when the headers are delivered.
        """
        self._code = code
        self._msg = message

    def end_headers(self):
        """
        deliver the response status and header to the web client.  This should be preceded by a
        call to :py:meth:`set_response`.
        """
        status = "{0} {1}".format(str(self._code), self._msg)
        self._start(status, self._hdr.items(), None)

    def handle(self):
        """
        handle the request encapsulated in this Handler.  This calls the ``do_METH()``
        method matching the requested HTTP method, passing the requested path.  A HEAD request
        is handled by ``do_GET()`` (with ``ashead=True``) if there is no ``do_HEAD()``.
        """
        meth = self._meth
        if self._env.get('HTTP_X_HTTP_METHOD_OVERRIDE'):
            meth = self._env.get('HTTP_X_HTTP_METHOD_OVERRIDE')

        meth_handler = 'do_'+meth

        try:
            if hasattr(self, meth_handler):
                return getattr(self, meth_handler)(self._path)
            elif meth == "HEAD" and hasattr(self, "do_GET"):
                return self.do_GET(self._path, ashead=True)
            else:
                return self.send_error(405, meth + " not supported on this resource")
        except Exception as ex:
            if self.log:
                self.log.exception("Unexpected failure: "+str(ex))
            return self.send_error(500, "Server failure")

    def get_accepts(self):
        """
        return the requested content types as a list ordered by their q-values.  An empty list
        is returned if no types were specified.
        """
        accepts = self._env.get('HTTP_ACCEPT')
        if not accepts:
            return []
        return order_accepts(accepts)

    def get_query_params(self) -> Mapping[str, List[str]]:
        """
        return the query parameters attached to the request URL
        """
        return parse_qs(self._env.get('QUERY_STRING', ''))

    def get_requested_formats(self):
        """
        return the formats requested via the format query parameter (named by
        ``self.format_qp``), in the order given.
        """
        if not self.format_qp:
            return []
        return self.get_query_params().get(self.format_qp, [])

    def select_format(self, format: str=None, path: str=None, meth: str="GET") -> Format:
        """
        determine the best output format for the current request.  If ``format`` is given, it
        overrides the client's preferences; otherwise, the formats requested via the format
        query parameter and the ``Accept`` header are compared to those returned by
        :py:meth:`get_format_support`.
        :raises UnsupportedFormat:  if the client asked only for unsupported formats
        :raises Unacceptable:       if the requested formats conflict with the Accept header
        """
        fmtsup = self.get_format_support(path, meth)

        if isinstance(format, str):
            fmt = fmtsup.match(format) if fmtsup else None
            if not fmt:
                raise UnsupportedFormat(f"{format} not a supported format")
            return fmt

        format = None
        if fmtsup:
            format = fmtsup.select_format(self.get_requested_formats(), self.get_accepts())
            if not format:
                format = fmtsup.default_format()

        return format

    def get_format_support(self, path: str, method: str="GET") -> FormatSupport:
        """
        return the FormatSupport instance appropriate for a requested path and method.  This
        implementation returns the instance set via :py:meth:`_set_default_format_support`.
        """
        return self._fmtsup

    def _set_default_format_support(self, fmtsup: FormatSupport):
        self._fmtsup = fmtsup


class ServiceApp(metaclass=ABCMeta):
    """
    a base class WSGI implementation intended to handle a particular path (and its descendents)
    within a larger WSGI application (see :py:class:`WSGIAppSuite`).

    The following configuration parameter is supported:

    ``include_headers``
        a dictionary (or list of name-value pairs) of HTTP headers to include in every response
    """

    def __init__(self, appname: str, log: Logger, config: Mapping=None):
        self.log = log
        if config is None:
            config = {}
        self.cfg = config
        self._name = appname

        self.include_headers = Headers()
        inchdrs = config.get("include_headers")
        if inchdrs:
            try:
                if isinstance(inchdrs, Mapping):
                    inchdrs = inchdrs.items()
                elif not isinstance(inchdrs, list):
                    raise TypeError("Not a list of 2-tuples")
                self.include_headers = Headers([tuple(h) for h in inchdrs])
            except (TypeError, ValueError) as ex:
                raise ConfigurationException("include_headers: must be either a dict or a list "
                                             "of name-value pairs") from ex

    @property
    def name(self):
        """
        a name for the service provided by this ServiceApp, suitable for messages to clients
        """
        return self._name

    @abstractmethod
    def create_handler(self, env: dict, start_resp: Callable, path: str) -> Handler:
        """
        return a handler instance to handle a particular request to a path
        :param Mapping env:  the WSGI environment containing the request
        :param Callable start_resp:  the start_resp function to use initiate the response
        :param str path:     the path to the resource being requested, relative to the path
                             this ServiceApp is configured to handle
        """
        raise NotImplementedError()

    def handle_path_request(self, env: dict, start_resp: Callable, path: str=None):
        """
        respond to a request on a particular (relative) URL path.  If ``path`` is None, the
        value of ``env['PATH_INFO']`` is used.
        """
        if path is None:
            path = env.get('PATH_INFO', '')
        return self.create_handler(env, start_resp, path).handle()

    def __call__(self, env, start_resp):
        return self.handle_path_request(env, start_resp)


class WSGIApp(metaclass=ABCMeta):
    """
    A WSGI application base class for wrapping one or more ServiceApp instances.

    This base implementation uses two parameters from the configuration:

    ``base_ep``
        _str_ (optional).  The base endpoint URL path for the web app, starting with a forward
                           slash.  All resource requests must start with this path; otherwise,
                           403 or 404 is returned.
    ``name``
        _str_ (optional).  A short name used to identify this web app (e.g. in log messages).
    """

    def __init__(self, config: Mapping, log: Logger, base_ep: str = None, name: str = None):
        self.log = log
        self.cfg = config
        self.name = name
        if not self.name:
            self.name = self.cfg.get("name", "")
        self.base_ep = None
        if not base_ep:
            base_ep = self.cfg.get("base_ep", "")
        base_ep = base_ep.strip('/')
        if base_ep:
            self.base_ep = '/%s/' % base_ep

    def handle_request(self, env: Mapping, start_resp: Callable):
        path = env.get('PATH_INFO', '/')
        try:
            # WSGI servers deliver the path as latin-1-decoded bytes (PEP 3333)
            path = path.encode('latin-1').decode('utf-8')
        except UnicodeError:
            pass
        path = re.sub(r'/+', '/', path)

        if self.base_ep:
            if path.startswith(self.base_ep):
                path = path[len(self.base_ep):]
            elif self.base_ep == path+'/':
                path = ''
            elif self.base_ep.startswith(path.rstrip('/')+'/'):
                # a parent of the base endpoint
                return Handler(path, env, start_resp).send_error(403, "Forbidden")
            else:
                return Handler(path, env, start_resp).send_error(404, "Not Found")

        return self.handle_path_request(path.strip('/'), env, start_resp)

    @abstractmethod
    def handle_path_request(self, path: str, env: Mapping, start_resp: Callable):
        """
        Dispatch a request on a resource path to a handler.
        :param str path:  the path requested by the client, relative to the base endpoint path
                          and without a leading slash
        :param dict env:  the WSGI environment containing all request information
        :param func start_resp:  the start-response function provided by the WSGI engine.
        """
        raise NotImplementedError()

    def __call__(self, env, start_resp):
        return self.handle_request(env, start_resp)


class WSGIAppSuite(WSGIApp):
    """
    A WSGI application that aggregates one or more :py:class:`ServiceApp` instances, each
    handling requests under its own path relative to the base endpoint.
    """

    def __init__(self, config: Mapping, svcapps: Mapping[str, ServiceApp], log: Logger,
                 base_ep: str = None):
        """
        initialize the suite of web services
        :param dict  config:  the configuration for the suite of services
        :param dict svcapps:  a mapping of resource paths (relative to the base endpoint URL)
                              to the ServiceApp instances that should serve them.
        :param Logger   log:  the base logger to use among the suite
        :param str  base_ep:  the base endpoint URL for the suite (overriding the ``base_ep``
                              configuration parameter)
        """
        super(WSGIAppSuite, self).__init__(config, log, base_ep)
        self.svcapps = dict(svcapps.items())

    def handle_path_request(self, path: str, env: Mapping, start_resp: Callable):
        # find the ServiceApp registered for the longest leading portion of the path
        base = path
        apppath = ''
        svcapp = None
        isaparent = False
        while not svcapp:
            svcapp = self.svcapps.get(base)
            if svcapp:
                continue

            if not base:
                if isaparent:
                    return Handler(path, env, start_resp).send_error(403, "Forbidden")
                return Handler(path, env, start_resp).send_error(404, "Not Found")

            elif not isaparent:
                isaparent = any(p.startswith(base+'/') for p in self.svcapps.keys())

            parts = base.rsplit('/', 1)
            if len(parts) < 2:
                parts = ['', base]
            apppath = "/".join([parts[1], apppath]).strip('/')
            base = parts[0]

        return svcapp.handle_path_request(env, start_resp, apppath)


class WSGIServiceApp(WSGIAppSuite):
    """
    a wrapper around a single ServiceApp instance.
    """

    def __init__(self, svcapp: ServiceApp, log: Logger, base_ep: str = None, config: Mapping={}):
        super(WSGIServiceApp, self).__init__(config, {'': svcapp}, log, base_ep)

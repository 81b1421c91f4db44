"""
Reuseable classes for providing a proof-of-life endpoint for a web app
"""
import json
from typing import Callable, Mapping
from logging import Logger
from collections import OrderedDict

from .base import ServiceApp, Handler
from ..formats import (Unacceptable, UnsupportedFormat, FormatSupport,
                       XHTMLSupport, TextSupport, JSONSupport)

class Ready(Handler):
    """
    a handler for proof-of-life requests.  GET on the base path returns a message indicating that
    the service is up; clients may choose plain text, HTML, or JSON via the ``Accept`` HTTP header
    or the ``format`` query parameter.  If the app provides a ``describe()`` method, its result
    is included in the JSON response.
    """

    def __init__(self, path, wsgienv, start_resp, config={}, log=None, app=None,
                 deffmt: str="text"):
        super(Ready, self).__init__(path, wsgienv, start_resp, config, log, app)

        self._set_format_qp("format")
        if deffmt not in [ TextSupport.FMT_TEXT, XHTMLSupport.FMT_HTML, JSONSupport.FMT_JSON ]:
            deffmt = TextSupport.FMT_TEXT

        fmtsup = FormatSupport()
        TextSupport.add_support(fmtsup, deffmt == TextSupport.FMT_TEXT)
        XHTMLSupport.add_support(fmtsup, deffmt == XHTMLSupport.FMT_HTML)
        JSONSupport.add_support(fmtsup, deffmt == JSONSupport.FMT_JSON)
        self._set_default_format_support(fmtsup)

    @property
    def service_name(self):
        return (self.app and self.app.name) or ""

    def do_GET(self, path, ashead=False):
        if path.strip('/'):
            return self.send_error(404, "Not Found", ashead=ashead)

        try:
            format = self.select_format(None, path)
        except Unacceptable as ex:
            return self.send_unacceptable(content=str(ex), ashead=ashead)
        except UnsupportedFormat as ex:
            return self.send_error(400, "Unsupported Format", str(ex), ashead=ashead)

        if format.name == XHTMLSupport.FMT_HTML:
            return self.get_ready_html(format.ctype, ashead)

        if format.name == JSONSupport.FMT_JSON:
            return self.get_ready_json(format.ctype, ashead)

        return self.send_ok(f"{self.service_name} service is ready", format.ctype, "Ready",
                            ashead=ashead)

    def do_OPTIONS(self, path):
        return self.send_options(["GET", "HEAD"])

    def get_ready_html(self, contenttype, ashead=None):
        servicename = self.service_name.capitalize()
        out = f"""<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head>
    <title>{servicename} Service: Ready</title>
  </head>
  <body>
    <h1>{servicename} Service Is Ready</h1>
  </body>
</html>
"""
        return self.send_ok(out, contenttype, "Ready", ashead=ashead)

    def get_ready_json(self, contenttype, ashead=None):
        out = OrderedDict([
            ("service", self.service_name),
            ("status",  "ready"),
            ("message", f"{self.service_name} service is ready.")
        ])
        if self.app and hasattr(self.app, 'describe'):
            out.update(self.app.describe())
        return self.send_ok(json.dumps(out, indent=2), contenttype, "Ready", ashead=ashead)


class ReadyApp(ServiceApp):
    """
    a WSGI sub-app that handles proof-of-life requests
    """

    def __init__(self, log: Logger, appname: str="Ready", config: Mapping=None, deffmt="text"):
        super(ReadyApp, self).__init__(appname, log, config)
        self._deffmt = deffmt

    def create_handler(self, env: dict, start_resp: Callable, path: str) -> Handler:
        return Ready(path, env, start_resp, log=self.log, app=self, deffmt=self._deffmt)

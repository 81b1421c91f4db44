"""
Support for JSON-formatted error content for HTTP responses.

Clients should rely on the HTTP status for determining if a request failed; however, a JSON error
object lets the service explain more than fits into the status line.  An error object contains
at least the following properties:

``http:status``
     the HTTP status number (e.g. 400, 503, etc.); this matches the value in the response header.
``http:reason``
     a short description of the error; this matches the reason in the response header.
``oar:message``
     a longer message explaining what went wrong.
"""
import json
from collections import OrderedDict
from typing import Mapping

def make_message(code: int, reason: str, message: str=None, extra: Mapping=None):
    """
    create a compliant error message object from the inputs
    """
    out = OrderedDict([
        ("http:status", code),
        ("http:reason", reason),
        ("oar:message", message or reason)
    ])
    if extra:
        out.update(extra)
    return out

class FatalError(Exception):
    """
    an exception carrying an error response, to be returned to the web client as a JSON error
    object, up the call stack.
    """
    def __init__(self, code: int, reason: str, explain=None, extra=None):
        """
        :param int    code:  the HTTP code to respond with
        :param str  reason:  the reason to return as the HTTP status message
        :param str explain:  a longer explanation of the error, returned only in the body
        :param dict  extra:  additional properties to include in the output message object
        """
        if not explain:
            explain = reason or ''
        super(FatalError, self).__init__(explain)
        self.code = code
        self.reason = reason
        self.explain = explain
        self.data = extra

    def to_dict(self):
        return make_message(self.code, self.reason, self.explain, self.data)

    def to_json(self, indent=None):
        return json.dumps(self.to_dict(), indent=indent)

class ErrorHandling:
    """
    a Handler mixin class that provides methods for returning error message objects to web clients
    """

    def send_error_obj(self, code: int, reason: str, explain=None, extra=None, ashead=None,
                       contenttype="application/json"):
        """
        send a JSON-formatted error message back to the web client
        :param int    code:  the HTTP code to respond with
        :param str  reason:  the reason to return as the HTTP status message
        :param str explain:  a longer explanation of the error, returned only in the body
        :param dict  extra:  additional properties to include in the output message object
        """
        return self.send_fatal_error(FatalError(code, reason, explain, extra), ashead, contenttype)

    def send_fatal_error(self, fatalex: FatalError, ashead=None, contenttype="application/json"):
        """
        report a FatalError as a JSON-formatted error message back to the web client
        """
        return self.send_error(fatalex.code, fatalex.reason, fatalex.to_json(), contenttype, ashead)

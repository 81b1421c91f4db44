"""
Framework classes for creating REST web interfaces via WSGI

This small framework provides foundation classes for RESTful web APIs that wrap around the
data providers:
  *  a resource-based model for handling requests.  A :py:class:`~stddata.web.rest.base.Handler`
     handles a request on a single resource (given by a path).
  *  the ability to compose multiple resources into a single WSGI application via the
     :py:class:`~stddata.web.rest.base.ServiceApp` and
     :py:class:`~stddata.web.rest.base.WSGIAppSuite` classes.
  *  full control over the returned HTTP status for proper error handling
  *  support for client-specified return formats either via query parameters or the ``Accept``
     HTTP request header.

The business logic lives in the provider classes which know nothing about the web; a
:py:class:`~stddata.web.rest.base.ServiceApp` subclass wraps a provider and creates a
:py:class:`~stddata.web.rest.base.Handler` for each request.
"""
from .base import *

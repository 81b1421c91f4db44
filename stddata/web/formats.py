"""
Support for letting web clients choose the format of a response, either by a logical name given
in a query parameter (e.g. ``format=csv``) or via the ``Accept`` HTTP header.
"""
from collections import namedtuple
from typing import List

from .utils import is_content_type, match_accept, acceptable

class UnsupportedFormat(Exception):
    """
    the client requested only formats that are not supported.  This should normally result in a
    400 (Bad Request) response.
    """
    pass

class Unacceptable(Exception):
    """
    none of the supported formats that the client asked for corresponds to a content type that
    the client says it will accept.  This should normally result in a 406 (Not Acceptable)
    response.
    """
    pass

Format = namedtuple("Format", ["name", "ctype"])

class FormatSupport(object):
    """
    a registry of the output formats that a handler can produce.  Each format has a logical name
    and a default content type and may be requested via any number of content types.
    """

    def __init__(self):
        self._lu = {}        # format names and content types -> Format
        self._ctps = {}      # format name -> set of content types
        self._deffmt = None

    def support(self, format: Format, cts: List[str]=[], asdefault: bool=False):
        """
        register a format as supported.
        :param Format format:  the format to support
        :param [str]     cts:  the content types that should select this format when requested
        :param bool asdefault: if True, make this the format returned by :py:meth:`default_format`.
                               The first format registered is the default until another is made so.
        """
        if format.name in self._ctps:
            self._lu = dict(i for i in self._lu.items() if i[1].name != format.name)

        for ct in cts:
            self._lu[ct] = format
        self._lu[format.name] = format
        self._ctps[format.name] = set(cts) | {format.ctype}

        if asdefault or not self._deffmt:
            self._deffmt = format

    def default_format(self) -> Format:
        """
        the format to return when the client has not expressed a preference
        """
        return self._deffmt

    def match(self, fmtreq: str) -> Format:
        """
        return the supported Format that matches the given format name or content type, or None
        if there is no match.  A wildcard content type (e.g. "text/*") matches the default format
        if possible or else any format with a matching content type.
        """
        if fmtreq in ('*', '*/*'):
            return self.default_format()

        if fmtreq.endswith('/*'):
            start = fmtreq[:-1]
            if self._deffmt and self._deffmt.ctype.startswith(start):
                return self._deffmt
            for ct in self._lu:
                if ct.startswith(start):
                    return self._lu[ct]
            return None

        fmt = self._lu.get(fmtreq)
        if fmt and is_content_type(fmtreq):
            fmt = Format(fmt.name, fmtreq)
        return fmt

    def select_format(self, formats: List[str], accepts: List[str]) -> Format:
        """
        pick the supported format that best satisfies the client's request.  Formats requested
        by name (``formats``) take precedence, but the chosen one must still be consistent with
        the ``accepts`` list when that list is not empty.  None is returned if the client
        expressed no preference at all.
        :raises UnsupportedFormat:  if none of the requested ``formats`` is supported
        :raises Unacceptable:       if no supported format is consistent with ``accepts``
        """
        anything = not accepts or '*' in accepts or '*/*' in accepts

        if formats:
            matched = False
            for label in formats:
                fmt = self.match(label)
                if not fmt:
                    continue
                matched = True
                if anything:
                    return fmt

                if is_content_type(label):
                    mct = acceptable(label, accepts)
                    if mct:
                        if mct.endswith('/*') and match_accept(mct, fmt.ctype):
                            return fmt
                        return Format(fmt.name, mct)
                else:
                    for ct in accepts:
                        mct = acceptable(ct, list(self._ctps.get(fmt.name, [])))
                        if mct and not mct.endswith('/*'):
                            return Format(fmt.name, mct)

            if matched:
                raise Unacceptable("format parameter is inconsistent with Accept header")
            raise UnsupportedFormat("Unsupported format requested: "+", ".join(formats))

        if accepts:
            for label in accepts:
                fmt = self.match(label)
                if fmt:
                    return fmt
            raise Unacceptable("None of the given Accept types are supported")

        return None

class TextSupport(object):
    """
    registers plain text as an output format
    """
    FMT_TEXT = "text"

    @classmethod
    def add_support(cls, fmtsup: FormatSupport, asdefault: bool=False):
        fmtsup.support(Format(cls.FMT_TEXT, "text/plain"), ["text/plain"], asdefault)

class XHTMLSupport(object):
    """
    registers (X)HTML as an output format
    """
    FMT_HTML = "html"

    @classmethod
    def add_support(cls, fmtsup: FormatSupport, asdefault: bool=False):
        fmtsup.support(Format(cls.FMT_HTML, "text/html"),
                       ["text/html", "application/html", "application/xhtml+xml"], asdefault)

class JSONSupport(object):
    """
    registers JSON as an output format
    """
    FMT_JSON = "json"

    @classmethod
    def add_support(cls, fmtsup: FormatSupport, asdefault: bool=False):
        fmtsup.support(Format(cls.FMT_JSON, "application/json"),
                       ["application/json", "text/json"], asdefault)

class CSVSupport(object):
    """
    registers comma-separated values as an output format
    """
    FMT_CSV = "csv"

    @classmethod
    def add_support(cls, fmtsup: FormatSupport, asdefault: bool=False):
        fmtsup.support(Format(cls.FMT_CSV, "text/csv"), ["text/csv", "application/csv"], asdefault)

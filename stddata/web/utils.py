"""
functions that help interpret content-negotiation data in a web request
"""
import re

__all__ = [ 'is_content_type', 'match_accept', 'acceptable', 'order_accepts' ]

_qvalue_re = re.compile(r';\s*q=(\d+(\.\d+)?)')

def is_content_type(label: str) -> bool:
    """
    return True if the given format label looks like a MIME-type (i.e. it contains a '/')
    rather than a logical format name.
    """
    return '/' in label

def match_accept(ctype: str, accept: str) -> str:
    """
    compare a content type against an acceptable one, either of which may be a wildcard of the
    form "type/*".  If they match, the more specific of the two is returned; otherwise, None is
    returned.
    """
    if ctype == accept:
        return ctype
    if accept.endswith('/*') and ctype.startswith(accept[:-1]):
        return ctype
    if ctype.endswith('/*') and accept.startswith(ctype[:-1]):
        return accept
    return None

def acceptable(ctype: str, accepts) -> str:
    """
    return the first content type in ``accepts`` that matches ``ctype`` (via
    :py:func:`match_accept`) or None if none match.  An empty ``accepts`` list accepts anything.
    """
    if not accepts:
        return ctype
    if ctype in ('*', '*/*'):
        return accepts[0]
    for ct in accepts:
        m = match_accept(ctype, ct)
        if m:
            return m
    return None

def order_accepts(accepts) -> list:
    """
    parse the value(s) of Accept HTTP headers and return the MIME types they list, ordered by
    descending q-value.  Types with a q-value of zero are dropped.
    :param accepts:  the header value, either as a str or a list of str
    """
    if isinstance(accepts, str):
        accepts = [accepts]

    out = []
    for hdr in accepts:
        for item in hdr.split(','):
            item = item.strip()
            if not item:
                continue
            q = 1.0
            m = _qvalue_re.search(item)
            if m:
                q = float(m.group(1))
            out.append((re.sub(r';.*$', '', item).strip(), q))

    out.sort(key=lambda a: a[1], reverse=True)
    return [a[0] for a in out if a[1] > 0]

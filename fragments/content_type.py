"""Content-Type header parsing (RFC 7231 media-type grammar)."""

import re

from common.types import ContentType
from fragments.exceptions import MalformedContentTypeError

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_TYPE_RE = re.compile(rf"^{_TOKEN}/{_TOKEN}$")
_PARAM_RE = re.compile(
    rf"; *({_TOKEN}) *= *(\"(?:[\u000b\u0020\u0021\u0023-\u005b\u005d-\u007e\u0080-\u00ff]"
    rf"|\\[\u000b\u0020-\u00ff])*\"|{_TOKEN}) *"
)
_QUOTED_PAIR_RE = re.compile(r"\\([\u000b\u0020-\u00ff])")


def parse_content_type(value: object) -> ContentType:
    """
    Parse a Content-Type value such as 'text/plain; charset=utf-8'.

    Args:
        value: Raw header value

    Returns:
        ContentType with a lowercased type and lowercased parameter names

    Raises:
        MalformedContentTypeError: If the value is not a well-formed media type
    """
    if not isinstance(value, str) or not value.strip():
        raise MalformedContentTypeError(value)

    header = value.strip()
    index = header.find(";")
    media_type = header if index == -1 else header[:index]
    media_type = media_type.strip()

    if not _TYPE_RE.match(media_type):
        raise MalformedContentTypeError(value)

    parameters = {}
    if index != -1:
        position = index
        for match in _PARAM_RE.finditer(header, index):
            if match.start() != position:
                raise MalformedContentTypeError(value)
            position = match.end()
            name = match.group(1).lower()
            param_value = match.group(2)
            if param_value.startswith('"'):
                param_value = _QUOTED_PAIR_RE.sub(r"\1", param_value[1:-1])
            parameters[name] = param_value
        if position != len(header):
            raise MalformedContentTypeError(value)

    return ContentType(type=media_type.lower(), parameters=parameters)


def base_type(value: object) -> str:
    """
    Return only the type/subtype portion of a Content-Type value.

    Raises:
        MalformedContentTypeError: If the value is not a well-formed media type
    """
    return parse_content_type(value).type

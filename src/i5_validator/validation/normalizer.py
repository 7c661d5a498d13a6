"""Normalization of parser diagnostics into report keys.

Messages of the "element X not allowed anywhere; expected element A, B, C"
family differ only in their trailing context. Cutting that context off lets all
such findings for element X share one report key.
"""

import re
import unicodedata

NOT_ANYWHERE = "not allowed anywhere"

_NOT_ANYWHERE_PATTERN = re.compile(re.escape(NOT_ANYWHERE))
# Line terminators that end a regex "." match
_LINE_END_PATTERN = re.compile("[\n\r\u0085\u2028\u2029]")


def _is_punctuation(char: str) -> bool:
    return unicodedata.category(char).startswith("P")


def normalize_message(message: str) -> str:
    """Strip the trailing context of a "not allowed anywhere" diagnostic.

    The first occurrence of ``not allowed anywhere`` on the first line of the
    message that is immediately followed by a punctuation character ends the
    normalized message. Any other message is returned unchanged.

    Args:
        message: Raw parser diagnostic

    Returns:
        The normalized message

    Examples:
        >>> normalize_message('element "x" not allowed anywhere; expected "a"')
        'element "x" not allowed anywhere'
        >>> normalize_message("No declaration for element x")
        'No declaration for element x'
    """
    line_end = _LINE_END_PATTERN.search(message)
    first_line = message[:line_end.start()] if line_end else message

    for match in _NOT_ANYWHERE_PATTERN.finditer(first_line):
        end = match.end()
        if end < len(first_line) and _is_punctuation(first_line[end]):
            return first_line[:end]
    return message

r"""
Command-line tokenizer: split a raw line into tokens and merge tokens back.

States
- NORMAL:       space/tab separate tokens, '"' and "'" open quotes, backslash
                escapes any following character.
- DOUBLE_QUOTE: only '"' is special; backslash escapes '\' and '"' only.
- SINGLE_QUOTE: only "'" is special; backslash escapes '\' only.

Quotes change escaping and whitespace meaning, not token boundaries:
    >>> split('ab"cd ef"gh')
    ['abcd efgh']
    >>> split("--name 'a b' c\\ d")
    ['--name', 'a b', 'c d']
    >>> merge(["--name", "a b"])
    '--name "a b"'
"""
from enum import Enum
from types import MappingProxyType

from .faults import FaultCode, MalformedQuotingError, getdoc, trigger

SEPARATORS = frozenset(" \t")


class State(Enum):
    NORMAL = "normal"
    DOUBLE_QUOTE = "double-quote"
    SINGLE_QUOTE = "single-quote"


# characters with a meaning of their own, per state
_SPECIALS = MappingProxyType({
    State.NORMAL: frozenset('"\'') | SEPARATORS,
    State.DOUBLE_QUOTE: frozenset('"'),
    State.SINGLE_QUOTE: frozenset("'"),
})

# characters a backslash may escape, per state (None means any)
_ESCAPABLES = MappingProxyType({
    State.NORMAL: None,
    State.DOUBLE_QUOTE: frozenset('\\"'),
    State.SINGLE_QUOTE: frozenset("\\"),
})

_TRANSITIONS = MappingProxyType({
    (State.NORMAL, '"'): State.DOUBLE_QUOTE,
    (State.NORMAL, "'"): State.SINGLE_QUOTE,
    (State.DOUBLE_QUOTE, '"'): State.NORMAL,
    (State.SINGLE_QUOTE, "'"): State.NORMAL,
})

# characters that force merge() to quote a token
_QUOTED = _SPECIALS[State.NORMAL] | {"\\"}


def split(line, /, **options):
    """
    Split a command line into a list of tokens.

    A backslash ending the line is dropped. Adjacent separators never produce
    empty tokens, but an empty quoted pair ('' or "") does.

    Raises
    - TypeError when line is not a string.
    - MalformedQuotingError when the line ends inside an open quote. Extra
      keyword options are merged into the fault (e.g., shell/fancy/colorful).
    """
    if not isinstance(line, str):
        raise TypeError("split() argument must be a string")

    tokens = []
    if not line.strip():
        return tokens

    state = State.NORMAL
    buffer = []
    separated = True
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        special = None

        if char == "\\":
            if index == length - 1:
                break
            escapables = _ESCAPABLES[state]
            if escapables is None or line[index + 1] in escapables:
                index += 1
                char = line[index]
        elif char in _SPECIALS[state]:
            special = char

        if special in SEPARATORS:
            if not separated:
                tokens.append("".join(buffer))
                buffer.clear()
        elif special is not None:
            state = _TRANSITIONS[state, special]
        else:
            buffer.append(char)

        separated = special in SEPARATORS
        index += 1

    if state is not State.NORMAL:
        quote = '"' if state is State.DOUBLE_QUOTE else "'"
        trigger(MalformedQuotingError(
            "unterminated %s in %r" % (state.value, line),
            title="malformed quoting",
            code=FaultCode.MALFORMED_QUOTING,
            hint="close the quote with %s or escape it with a backslash" % quote,
            line=line,
            state=state,
            docs=getdoc(FaultCode.MALFORMED_QUOTING),
        ), **options)

    if not separated:
        tokens.append("".join(buffer))

    return tokens


def merge(tokens, /):
    """
    Join tokens into a single command line that split() reads back unchanged.

    Empty tokens and tokens holding whitespace, a quote or a backslash are
    double-quoted, with '\\' and '"' escaped inside; the rest are emitted
    verbatim.
    """
    if isinstance(tokens, str):
        raise TypeError("merge() argument must be an iterable of strings")

    parts = []
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("merge() argument must be an iterable of strings")
        if not token or _QUOTED & set(token):
            parts.append('"%s"' % token.replace("\\", "\\\\").replace('"', '\\"'))
        else:
            parts.append(token)
    return " ".join(parts)


__all__ = (
    "State",
    "split",
    "merge",
)

"""
Option matching over a token stream.

TokenStream
- An immutable tuple of tokens plus a set of consumed indices (and, for
  switch clusters, rewritten tokens). Cursors are plain indices, so consuming
  a range never invalidates a position somebody else remembered.

Scanner
- Finds where an option occurs from a given index onward. Long forms are tried
  before short forms (a long name is more specific). The end-of-options marker
  "--" stops every scan; the scanner remembers the first one it meets.

OptionMatch
- Where an option was found, through which prefix, and which inline fragment
  came with it. Knows which token carries its value and how to consume itself.
"""
from .specs import Arity, END_OF_OPTIONS, LONG_PREFIX, SHORT_PREFIX


class TokenStream:
    """
    Index-based view over the tokens of one invocation.

    The backing tuple never changes; consumption is recorded as removed
    indices and remaining() filters them out.
    """

    def __init__(self, tokens):
        self._tokens = tuple(tokens)
        self._removed = set()
        self._overrides = {}

    def __getitem__(self, index):
        return self._overrides.get(index, self._tokens[index])

    def __len__(self):
        return len(self._tokens) - len(self._removed)

    def __repr__(self):
        return f"TokenStream({self.remaining()!r})"

    def indices(self, start=0):
        """
        Yield the live indices from start onward, in order.
        """
        for index in range(max(start, 0), len(self._tokens)):
            if index not in self._removed:
                yield index

    def first(self):
        return next(self.indices(), None)

    def next(self, index):
        """
        The first live index after index (index itself may already be consumed).
        """
        return next(self.indices(index + 1), None)

    def find(self, token, start=0):
        for index in self.indices(start):
            if self[index] == token:
                return index
        return None

    def between(self, start, stop):
        """
        Live indices in [start, stop).
        """
        return [index for index in self.indices(start) if index < stop]

    def consume(self, *indices):
        self._removed.update(indices)

    def replace(self, index, token):
        self._overrides[index] = token

    def remaining(self):
        return [self[index] for index in self.indices()]


class OptionMatch:
    """
    Transient record of one occurrence of an option.

    Attributes
    - index: position of the matched token in the stream.
    - prefix: LONG_PREFIX or SHORT_PREFIX, the form that matched.
    - name: the option name as written after the prefix.
    - inline: the attached value fragment ('--name=value' / '-nvalue') or None.
    - value_index: position of a separate value token, or None.
    """

    __slots__ = ("option", "stream", "index", "prefix", "name", "inline", "value_index")

    def __init__(self, option, stream, index, prefix, name, inline=None):
        self.option = option
        self.stream = stream
        self.index = index
        self.prefix = prefix
        self.name = name
        self.inline = inline
        self.value_index = None

        if inline is None and option.arity is not Arity.SWITCH:
            following = stream.next(index)
            if following is not None and stream[following] != END_OF_OPTIONS:
                self.value_index = following

    def __repr__(self):
        return f"OptionMatch({self.token!r}, index={self.index}, inline={self.inline!r})"

    @property
    def token(self):
        return self.stream[self.index]

    @property
    def spelling(self):
        """
        The option as the user wrote it, e.g. '--count' or '-c'.
        """
        return self.prefix + self.name

    @property
    def value(self):
        """
        The raw value token (inline fragment first), or None when there is none.
        """
        if self.inline is not None:
            return self.inline
        if self.value_index is not None:
            return self.stream[self.value_index]
        return None

    def consume(self):
        """
        Remove the matched token (and its separate value token) from the stream.

        A switch matched inside a short cluster ('-xvf') only gives up its own
        character; the rest of the cluster stays for the other options.

        Returns the first live index after the consumed region, or None.
        """
        stream = self.stream
        token = stream[self.index]
        last = self.index

        if self.option.arity is Arity.SWITCH and self.prefix == SHORT_PREFIX and len(token) > 2:
            position = token.index(self.name, len(SHORT_PREFIX))
            stream.replace(self.index, token[:position] + token[position + 1:])
        else:
            stream.consume(self.index)

        if self.value_index is not None:
            stream.consume(self.value_index)
            last = self.value_index

        return stream.next(last)


class Scanner:
    """
    Option lookup with end-of-options bookkeeping for one invocation.

    Long names are looked up before short ones. A short name only matches
    single-dash tokens: '--count' never matches '-c', even though it holds
    the letter.

    terminator holds the index of the first end-of-options marker met while
    scanning, or None. Nothing at or after it is ever matched as an option.
    """

    def __init__(self, stream):
        self.stream = stream
        self.terminator = None

    def _reached(self, index):
        if self.terminator is None:
            self.terminator = index

    def match(self, option, start):
        """
        Find the first occurrence of option at or after start.

        Returns an OptionMatch or None.
        """
        if start is None or (self.terminator is not None and start > self.terminator):
            return None

        if option.long is not None:
            exact = LONG_PREFIX + option.long
            assigned = exact + "="
            for index in self.stream.indices(start):
                token = self.stream[index]
                if token == END_OF_OPTIONS:
                    self._reached(index)
                    break
                if token == exact:
                    return OptionMatch(option, self.stream, index, LONG_PREFIX, option.long)
                if token.startswith(assigned):
                    return OptionMatch(option, self.stream, index, LONG_PREFIX, option.long, token[len(assigned):])

        if option.short is not None:
            for index in self.stream.indices(start):
                token = self.stream[index]
                if token == END_OF_OPTIONS:
                    self._reached(index)
                    break
                if not token.startswith(SHORT_PREFIX) or token.startswith(LONG_PREFIX):
                    continue
                position = token.find(option.short, len(SHORT_PREFIX))
                if position != -1:
                    inline = token[position + 1:] or None
                    return OptionMatch(option, self.stream, index, SHORT_PREFIX, option.short, inline)

        return None


def match_option(option, stream, start=0):
    """
    One-shot lookup of option in stream from start (no marker bookkeeping kept).
    """
    return Scanner(stream).match(option, start)


__all__ = (
    "TokenStream",
    "OptionMatch",
    "Scanner",
    "match_option",
)

"""
Serialine engine: match tokens against Specs and hand them to the value codecs.

Phases of Serializer.deserialize_values(args, specs)
- options
  • sorted by arity (switches, then scalars, then sequences); short names match
    by substring, so switches are taken out of their clusters before any
    value-bearing option looks at them.
  • switch   → True when found, its default (False) otherwise.
  • scalar   → one value token (inline or the next one); none → MissingScalarValueError.
  • sequence → the values of every occurrence plus the tokens lying between
    consecutive occurrences, deserialized at once.
- arguments
  • start after the end-of-options marker when there is one, otherwise at the
    first remaining token; left to right, never re-scanning.
  • scalar takes one token; sequence takes everything that is left.

Absent items
- required → MissingRequiredSpecError.
- otherwise the declared default, or Unset (the absent marker).

Faults are surfaced through Serializer.trigger, so shell/fancy/colorful decide
between raising and rendering with rich.
"""
import operator
from collections.abc import Iterable, Mapping

from .codecs import Strategy
from .faults import (
    EmptyInlineValueWarning,
    FaultCode,
    MissingRequiredSpecError,
    MissingScalarValueError,
    SerializerException,
    getdoc,
    trigger,
)
from .matching import Scanner, TokenStream
from .specs import Arity, END_OF_OPTIONS, LONG_PREFIX, Option, Specs
from .tokenizer import split
from .utils import *


class Values(Mapping):
    """
    Read-only, ordered mapping from spec item (by identity) to its value.

    Unmatched items map to their default, or to Unset when they declare none;
    provided(spec) tells whether the item was actually found on the command line.
    """

    def __init__(self, items=(), provided=()):
        self._items = dict(items)
        self._provided = frozenset(provided)

    def __getitem__(self, spec):
        return self._items[spec]

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __repr__(self):
        return "Values({%s})" % ", ".join("%s: %r" % (self._label(spec), value) for spec, value in self._items.items())

    def __rich_repr__(self):
        for spec, value in self._items.items():
            yield self._label(spec), value

    @staticmethod
    def _label(spec):
        return spec.name

    def provided(self, spec, /):
        if spec not in self._items:
            raise KeyError(spec)
        return spec in self._provided


class Serializer:
    """
    Stateless command-line engine bound to a value Strategy.

    Parameters
    - strategy: Unset | Strategy
      lookup table of value codecs (Strategy() when omitted).
    - shell: bool
      render faults with rich on stderr (errors exit with status 1) instead of raising.
    - fancy: bool
      render faults inside a panel.
    - colorful: bool
      colorize rendered faults.

    A Serializer holds nothing per invocation, so it can be shared freely.
    """

    def __init__(self, strategy=Unset, /, *, shell=False, fancy=False, colorful=True):
        if not isinstance(strategy, Strategy | UnsetType):
            raise TypeError("Serializer() strategy must be a Strategy")
        self._strategy = coalesce(strategy, Strategy())
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    strategy = mirror("strategy")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __repr__(self):
        return f"Serializer({self._strategy!r}, shell={self._shell}, fancy={self._fancy}, colorful={self._colorful})"

    def trigger(self, fault, /, **options):
        """
        surface a fault with this serializer's runtime flags merged in.
        """
        trigger(fault, **options, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def tokenize(self, args, /):
        """
        Normalize args into a list of tokens.

        - str: split with the quote-aware tokenizer.
        - Iterable[str]: copied as-is.
        """
        if isinstance(args, str):
            return split(args, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        if not isinstance(args, Iterable):
            raise TypeError("args must be a string or an iterable of strings")
        tokens = list(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("args must be a string or an iterable of strings")
        return tokens

    def _absent(self, spec):
        if spec.required:
            kind = "option" if isinstance(spec, Option) else "argument"
            self.trigger(MissingRequiredSpecError(
                "missing required %s %s" % (kind, spec.name),
                title="missing required %s" % kind,
                code=FaultCode.MISSING_REQUIRED_SPEC,
                hint="pass a value for %s" % spec.name,
                spec=spec,
                docs=getdoc(FaultCode.MISSING_REQUIRED_SPEC),
            ))
        return spec.default

    def _deserialize(self, spec, tokens):
        try:
            return self._strategy.deserialize(spec.type, tokens)
        except SerializerException as fault:
            self.trigger(fault, spec=spec)

    def _inspect(self, match):
        if match.inline == "" and match.prefix == LONG_PREFIX:
            self.trigger(EmptyInlineValueWarning(
                "empty inline value for option %r" % match.spelling,
                title="empty inline value",
                code=FaultCode.EMPTY_INLINE_VALUE,
                hint="add a value after '=' (for example: %s=<value>)" % match.spelling,
                spec=match.option,
                index=match.index,
                docs=getdoc(FaultCode.EMPTY_INLINE_VALUE),
            ))

    def _options(self, specs, stream, scanner, results, provided):
        for option in sorted(specs.options, key=operator.attrgetter("arity")):
            match = scanner.match(option, stream.first())
            if match is None:
                results[option] = self._absent(option)
                continue

            provided.add(option)

            if option.arity is Arity.SWITCH:
                match.consume()
                results[option] = True

            elif option.arity is Arity.SCALAR:
                if match.value is None:
                    self.trigger(MissingScalarValueError(
                        "option %r lacks a value" % match.spelling,
                        title="missing option value",
                        code=FaultCode.MISSING_SCALAR_VALUE,
                        hint="pass a value right after %s" % match.spelling,
                        spec=option,
                        index=match.index,
                        docs=getdoc(FaultCode.MISSING_SCALAR_VALUE),
                    ))
                self._inspect(match)
                value = match.value
                match.consume()
                results[option] = self._deserialize(option, [value])

            else:
                tokens = []
                while match is not None:
                    self._inspect(match)
                    if match.value is not None:
                        tokens.append(match.value)
                    cursor = match.consume()
                    match = scanner.match(option, cursor)
                    if match is not None:
                        # tokens between two occurrences belong to the same option
                        between = stream.between(cursor, match.index)
                        tokens.extend(stream[index] for index in between)
                        stream.consume(*between)
                results[option] = self._deserialize(option, tokens)

    def _arguments(self, specs, stream, scanner, results, provided):
        marker = scanner.terminator
        if marker is None:
            marker = stream.find(END_OF_OPTIONS)

        if marker is None:
            cursor = stream.first()
        else:
            cursor = stream.next(marker)
            if specs.arguments:
                stream.consume(marker)

        for argument in specs.arguments:
            if cursor is None:
                results[argument] = self._absent(argument)
                continue

            if argument.arity is Arity.SCALAR:
                indices = [cursor]
                cursor = stream.next(cursor)
            else:
                indices = list(stream.indices(cursor))
                cursor = None

            tokens = [stream[index] for index in indices]
            stream.consume(*indices)
            provided.add(argument)
            results[argument] = self._deserialize(argument, tokens)

    def deserialize_values(self, args, specs, /):
        """
        Match args against specs.

        Parameters
        - args: str | Iterable[str]
        - specs: Specs

        Returns
        - (Values, list[str]): the values in declaration order and the tokens
          nothing consumed, in input order.

        The caller's sequence is never mutated; running twice on equal input
        gives equal results.
        """
        if not isinstance(specs, Specs):
            raise TypeError("deserialize_values() specs must be a Specs")

        stream = TokenStream(self.tokenize(args))
        scanner = Scanner(stream)
        results = {}
        provided = set()

        self._options(specs, stream, scanner, results, provided)
        self._arguments(specs, stream, scanner, results, provided)

        values = Values(((spec, results[spec]) for spec in specs), provided)
        return values, stream.remaining()

    def deserialize_object(self, cls, args, /):
        """
        Build an instance of a dataclass from args.

        Returns
        - (object, list[str]): the instance and the unconsumed tokens.
        """
        from .binding import bind

        target = bind(cls)
        values, remaining = self.deserialize_values(args, target.specs)
        return target.construct(values), remaining

    def serialize_value(self, type, value, /):
        """
        Turn one value into its raw tokens through the strategy.
        """
        try:
            return self._strategy.serialize(type, value)
        except SerializerException as fault:
            self.trigger(fault)

    def serialize_values(self, values, specs, /):
        """
        Turn values back into tokens that deserialize_values reads to equal values.

        Only provided items are written. Long names are preferred and carry
        their value inline; positionals follow the options, behind the
        end-of-options marker when one of them starts with '-'.

        A short-only option writes its value as a separate token. When that
        value starts with '-' and holds the letter of a declared short switch,
        the switch claims the token first and the value does not read back.
        """
        if not isinstance(specs, Specs):
            raise TypeError("serialize_values() specs must be a Specs")
        if not isinstance(values, Values):
            raise TypeError("serialize_values() values must be a Values")

        tokens = []
        for option in specs.options:
            if not values.provided(option):
                continue
            value = values[option]

            if option.arity is Arity.SWITCH:
                if value:
                    tokens.append(option.name)
                continue

            raws = self.serialize_value(option.type, value)
            if option.arity is Arity.SCALAR:
                raws = raws[:1]
            for raw in raws:
                if option.long is not None and raw:
                    tokens.append("%s=%s" % (option.name, raw))
                else:
                    tokens.extend((option.name, raw))

        positionals = []
        for argument in specs.arguments:
            if values.provided(argument):
                positionals.extend(self.serialize_value(argument.type, values[argument]))

        if any(raw.startswith("-") for raw in positionals):
            tokens.append(END_OF_OPTIONS)
        tokens.extend(positionals)
        return tokens

    def serialize_object(self, object, /):
        """
        Turn a dataclass instance into tokens (see serialize_values).
        """
        from .binding import bind

        target = bind(type(object))
        return self.serialize_values(target.extract(object), target.specs)


__all__ = (
    "Values",
    "Serializer",
)

"""
Value codecs: raw string tokens to typed values and back.

The engine only decides which tokens belong to which item; turning them into
values is delegated to a Strategy, a read-only lookup table from value type to
ValueCodec.

Lookup order (Strategy.lookup)
1. exact type                         (int → ScalarCodec(int))
2. generic origin                     (list[int] → CollectionCodec(list))
3. method resolution order            (Color(Enum) → EnumCodec)
4. registered predicates              (dataclasses → ObjectCodec)
Nothing found → UnknownValueTypeError.

Every codec receives the whole token list of one item: scalar codecs demand
exactly one token, collection codecs convert each token with the item type.

Extending
    strategy = Strategy() | {Version: ScalarCodec(Version.parse)}
"""
import builtins
import dataclasses
import typing
from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from .faults import FaultCode, InvalidValueError, UnknownValueTypeError, getdoc, trigger
from .specs import strip_optional
from .tokenizer import merge, split
from .utils import *


def _typename(type):
    return getattr(type, "__name__", None) or repr(type)


def _invalid(type, tokens, reason, /, **options):
    trigger(InvalidValueError(
        "cannot read %s from %r: %s" % (_typename(type), list(tokens), reason),
        title="invalid value",
        code=FaultCode.INVALID_VALUE,
        hint=options.pop("hint", "check the value given for this item"),
        type=type,
        tokens=tuple(tokens),
        docs=getdoc(FaultCode.INVALID_VALUE),
        **options
    ))


def _single(type, tokens):
    if len(tokens) != 1:
        _invalid(type, tokens, "expected exactly one value but got %d" % len(tokens))
    return tokens[0]


class ValueCodec(ABC):
    """
    Capability interface: how one family of value types is read and written.

    deserialize(strategy, type, tokens) -> value
    serialize(strategy, type, value) -> list of tokens

    The strategy is passed along so container codecs can delegate their items.
    """

    @abstractmethod
    def deserialize(self, strategy, type, tokens):
        raise NotImplementedError

    def serialize(self, strategy, type, value):
        return [str(value)]

    def __repr__(self):
        return f"{type(self).__name__}()"


class ScalarCodec(ValueCodec):
    """
    One token through a converter (the value type itself by default).

    ValueError/TypeError/ArithmeticError raised by the converter become
    InvalidValueError.
    """

    def __init__(self, converter=Unset, formatter=str):
        if converter is not Unset and not callable(converter):
            raise TypeError("ScalarCodec() converter must be callable")
        if not callable(formatter):
            raise TypeError("ScalarCodec() formatter must be callable")
        self._converter = converter
        self._formatter = formatter

    def __repr__(self):
        return f"ScalarCodec({coalesce(self._converter, '<type>')!r})"

    def deserialize(self, strategy, type, tokens):
        token = _single(type, tokens)
        converter = coalesce(self._converter, type)
        try:
            return converter(token)
        except (ValueError, TypeError, ArithmeticError) as error:
            _invalid(type, tokens, str(error) or error.__class__.__name__)

    def serialize(self, strategy, type, value):
        return [self._formatter(value)]


class BoolCodec(ValueCodec):
    TRUTHY = frozenset({"1", "true", "yes", "on", "y"})
    FALSY = frozenset({"0", "false", "no", "off", "n"})

    def deserialize(self, strategy, type, tokens):
        token = _single(type, tokens).strip().lower()
        if token in self.TRUTHY:
            return True
        if token in self.FALSY:
            return False
        _invalid(type, tokens, "not a boolean", hint="use one of: %s" % ", ".join(sorted(self.TRUTHY | self.FALSY)))

    def serialize(self, strategy, type, value):
        return ["true" if value else "false"]


class EnumCodec(ValueCodec):
    """
    Enum members by name (exact, then case-insensitive), then by value text.
    """

    def deserialize(self, strategy, type, tokens):
        token = _single(type, tokens)
        try:
            return type[token]
        except KeyError:
            pass
        for member in type:
            if member.name.lower() == token.lower() or str(member.value) == token:
                return member
        _invalid(type, tokens, "not a member", hint="choose one of: %s" % ", ".join(type.__members__))

    def serialize(self, strategy, type, value):
        return [value.name]


class CollectionCodec(ValueCodec):
    """
    Several tokens into a container, each converted with the item type.

    - list[T], set[T], frozenset[T], tuple[T, ...]: any number of items.
    - tuple[A, B]: exactly one token per declared position.
    - bare list/tuple/...: items are strings.
    """

    def __init__(self, factory):
        if not callable(factory):
            raise TypeError("CollectionCodec() factory must be callable")
        self._factory = factory

    def __repr__(self):
        return f"CollectionCodec({_typename(self._factory)})"

    @staticmethod
    def _items(type, count):
        arguments = typing.get_args(type)
        if not arguments:
            return [str] * count
        if len(arguments) == 2 and arguments[1] is Ellipsis:
            return [arguments[0]] * count
        if typing.get_origin(type) is tuple:
            return list(arguments)
        return [arguments[0]] * count

    def deserialize(self, strategy, type, tokens):
        items = self._items(type, len(tokens))
        if len(items) != len(tokens):
            _invalid(type, tokens, "expected %d values but got %d" % (len(items), len(tokens)))
        return self._factory(strategy.deserialize(item, [token]) for item, token in zip(items, tokens))

    def serialize(self, strategy, type, value):
        value = list(value)
        tokens = []
        for item, object in zip(self._items(type, len(value)), value):
            tokens.extend(strategy.serialize(item, object))
        return tokens


class ObjectCodec(ValueCodec):
    """
    Dataclass values: every token is itself a command line bound to the class.

        "--name a --size 2" → Item(name="a", size=2)

    Leftover tokens inside a nested line are reported as invalid values.
    """

    def deserialize(self, strategy, type, tokens):
        from .serializer import Serializer

        token = _single(type, tokens)
        object, remaining = Serializer(strategy).deserialize_object(type, split(token))
        if remaining:
            _invalid(type, tokens, "unexpected tokens %r" % remaining)
        return object

    def serialize(self, strategy, type, value):
        from .serializer import Serializer

        return [merge(Serializer(strategy).serialize_object(value))]


DEFAULT_CODECS = MappingProxyType({
    str: ScalarCodec(),
    int: ScalarCodec(),
    float: ScalarCodec(),
    complex: ScalarCodec(),
    Decimal: ScalarCodec(),
    Path: ScalarCodec(),
    bool: BoolCodec(),
    Enum: EnumCodec(),
    list: CollectionCodec(list),
    tuple: CollectionCodec(tuple),
    set: CollectionCodec(set),
    frozenset: CollectionCodec(frozenset),
})

DEFAULT_PREDICATES = (
    (dataclasses.is_dataclass, ObjectCodec()),
)


class Strategy:
    """
    Read-only lookup table from value type to ValueCodec.

    A Strategy never changes after construction, so one instance can be shared
    by any number of serializers and threads; use `strategy | {type: codec}`
    to derive an extended copy.
    """

    def __init__(self, codecs=Unset, predicates=Unset):
        codecs = dict(coalesce(codecs, DEFAULT_CODECS))
        predicates = tuple(coalesce(predicates, DEFAULT_PREDICATES))

        for key, codec in codecs.items():
            if not isinstance(codec, ValueCodec):
                raise TypeError(f"codec for {_typename(key)} must be a ValueCodec")
        for predicate, codec in predicates:
            if not callable(predicate) or not isinstance(codec, ValueCodec):
                raise TypeError("predicates must be (callable, ValueCodec) pairs")

        self._codecs = MappingProxyType(codecs)
        self._predicates = predicates

    @property
    def codecs(self):
        return self._codecs

    @property
    def predicates(self):
        return self._predicates

    def __or__(self, other, /):
        if not isinstance(other, Mapping):
            return NotImplemented
        return type(self)(self._codecs | other, self._predicates)

    def __repr__(self):
        return f"Strategy({', '.join(map(_typename, self._codecs))})"

    def lookup(self, type, /):
        """
        Find the codec for a value type (see module docstring for the order).
        """
        try:
            return self._codecs[type]
        except (KeyError, TypeError):
            pass

        if (origin := typing.get_origin(type)) is not None and origin in self._codecs:
            return self._codecs[origin]

        # IntEnum/StrEnum also inherit from int/str
        if isinstance(type, builtins.type) and issubclass(type, Enum) and Enum in self._codecs:
            return self._codecs[Enum]

        for base in getattr(type, "__mro__", ())[1:]:
            if base in self._codecs:
                return self._codecs[base]

        for predicate, codec in self._predicates:
            if predicate(type):
                return codec

        trigger(UnknownValueTypeError(
            "no codec registered for value type %s" % _typename(type),
            title="unknown value type",
            code=FaultCode.UNKNOWN_VALUE_TYPE,
            hint="register one with `strategy | {%s: codec}`" % _typename(type),
            type=type,
            docs=getdoc(FaultCode.UNKNOWN_VALUE_TYPE),
        ))

    def deserialize(self, type, tokens, /):
        type = strip_optional(type)
        return self.lookup(type).deserialize(self, type, list(tokens))

    def serialize(self, type, value, /):
        type = strip_optional(type)
        return list(self.lookup(type).serialize(self, type, value))


__all__ = (
    "ValueCodec",
    "ScalarCodec",
    "BoolCodec",
    "EnumCodec",
    "CollectionCodec",
    "ObjectCodec",
    "DEFAULT_CODECS",
    "DEFAULT_PREDICATES",
    "Strategy",
)

r"""
Serialine specifications: what an invocation expects to find on the command line.

Overview
- Arity
  • SWITCH: presence only, never consumes a value token (options only).
  • SCALAR: exactly one value.
  • SEQUENCE: a variable-length list of values.
  The numeric order matters: the engine resolves options by ascending arity.

- Specs
  • Option: named item with a short form ("-c") and/or a long form ("--count").
  • Argument: positional item; declaration order is significant.
  • Specs: the immutable, ordered pair (options, arguments) the engine runs on.

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- Shared
  • type: semantic value type; the key the deserialization strategy is queried with.
  • arity: Unset | Arity (defaults are derived from 'type', see default_arity).
  • metavar: Unset | str (label for the value), non-empty when provided.
  • descr: Unset | str (short help), non-empty when provided.
  • default: any value used when the item is not matched.
  • required: bool; a required item cannot declare a default.
- Option only
  • names: one or two of "-x" (short) and "--long-name" (long).

Identity
- Specs compare and hash by identity: Values are keyed by the very spec object.

Quick example:
    >>> count = Option("-c", "--count", type=int)
    >>> files = Argument("FILE", type=list[str])
    >>> specs = Specs([count], [files])
    >>> files.arity
    <Arity.SEQUENCE: 2>
"""
import functools
import operator
import re
import types
import typing
from enum import IntEnum

from .utils import *

LONG_PREFIX = "--"
SHORT_PREFIX = "-"
END_OF_OPTIONS = "--"

_COLLECTIONS = (list, tuple, set, frozenset)


class Arity(IntEnum):
    SWITCH = 0
    SCALAR = 1
    SEQUENCE = 2


def strip_optional(type, /):
    """
    X | None (or Optional[X]) → X; any other type is returned unchanged.
    """
    if typing.get_origin(type) in (typing.Union, types.UnionType):
        arguments = [argument for argument in typing.get_args(type) if argument is not types.NoneType]
        if len(arguments) == 1:
            return arguments[0]
    return type


def default_arity(type, /, *, named):
    """
    Derive the arity of an item from its value type.

    - bool on an option → SWITCH
    - list/tuple/set/frozenset, bare or parameterized (list[int]) → SEQUENCE
    - anything else → SCALAR
    """
    type = strip_optional(type)
    if named and type is bool:
        return Arity.SWITCH
    if (typing.get_origin(type) or type) in _COLLECTIONS:
        return Arity.SEQUENCE
    return Arity.SCALAR


class SpecType(type):
    """
    Metaclass giving specs a readable, stable representation.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for messages.
    - Provide __repr__/__rich_repr__ driven by __displayable__ (or
      __introspectable__ when __displayable__ is Unset).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Concise, stable representation, e.g. option(names=('-c', '--count'), ...).
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by Option and Argument.

    - type: must be a type or a parameterized generic (list[int], ...).
    - arity: Unset (derived from type) or an Arity member.
    - metavar/descr: Unset or non-empty strings after trimming; Unset becomes None.
    - required: a required item cannot declare a default.

    Mutates metadata in place.
    """
    if not isinstance(type_ := metadata["type"], type) and typing.get_origin(type_) is None:
        raise TypeError(f"{cls.__typename__} 'type' must be a type")

    if not isinstance(arity := metadata["arity"], Arity | UnsetType):
        raise TypeError(f"{cls.__typename__} 'arity' must be an Arity")
    metadata["arity"] = coalesce(arity, default_arity(type_, named=issubclass(cls, Option)))

    for field in ("metavar", "descr"):
        if not isinstance(value := metadata[field], str | UnsetType):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        metadata[field] = coalesce(value)

    if metadata["required"] and metadata["default"] is not Unset:
        raise TypeError(f"required {cls.__typename__} cannot have a 'default'")


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: split option names into their short and long forms.

    Accepted forms
    - short: "-x" (exactly one character, not '-', '=' or whitespace)
    - long:  "--name" (no whitespace, no '=', not starting with '-')

    At most one of each form; at least one name overall.
    """
    names = metadata.pop("names")
    if not names:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    short = long = Unset
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif re.fullmatch(r"--[^\s=\-][^\s=]*", name):
            if long is not Unset:
                raise ValueError(f"{cls.__typename__} cannot have more than one long name")
            long = name[len(LONG_PREFIX):]
        elif re.fullmatch(r"-[^\s=\-]", name):
            if short is not Unset:
                raise ValueError(f"{cls.__typename__} cannot have more than one short name")
            short = name[len(SHORT_PREFIX):]
        else:
            raise ValueError(f"{cls.__typename__} name {name!r} must look like '-x' or '--name'")

    metadata["short"] = coalesce(short)
    metadata["long"] = coalesce(long)

    if metadata["arity"] is Arity.SWITCH:
        if strip_optional(metadata["type"]) is not bool:
            raise TypeError(f"switch {cls.__typename__} 'type' must be bool")
        metadata["default"] = coalesce(metadata["default"], False)


class Option(metaclass=SpecType):
    """
    Named item specification (short and/or long form).

    Properties
    - short: str | None, the single character after "-".
    - long: str | None, the text after "--".
    - names: tuple of the prefixed forms, short first.
    - arity, type, metavar, default, descr, required (see module docstring).

    Switch options carry type bool and default to False when not matched.
    """

    __introspectable__ = (
        "short",
        "long",
        "arity",
        "type",
        "metavar",
        "default",
        "descr",
        "required",
    )
    __displayable__ = (
        "names",
        "arity",
        "type",
        "default",
        "required",
    )

    def __new__(
            cls,
            *names,
            type=str,
            arity=Unset,
            metavar=Unset,
            default=Unset,
            descr=Unset,
            required=False,
    ):
        metadata = {
            "names": names,
            "type": type,
            "arity": arity,
            "metavar": metavar,
            "default": default,
            "descr": descr,
            "required": bool(required),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        names = []
        if self.short is not None:
            names.append(SHORT_PREFIX + self.short)
        if self.long is not None:
            names.append(LONG_PREFIX + self.long)
        return tuple(names)

    @property
    def name(self):
        """
        Preferred display form: the long name when present, else the short one.
        """
        return self.names[-1]


class Argument(metaclass=SpecType):
    """
    Positional item specification.

    Arguments consume tokens strictly left to right, in declaration order:
    a SCALAR takes the next token, a SEQUENCE takes all that are left.
    """

    __introspectable__ = (
        "metavar",
        "arity",
        "type",
        "default",
        "descr",
        "required",
    )

    def __new__(
            cls,
            metavar=Unset,
            /,
            type=str,
            arity=Unset,
            default=Unset,
            descr=Unset,
            required=False,
    ):
        metadata = {
            "metavar": metavar,
            "type": type,
            "arity": arity,
            "default": default,
            "descr": descr,
            "required": bool(required),
        }
        _sanitize_metadata(cls, metadata)

        if metadata["arity"] is Arity.SWITCH:
            raise ValueError(f"{cls.__typename__} cannot be a switch")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def name(self):
        return self.metavar or "ARG"


class Specs(metaclass=SpecType):
    """
    Ordered options plus ordered arguments; immutable once built.

    Raises
    - TypeError when members are not Option/Argument instances.
    - ValueError when two options share a short or a long name, or when the
      same spec object appears twice.
    """

    __introspectable__ = (
        "options",
        "arguments",
    )

    def __new__(cls, options=(), arguments=()):
        options = tuple(options)
        arguments = tuple(arguments)

        if not all(isinstance(option, Option) for option in options):
            raise TypeError("specs options must be Option instances")
        if not all(isinstance(argument, Argument) for argument in arguments):
            raise TypeError("specs arguments must be Argument instances")
        if len(set(map(id, options + arguments))) != len(options) + len(arguments):
            raise ValueError("specs cannot contain the same item twice")

        seen = set()
        for option in options:
            for name in option.names:
                if name in seen:
                    raise ValueError(f"specs option name {name!r} is declared twice")
                seen.add(name)

        self = super().__new__(cls)
        self._options = options
        self._arguments = arguments
        return self

    def __iter__(self):
        yield from self._options
        yield from self._arguments

    def __len__(self):
        return len(self._options) + len(self._arguments)


__all__ = (
    "LONG_PREFIX",
    "SHORT_PREFIX",
    "END_OF_OPTIONS",
    "Arity",
    "strip_optional",
    "default_arity",
    "Option",
    "Argument",
    "Specs",
)

# Keep the metaclass off star-imports; it is an implementation detail.
del SpecType

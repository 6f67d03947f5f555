"""
Declarative binding: Specs generated from a dataclass.

Every init field of the dataclass becomes one item:
- a field created with option(...) or left undecorated → Option
  • names default to the field name: one character → "-x", otherwise
    "--field-name" (underscores become hyphens).
- a field created with argument(...) → Argument, in field order.

The field annotation is the value type (and drives the default arity); a
field without a default is required, except bool switches which simply
default to False.

    @dataclass
    class Copy:
        source: list[Path] = argument("SOURCE")
        force: bool = option("-f", "--force", default=False)
        jobs: int = 1

    instance, remaining = Serializer().deserialize_object(Copy, "-f --jobs 4 a b")
"""
import dataclasses
import functools
import typing

from .specs import Argument, Arity, Option, Specs, default_arity
from .utils import *

_METADATA_KEY = "serialine"


def option(*names, arity=Unset, metavar=Unset, descr=Unset, default=dataclasses.MISSING, default_factory=dataclasses.MISSING):
    """
    Declare a dataclass field bound to an Option.

    names/arity/metavar/descr are forwarded to Option; default/default_factory
    are the usual dataclass field defaults.
    """
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_METADATA_KEY: {
            "kind": Option,
            "names": names,
            "arity": arity,
            "metavar": metavar,
            "descr": descr,
        }},
    )


def argument(metavar=Unset, /, *, arity=Unset, descr=Unset, default=dataclasses.MISSING, default_factory=dataclasses.MISSING):
    """
    Declare a dataclass field bound to a positional Argument.
    """
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_METADATA_KEY: {
            "kind": Argument,
            "metavar": metavar,
            "arity": arity,
            "descr": descr,
        }},
    )


def _default_names(name):
    if len(name) == 1:
        return ("-" + name,)
    return ("--" + name.replace("_", "-"),)


class Binding:
    """
    The Specs of one dataclass plus the field each item fills.

    Attributes
    - cls: the dataclass.
    - specs: Specs built from its init fields.
    - fields: mapping of field name → Option | Argument, in field order.
    """

    def __init__(self, cls):
        if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
            raise TypeError("bind() argument must be a dataclass type")

        hints = typing.get_type_hints(cls)
        fields = {}

        for field in dataclasses.fields(cls):
            if not field.init:
                continue

            metadata = dict(field.metadata.get(_METADATA_KEY, {"kind": Option, "names": ()}))
            kind = metadata.pop("kind")
            names = metadata.pop("names", ())
            metavar = metadata.pop("metavar", Unset)
            annotation = hints.get(field.name, str)
            defaulted = field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING

            metadata["type"] = annotation
            if field.default is not dataclasses.MISSING:
                metadata["default"] = field.default

            if kind is Option:
                switch = coalesce(metadata.get("arity", Unset), default_arity(annotation, named=True)) is Arity.SWITCH
                metadata["required"] = not defaulted and not switch
                fields[field.name] = Option(*(names or _default_names(field.name)), metavar=metavar, **metadata)
            else:
                metadata["required"] = not defaulted
                fields[field.name] = Argument(metavar, **metadata)

        self.cls = cls
        self.fields = fields
        self.specs = Specs(
            [spec for spec in fields.values() if isinstance(spec, Option)],
            [spec for spec in fields.values() if isinstance(spec, Argument)],
        )

    def __repr__(self):
        return f"Binding({self.cls.__qualname__}, {self.specs!r})"

    def construct(self, values):
        """
        Instantiate the dataclass; absent items leave the field to its own default.
        """
        return self.cls(**{
            name: values[spec] for name, spec in self.fields.items() if values[spec] is not Unset
        })

    def extract(self, object):
        """
        Read an instance back into Values (None and Unset fields count as not provided).
        """
        from .serializer import Values

        items = {spec: getattr(object, name) for name, spec in self.fields.items()}
        provided = [spec for spec, value in items.items() if value is not None and value is not Unset]
        return Values(items.items(), provided)


@functools.cache
def bind(cls, /):
    """
    Cached Binding for a dataclass type.
    """
    return Binding(cls)


__all__ = (
    "option",
    "argument",
    "Binding",
    "bind",
)

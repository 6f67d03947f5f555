"""
Serialine utilities shared by the specs, the engine and the binding layer.

- Unset: "no value given". Stored in Values for items that were not found
  on the command line and declare no default.
- coalesce(value, default): Unset → default; every other value (None, 0, "")
  passes through untouched.
- rename("name"): decorator fixing __name__/__qualname__ of generated methods.
- mirror("name"): read-only property over self._name.

    >>> coalesce(Unset, 8)
    8
    >>> coalesce(0, 8)
    0
"""
import functools
from typing import final


@final
class UnsetType:
    """
    Type of the Unset singleton.

    Unset is falsy, prints as "Unset", survives copy/deepcopy/pickle as the
    same object, and the type cannot be subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """
    Replace Unset with default; anything else is returned as-is.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator giving a generated function a stable name for reprs and tracebacks.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def mirror(name, /):
    """
    Read-only property returning self._<name>.

        class Serializer:
            shell = mirror("shell")    # reads self._shell
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    @rename(name)
    def getter(self):
        return getattr(self, attribute)

    return property(getter, doc="read-only view of %s" % attribute)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)

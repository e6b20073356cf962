"""
Records: objects with a fixed set of string keys.

A record type is declared with a prototype, a mapping of every valid field
name to its default value. NIL marks a field with no default.

    bintree = define("BinaryTree", {"value": "anonymous", "left": NIL, "right": NIL})
    b = bintree.new()
    b.value            -> 'anonymous'
    b.left             -> None
    b.val              -> InvalidKey
    bintree.is_instance(b) -> True

Record types are classes generated from the prototype. Their instances
behave as read-only mappings over the declared fields, and accept field
assignment through attribute or item syntax for declared fields only.

A custom constructor receives the record type followed by the arguments
given to new(); calling record_type.factory(template) inside it plays the
role of super():

    def make(rt, value=None, left=None, right=None):
        return rt.factory({"value": value, "left": left, "right": right})
    bintree2 = define("BinaryTree", {"value": NIL, "left": NIL, "right": NIL}, make)
    bintree2.new("root", bintree2.new("left"))
"""

import abc
import collections.abc
import weakref
from typing import Any, Callable, Dict, Mapping, Optional

from hostkit.hostkit_config import dbg
from hostkit.hostkit_errors import InvalidKey, InvalidPrototype, InvalidDescriptor


class _Nil:
    """Stand-in for 'no value' in prototypes, templates and assignments."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<recordtype NIL>"

    def __bool__(self):
        return False


NIL = _Nil()

# Record types currently alive, by type name
_defined: 'weakref.WeakValueDictionary[str, type]' = weakref.WeakValueDictionary()


class RecordType(abc.ABCMeta):
    """Metaclass of record types: holds the type-level API, so none of it
    is visible as an attribute of a record instance."""

    def factory(cls, template: Optional[Mapping[str, Any]] = None) -> 'Record':
        """Builds an instance from an optional partial template of field values."""
        if template is None:
            template = {}
        elif not isinstance(template, collections.abc.Mapping):
            raise TypeError(f"{cls._typename} template must be a mapping, not {type(template).__name__}")
        proto = cls._prototype
        for key in template:
            if key not in proto:
                raise InvalidKey(key, cls._typename)
        values: Dict[str, Any] = {}
        for key, default in proto.items():
            value = template[key] if key in template else default
            if value is not NIL:
                values[key] = value
        return cls(values)

    def new(cls, *args, **kwargs) -> 'Record':
        if cls._constructor is not None:
            return cls._constructor(cls, *args, **kwargs)
        return cls.factory(*args, **kwargs)

    def is_instance(cls, obj: Any) -> bool:
        return type(obj) is cls

    def fields(cls):
        return tuple(cls._prototype.keys())


class Record(collections.abc.Mapping, metaclass=RecordType):
    """Base class of every generated record type.

    Any string is a valid field name. Item access always reaches the field;
    attribute access reaches it unless the name is already an attribute of
    the record (for example a Mapping method such as keys or values).
    """
    __slots__ = ("_values", "__weakref__")

    _typename: str = "recordtype"
    _prototype: Dict[str, Any] = {}
    _constructor: Optional[Callable[..., Any]] = None
    _stringifier: Optional[Callable[[Any], str]] = None

    def __init__(self, values: Dict[str, Any]):
        object.__setattr__(self, "_values", values)

    def __reduce__(self):
        return type(self), (dict(self._values),)

    # --- Field access ---

    def _check(self, key: Any):
        if key not in self._prototype:
            raise InvalidKey(key, self._typename)

    def __getitem__(self, key):
        self._check(key)
        return self._values.get(key)

    def __setitem__(self, key, value):
        self._check(key)
        if value is NIL:
            self._values.pop(key, None)
        else:
            self._values[key] = value

    def __delitem__(self, key):
        self._check(key)
        self._values.pop(key, None)

    def __getattr__(self, name):
        # Only reached when normal attribute lookup fails
        if name.startswith("__"):
            raise AttributeError(name)
        return self[name]

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        del self[name]

    def __iter__(self):
        return iter(self._prototype)

    def __len__(self):
        return len(self._prototype)

    def __contains__(self, key):
        return key in self._prototype

    def update(self, other=(), **kwargs):
        """Assigns several fields; every key is validated first."""
        items = dict(other, **kwargs)
        for key in items:
            self._check(key)
        for key, value in items.items():
            self[key] = value

    # Records have identity, not value, equality
    __eq__ = object.__eq__
    __ne__ = object.__ne__
    __hash__ = object.__hash__

    def __repr__(self):
        if self._stringifier is not None:
            return self._stringifier(self)
        return f"<{self._typename}: {record_id(self)}>"

    __str__ = __repr__


def define(name: str,
           prototype: Mapping[str, Any],
           constructor: Optional[Callable[..., Any]] = None,
           stringifier: Optional[Callable[[Any], str]] = None) -> RecordType:
    """Creates a new record type from a prototype of field names and defaults."""
    if not isinstance(name, str):
        raise InvalidPrototype(f"typename not a string: {name!r}")
    if prototype is None:
        prototype = {}
    if not isinstance(prototype, collections.abc.Mapping):
        raise InvalidPrototype(f"prototype not a mapping: {prototype!r}")
    for key in prototype:
        if not isinstance(key, str):
            raise InvalidPrototype(f"prototype key not a string: {key!r}")
    if constructor is not None and not callable(constructor):
        raise InvalidDescriptor(f"constructor not callable: {constructor!r}")
    if stringifier is not None and not callable(stringifier):
        raise InvalidDescriptor(f"stringifier not callable: {stringifier!r}")

    if name in _defined:
        dbg("recordtype", "redefining type name", repr(name))

    namespace = {
        "__slots__": (),
        "_typename": name,
        "_prototype": dict(prototype),
        # staticmethod keeps plain functions from binding to the instance
        "_constructor": staticmethod(constructor) if constructor is not None else None,
        "_stringifier": staticmethod(stringifier) if stringifier is not None else None,
    }
    rt = RecordType(name if name.isidentifier() else "Record", (Record,), namespace)
    _defined[name] = rt
    return rt


new = define


def is_recordtype(obj: Any) -> bool:
    return isinstance(obj, RecordType) and obj is not Record


def typename(obj: Any) -> Optional[str]:
    """Type name of a record, 'recordtype' for a record type, else None."""
    if isinstance(obj, Record):
        return obj._typename
    if is_recordtype(obj):
        return "recordtype"
    if obj is Record:
        return "recordtype root"
    return None


def parent(obj: Any) -> Optional[type]:
    """The record type of a record; Record for a record type; else None."""
    if isinstance(obj, Record):
        return type(obj)
    if is_recordtype(obj) or obj is Record:
        return Record
    return None


def record_id(obj: Any) -> Optional[str]:
    if isinstance(obj, Record):
        return hex(id(obj))
    return None


__all__ = [
    "NIL",
    "Record",
    "RecordType",
    "define",
    "new",
    "is_recordtype",
    "typename",
    "parent",
    "record_id",
]

"""
Field descriptors and wire name resolution for dataclass records
"""

import dataclasses
import functools
import logging
import sys
import typing
from collections import namedtuple


logger = logging.getLogger('xmlrpcbind.names')

# dataclass field metadata key holding the wire name override
WIRE_NAME = 'xmlrpc'

FieldInfo = namedtuple('FieldInfo', ['wire_name', 'name', 'kind', 'settable'])


def member(name=None, **kwargs):
    """Declare a dataclass field with an explicit wire name

    Any other keyword is passed through to dataclasses.field, e.g.

        stdout_logfile: str = member('stdout_logfile', default='')
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    if name is not None:
        metadata[WIRE_NAME] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def is_record(obj):
    """True for dataclass instances (not the classes themselves)"""
    return dataclasses.is_dataclass(obj) and not isinstance(obj, type)


def is_record_type(kind):
    return isinstance(kind, type) and dataclasses.is_dataclass(kind)


def is_public(name):
    return not name.startswith('_')


def fold(name):
    """Normalize a name for the case-insensitive fallback"""
    return name.replace('_', '').lower()


class UnresolvedHint(object):
    """Type hint of a field that cannot be evaluated

    Binding onto such a field raises ApplicationError.
    """

    __slots__ = ('field', 'annotation')

    def __init__(self, field, annotation):
        self.field = field
        self.annotation = annotation

    def __repr__(self):
        return "<UnresolvedHint:%s=%r>" % (self.field, self.annotation)


def _declaring_module(cls, name):
    for base in cls.__mro__:
        if name in base.__dict__.get('__annotations__', {}):
            return sys.modules.get(base.__module__)
    return sys.modules.get(cls.__module__)


def _field_hint(cls, field, localns):
    if not isinstance(field.type, str):
        return field.type
    module = _declaring_module(cls, field.name)
    globalns = dict(vars(module)) if module is not None else {}
    try:
        return eval(field.type, globalns, localns)
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        logger.debug("Cannot resolve hint %r of %s.%s: %s",
                     field.type, cls.__name__, field.name, e)
        return UnresolvedHint(field.name, field.type)


def get_hints(cls):
    """Resolve the type hint of every field of cls

    Hints are resolved one field at a time when the class as a whole
    cannot be, so a single bad forward reference only affects its field.
    """
    localns = {cls.__name__: cls}
    try:
        return typing.get_type_hints(cls, localns=localns)
    except (NameError, AttributeError, SyntaxError, TypeError):
        pass
    return dict((field.name, _field_hint(cls, field, localns))
                for field in dataclasses.fields(cls))


@functools.lru_cache(maxsize=None)
def get_fields(cls):
    """Return the FieldInfo tuple for a dataclass type, in declared order"""
    hints = get_hints(cls)
    ret = []
    for field in dataclasses.fields(cls):
        kind = hints.get(field.name, field.type)
        wire_name = field.metadata.get(WIRE_NAME) or field.name
        ret.append(FieldInfo(wire_name, field.name, kind, is_public(field.name)))
    return tuple(ret)


class NameTable(object):
    """Maps wire member names onto the settable fields of one record type

    Lookup order:
        1. declared wire name
        2. identifier, case sensitive
        3. identifier folded (lower case, no underscores)
    Only settable fields are candidates. First declared field wins ties.
    """

    def __init__(self, fields):
        self.by_wire_name = {}
        self.by_name = {}
        self.by_folded = {}
        for info in fields:
            if not info.settable:
                continue
            if info.wire_name != info.name:
                self.by_wire_name.setdefault(info.wire_name, info)
            self.by_name.setdefault(info.name, info)
            self.by_folded.setdefault(fold(info.name), info)

    def resolve(self, wire_name):
        """Return the FieldInfo for wire_name, or None"""
        info = self.by_wire_name.get(wire_name)
        if info is None:
            info = self.by_name.get(wire_name)
        if info is None:
            info = self.by_folded.get(fold(wire_name))
        return info


@functools.lru_cache(maxsize=None)
def name_table(cls):
    return NameTable(get_fields(cls))


def resolve(cls, wire_name):
    """Find the field of record type cls that a wire member binds onto"""
    return name_table(cls).resolve(wire_name)

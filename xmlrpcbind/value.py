"""
Decoded XML-RPC values

A Value holds exactly one wire kind. Scalars keep their wire text; the
decoder parses it when the value is bound onto a native field.
"""

from collections import namedtuple


# one <member> of a <struct>, in wire order
Member = namedtuple('Member', ['name', 'value'])


class Value(object):
    """A single <value> node"""

    __slots__ = ('kind', 'data')

    INT = 'int'
    I4 = 'i4'
    DOUBLE = 'double'
    STRING = 'string'
    BOOLEAN = 'boolean'
    DATETIME = 'dateTime.iso8601'
    BASE64 = 'base64'
    STRUCT = 'struct'
    ARRAY = 'array'
    NIL = 'nil'
    RAW = 'raw'

    # typed children of <value>, in the order they are tried
    PRECEDENCE = (INT, I4, DOUBLE, STRING, BOOLEAN, DATETIME, BASE64,
                  STRUCT, ARRAY, NIL)
    SCALARS = frozenset([INT, I4, DOUBLE, STRING, BOOLEAN, DATETIME, BASE64])

    def __init__(self, kind, data=None):
        if kind not in self.PRECEDENCE and kind != self.RAW:
            raise ValueError('unknown value kind: %r' % kind)
        self.kind = kind
        self.data = data

    def is_scalar(self):
        return self.kind in self.SCALARS

    def is_struct(self):
        return self.kind == self.STRUCT

    def is_array(self):
        return self.kind == self.ARRAY

    def is_nil(self):
        return self.kind == self.NIL

    def is_raw(self):
        return self.kind == self.RAW

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind == other.kind and self.data == other.data

    __hash__ = None

    def __repr__(self):
        return "<Value:%s=%r>" % (self.kind, self.data)

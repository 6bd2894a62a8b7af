"""
XML-RPC decoding

parse() turns a payload into Value trees, decode() and bind_response()
bind them onto a dataclass record supplied by the caller, loads()
returns plain Python values instead.
"""

import base64
import dataclasses
import datetime
import logging
import re
import types
import typing
import xml.etree.ElementTree as ElementTree
from collections import namedtuple

import dateutil.parser
from dateutil import tz

from xmlrpcbind.fault import (
    ApplicationError,
    DecodeError,
    Fault,
    InvalidParams,
    WrongArgumentsNumber,
)
from xmlrpcbind.names import (
    UnresolvedHint,
    get_fields,
    is_record,
    is_record_type,
    resolve,
)
from xmlrpcbind.value import Member, Value


logger = logging.getLogger('xmlrpcbind.unmarshal')

Response = namedtuple('Response', ['name', 'method_name', 'params', 'fault'])

ROOT_TAGS = ('methodCall', 'methodResponse')
DATETIME_FORMAT = '%Y%m%dT%H:%M:%S'
TRUE_VALUES = ('1', 'true', 'TRUE', 'True')
UTF8_NAMES = ('utf-8', 'utf8')

XML_DECL = re.compile(r'^\s*<\?xml(?:\s[^>]*?)?\?>')
XML_DECL_BYTES = re.compile(br'^\s*<\?xml(?:\s[^>]*?)?\?>')
ENCODING_ATTR = re.compile(br'encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._-]*)["\']')
INT_PATTERN = re.compile(r'[+-]?[0-9]+', re.ASCII)
DOUBLE_PATTERN = re.compile(r'[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?', re.ASCII)

NoneType = type(None)
UNION_TYPES = (typing.Union, getattr(types, 'UnionType', typing.Union))

# returned by bind_value when the field is to be left alone
UNSET = object()


def decode_charset(charset, data):
    """Default charset reader, backed by the Python codec registry"""
    try:
        return data.decode(charset)
    except LookupError:
        raise DecodeError('unsupported charset: %s' % charset)


def _to_text(raw, charset_reader=None):
    if isinstance(raw, str):
        return raw
    raw = bytes(raw)
    charset = None
    decl = XML_DECL_BYTES.match(raw)
    if decl:
        m = ENCODING_ATTR.search(decl.group(0))
        if m:
            charset = m.group(1).decode('ascii')
    try:
        if charset is None or charset.lower() in UTF8_NAMES:
            return raw.decode('utf-8-sig')
        logger.debug("Transcoding %s payload", charset)
        return (charset_reader or decode_charset)(charset, raw)
    except UnicodeDecodeError as e:
        raise DecodeError(str(e))


def _inner_text(node):
    parts = [node.text or '']
    for child in node:
        parts.append(ElementTree.tostring(child, encoding='unicode'))
    return ''.join(parts)


def _parse_value(node):
    if node is None:
        return Value(Value.NIL)
    for kind in Value.PRECEDENCE:
        child = node.find(kind)
        if child is None:
            continue
        if kind == Value.STRUCT:
            members = []
            for m in child.findall('member'):
                name = (m.findtext('name') or '').strip()
                members.append(Member(name, _parse_value(m.find('value'))))
            return Value(kind, members)
        elif kind == Value.ARRAY:
            return Value(kind, [_parse_value(v) for v in child.findall('data/value')])
        elif kind == Value.NIL:
            return Value(kind)
        text = child.text or ''
        # <string></string> is an empty string, other empty scalars are not set
        if text or kind == Value.STRING:
            return Value(kind, text)
    # untyped values default to string
    return Value(Value.RAW, _inner_text(node).strip())


def parse(raw, charset_reader=None):
    """Parse an XML-RPC payload

    raw may be text or bytes. For bytes declaring a non UTF-8 encoding,
    charset_reader(charset, data) must return the decoded text.

    Returns a Response(name, method_name, params, fault) where params is
    a list of Value and fault a Fault or None.
    """
    text = _to_text(raw, charset_reader)
    text = XML_DECL.sub('', text, count=1)
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as e:
        raise DecodeError(str(e))
    if root.tag not in ROOT_TAGS:
        raise DecodeError('unexpected root element <%s>' % root.tag)

    method_name = root.findtext('methodName')
    if method_name is not None:
        method_name = method_name.strip()
    params = [_parse_value(p.find('value')) for p in root.findall('params/param')]
    fault = None
    node = root.find('fault')
    if node is not None:
        fault = get_fault(_parse_value(node.find('value')))
    return Response(root.tag, method_name, params, fault)


def get_fault(value):
    """Build a Fault from the value of a <fault> element"""
    code = None
    message = None
    if value.is_struct():
        for name, item in value.data:
            if name == 'faultCode' and code is None:
                code = 0
                if item.kind in (Value.INT, Value.I4):
                    try:
                        code = int(item.data)
                    except ValueError:
                        logger.debug("Invalid faultCode: %r", item.data)
            elif name == 'faultString' and message is None:
                if item.kind in (Value.STRING, Value.RAW):
                    message = item.data
                else:
                    message = ''
    return Fault(code or 0, message or '')


# type hint helpers

def _is_union(kind):
    return typing.get_origin(kind) in UNION_TYPES


def _is_optional(kind):
    return _is_union(kind) and NoneType in typing.get_args(kind)


def _unwrap(kind):
    """Strip Optional[] from a type hint; other unions are dynamic"""
    if _is_union(kind):
        args = [a for a in typing.get_args(kind) if a is not NoneType]
        if len(args) == 1:
            return args[0]
        return typing.Any
    return kind


def _is_dynamic(kind):
    return kind is typing.Any or kind is object


def _list_item(kind):
    """Element hint for list kinds, None for anything else"""
    if kind is list:
        return typing.Any
    if typing.get_origin(kind) is list:
        args = typing.get_args(kind)
        return args[0] if args else typing.Any
    return None


def _type_name(kind):
    return getattr(kind, '__name__', None) or str(kind)


def _check_hint(kind):
    if isinstance(kind, UnresolvedHint):
        raise ApplicationError('cannot resolve type hint %r of field %s' % (
            kind.annotation, kind.field))


ZERO_VALUES = {
    int: 0,
    float: 0.0,
    str: '',
    bool: False,
    bytes: b'',
}


def zero_value(kind):
    """Value of a freshly allocated field of static type kind"""
    _check_hint(kind)
    if _is_optional(kind):
        return None
    if kind in ZERO_VALUES:
        return ZERO_VALUES[kind]
    if _list_item(kind) is not None:
        return []
    if is_record_type(kind):
        hints = dict((info.name, info.kind) for info in get_fields(kind))
        kwargs = {}
        for field in dataclasses.fields(kind):
            if not field.init:
                continue
            if field.default is dataclasses.MISSING and \
                    field.default_factory is dataclasses.MISSING:
                kwargs[field.name] = zero_value(hints[field.name])
        return kind(**kwargs)
    return None


# scalar parsers

def parse_int(text):
    # int() alone would also take '1_000' and non-ASCII digits
    if not INT_PATTERN.fullmatch(text.strip()):
        raise InvalidParams('cannot parse %r as int' % text)
    return int(text)


def parse_double(text):
    # float() alone would also take 'nan', 'inf' and '1_0.5'
    if not DOUBLE_PATTERN.fullmatch(text.strip()):
        raise InvalidParams('cannot parse %r as double' % text)
    return float(text)


def parse_bool(text):
    return text.strip() in TRUE_VALUES


def parse_datetime(text):
    """Parse a wire timestamp into a naive datetime in local time"""
    text = text.strip()
    try:
        return datetime.datetime.strptime(text, DATETIME_FORMAT)
    except ValueError:
        pass
    # some servers send extended ISO 8601, possibly with an offset
    ret = dateutil.parser.isoparse(text)
    if ret.tzinfo is not None:
        ret = ret.astimezone(tz.tzlocal()).replace(tzinfo=None)
    return ret


def parse_base64(text):
    return base64.b64decode(''.join(text.split()), validate=True)


SCALAR_PARSERS = {
    Value.INT: parse_int,
    Value.I4: parse_int,
    Value.DOUBLE: parse_double,
    Value.STRING: str,
    Value.BOOLEAN: parse_bool,
    Value.DATETIME: parse_datetime,
    Value.BASE64: parse_base64,
    Value.RAW: str,
}


def to_python(value):
    """Convert a Value tree to plain Python values"""
    if value.is_struct():
        ret = {}
        for name, item in value.data:
            if name not in ret:
                ret[name] = to_python(item)
        return ret
    elif value.is_array():
        return [to_python(v) for v in value.data]
    elif value.is_nil():
        return None
    return SCALAR_PARSERS[value.kind](value.data)


def _assign(target, info, new):
    if not info.settable:
        raise ApplicationError('field %s of %s is not settable' % (
            info.name, type(target).__name__))
    try:
        setattr(target, info.name, new)
    except AttributeError as e:
        # frozen dataclasses, read-only properties
        raise ApplicationError('cannot set field %s of %s: %s' % (
            info.name, type(target).__name__, e))


def _bind_members(members, target):
    cls = type(target)
    seen = set()
    for name, item in members:
        info = resolve(cls, name)
        if info is None:
            logger.debug("No field of %s matches member %r, skipping", cls.__name__, name)
            continue
        if info.name in seen:
            logger.debug("Duplicate member %r, skipping", name)
            continue
        seen.add(info.name)
        new = bind_value(item, info.kind, getattr(target, info.name, None))
        if new is not UNSET:
            _assign(target, info, new)


def _bind_struct(value, kind, current):
    if _is_dynamic(kind):
        return to_python(value)
    if not is_record_type(kind):
        raise InvalidParams('structure fields mismatch: %s != struct' % _type_name(kind))
    if isinstance(current, kind):
        target = current
    else:
        target = zero_value(kind)
    _bind_members(value.data, target)
    return target


def _bind_array(value, kind):
    if _is_dynamic(kind):
        return to_python(value)
    item_kind = _list_item(kind)
    if item_kind is None:
        raise InvalidParams('array fields mismatch: %s != list' % _type_name(kind))
    ret = []
    for item in value.data:
        v = bind_value(item, item_kind)
        if v is UNSET:
            v = zero_value(item_kind)
        ret.append(v)
    return ret


def bind_value(value, kind=typing.Any, current=None):
    """Convert value for a field whose static type is kind

    current is what the field holds now; a record found there is updated
    in place. Returns the new field value, or UNSET when the field must
    be left unchanged (nil).
    """
    if value.is_nil():
        return UNSET
    _check_hint(kind)
    base = _unwrap(kind)
    if value.is_struct():
        return _bind_struct(value, base, current)
    elif value.is_array():
        return _bind_array(value, base)
    val = SCALAR_PARSERS[value.kind](value.data)
    if not _is_dynamic(base) and type(val) is not base:
        raise InvalidParams('fields type mismatch: %s != %s' % (
            type(val).__name__, _type_name(base)))
    return val


def decode(raw, target, charset_reader=None):
    """Decode an XML-RPC payload into the fields of target

    target is a dataclass instance owned by the caller. Its fields are
    bound to the params in order, extra fields are left alone. A fault
    in the payload is raised as Fault before anything is bound.

    Fields bound before an error is raised keep their new values.
    """
    return bind_response(parse(raw, charset_reader=charset_reader), target)


def bind_response(response, target):
    """Bind the params of an already parsed Response onto target"""
    if response.fault is not None and not response.fault.is_empty():
        raise response.fault
    if not is_record(target):
        raise ApplicationError('cannot bind onto %s' % type(target).__name__)

    fields = get_fields(type(target))
    if len(fields) < len(response.params):
        raise WrongArgumentsNumber('%d params, %d fields' % (
            len(response.params), len(fields)))
    for info, value in zip(fields, response.params):
        if not info.settable:
            raise ApplicationError('field %s of %s is not settable' % (
                info.name, type(target).__name__))
        new = bind_value(value, info.kind, getattr(target, info.name, None))
        if new is not UNSET:
            _assign(target, info, new)
    return target


def loads(raw, charset_reader=None):
    """Decode a payload without a target

    Returns (params, method_name), params being a tuple of plain Python
    values. method_name is None for responses.
    """
    response = parse(raw, charset_reader=charset_reader)
    if response.fault is not None and not response.fault.is_empty():
        raise response.fault
    return tuple(to_python(v) for v in response.params), response.method_name

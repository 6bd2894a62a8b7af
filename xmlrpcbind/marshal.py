"""
XML-RPC encoding of native values
"""

import base64
import datetime
import inspect
import logging
import types

from xmlrpcbind.names import get_fields, is_record


logger = logging.getLogger('xmlrpcbind.marshal')


def escape(s):
    # & must go first
    s = s.replace("&", "&amp;")
    s = s.replace('"', "&quot;")
    s = s.replace("<", "&lt;")
    s = s.replace(">", "&gt;")
    return s


class Marshaller(object):
    """Writes native values as XML-RPC markup

    Values are looked up in the dispatch table by exact type first, then
    dataclass records, then the type's base classes. Values of any other
    type produce an empty <value></value>.

    Subclasses adding types must start from a copy of the table so the
    base class stays untouched:

        class DateMarshaller(Marshaller):
            dispatch = Marshaller.dispatch.copy()

            def dump_date(self, value, write):
                ...
            dispatch[datetime.date] = dump_date
    """

    dispatch = {}

    def dumps(self, params):
        out = []
        self.dump_params(params, out.append)
        return ''.join(out)

    def dump_params(self, params, write):
        write("<params>")
        for param in params:
            if is_record(param):
                # records are spread over one <param> per field
                for info in get_fields(type(param)):
                    write("<param>")
                    self._dump(getattr(param, info.name), write)
                    write("</param>")
            else:
                write("<param>")
                self._dump(param, write)
                write("</param>")
        write("</params>")

    def _lookup(self, value):
        f = self.dispatch.get(type(value))
        if f is not None:
            return f
        if is_record(value):
            return type(self).dump_struct
        for base in inspect.getmro(type(value))[1:]:
            f = self.dispatch.get(base)
            if f is not None:
                return f
        return None

    def _dump(self, value, write):
        write("<value>")
        f = self._lookup(value)
        if f is None:
            logger.debug("Skipping value of unsupported type %s", type(value).__name__)
        else:
            f(self, value, write)
        write("</value>")

    def dump_nil(self, value, write):
        write("<nil/>")
    dispatch[type(None)] = dump_nil

    def dump_bool(self, value, write):
        write("<boolean>")
        write(value and "1" or "0")
        write("</boolean>")
    dispatch[bool] = dump_bool

    def dump_int(self, value, write):
        write("<int>%d</int>" % value)
    dispatch[int] = dump_int

    def dump_double(self, value, write):
        write("<double>%f</double>" % value)
    dispatch[float] = dump_double

    def dump_unicode(self, value, write):
        write("<string>")
        write(escape(value))
        write("</string>")
    dispatch[str] = dump_unicode

    def dump_bytes(self, value, write):
        write("<base64>")
        write(base64.b64encode(bytes(value)).decode('ascii'))
        write("</base64>")
    dispatch[bytes] = dump_bytes
    dispatch[bytearray] = dump_bytes

    def dump_datetime(self, value, write):
        # no timezone on the wire
        write("<dateTime.iso8601>")
        write("%04d%02d%02dT%02d:%02d:%02d" % (
            value.year, value.month, value.day,
            value.hour, value.minute, value.second))
        write("</dateTime.iso8601>")
    dispatch[datetime.datetime] = dump_datetime

    def dump_array(self, value, write):
        dump = self._dump
        write("<array><data>")
        for v in value:
            dump(v, write)
        write("</data></array>")
    dispatch[list] = dump_array
    dispatch[tuple] = dump_array
    dispatch[types.GeneratorType] = dump_array

    def dump_struct(self, value, write):
        dump = self._dump
        write("<struct>")
        for info in get_fields(type(value)):
            write("<member>")
            write("<name>%s</name>" % escape(info.wire_name))
            dump(getattr(value, info.name), write)
            write("</member>")
        write("</struct>")

    def dump_fault(self, fault, write):
        write("<fault><value><struct>")
        write("<member><name>faultCode</name>")
        self._dump(int(fault.faultCode), write)
        write("</member>")
        write("<member><name>faultString</name>")
        self._dump(str(fault.faultString), write)
        write("</member>")
        write("</struct></value></fault>")


def encode_params(*params, **kwargs):
    """Encode params as a <params> block

    Every dataclass record given is flattened into one <param> per field.
    """
    marshaller = kwargs.get('marshaller') or Marshaller()
    return marshaller.dumps(params)


def encode_request(method_name, *params, **kwargs):
    """Encode a <methodCall>"""
    parts = (
        "<methodCall><methodName>", escape(method_name), "</methodName>",
        encode_params(*params, **kwargs),
        "</methodCall>",
    )
    return ''.join(parts)


def encode_response(*params, **kwargs):
    """Encode a <methodResponse> carrying params"""
    parts = (
        "<methodResponse>",
        encode_params(*params, **kwargs),
        "</methodResponse>",
    )
    return ''.join(parts)


def encode_fault(fault, marshaller=None):
    """Encode a <methodResponse> carrying a fault"""
    m = marshaller or Marshaller()
    out = ["<methodResponse>"]
    m.dump_fault(fault, out.append)
    out.append("</methodResponse>")
    return ''.join(out)


def encode_value(value, marshaller=None):
    """Encode a single value, including its <value> wrapper"""
    m = marshaller or Marshaller()
    out = []
    m._dump(value, out.append)
    return ''.join(out)

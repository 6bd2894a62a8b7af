"""
Server and client helpers on top of the XML-RPC codec

The transport is left to the caller: requests come in as payload bytes
and responses go out as payload bytes, sent with Codec.content_type.
"""

import logging

from xmlrpcbind.fault import ApplicationError, Fault, GenericError
from xmlrpcbind.marshal import encode_fault, encode_request, encode_response
from xmlrpcbind.unmarshal import UTF8_NAMES, bind_response, decode, parse


class Codec(object):
    """Server side codec

    Options:
        charset_reader  transcoding hook for non UTF-8 requests
        aliases         mapping of incoming method names to registered ones
        encoding        byte encoding of responses
    """

    content_type = 'text/xml; charset=utf-8'

    DEFAULT_OPTS = {
        'charset_reader': None,
        'aliases': None,
        'encoding': 'utf-8',
    }

    def __init__(self, opts=None):
        self.opts = dict(self.DEFAULT_OPTS)
        if opts:
            self.opts.update(opts)
        self.aliases = dict(self.opts['aliases'] or {})
        self.logger = logging.getLogger('xmlrpcbind.codec')
        if self.opts['encoding'].lower() not in UTF8_NAMES:
            self.content_type = 'text/xml; charset=%s' % self.opts['encoding']

    def register_alias(self, alias, method):
        """Serve calls to alias with method"""
        self.aliases[alias] = method

    def new_request(self, raw):
        return CodecRequest(self, raw)


class CodecRequest(object):
    """A single incoming call"""

    def __init__(self, codec, raw):
        self.codec = codec
        self.raw = raw
        self.error = None
        self.request = None
        try:
            self.request = parse(raw, charset_reader=codec.opts['charset_reader'])
        except GenericError as e:
            self.codec.logger.debug("Unparsable request: %s", e)
            self.error = e

    @property
    def method(self):
        """Name of the called method, after alias lookup"""
        if self.error is not None:
            raise self.error
        name = self.request.method_name
        return self.codec.aliases.get(name, name)

    def read_request(self, args):
        """Bind the call params onto args, a dataclass instance"""
        if self.error is not None:
            raise self.error
        try:
            return bind_response(self.request, args)
        except (GenericError, Fault) as e:
            self.error = e
            raise

    def write_response(self, reply=None, error=None):
        """Encode the reply, or a fault when the call failed

        error defaults to any error met while reading the request.
        """
        if error is None:
            error = self.error
        if error is None:
            if reply is None:
                body = encode_response()
            else:
                body = encode_response(reply)
        else:
            body = encode_fault(self.get_fault(error))
        encoding = self.codec.opts['encoding']
        if encoding.lower() not in UTF8_NAMES:
            body = "<?xml version='1.0' encoding='%s'?>\n%s" % (encoding, body)
        return body.encode(encoding, 'xmlcharrefreplace')

    def get_fault(self, error):
        if isinstance(error, Fault):
            return error
        elif isinstance(error, GenericError):
            return error.to_fault()
        self.codec.logger.warning("Unexpected error in %s: %r", self.request and
                                  self.request.method_name, error)
        return ApplicationError(str(error)).to_fault()


def encode_client_request(method, *args):
    """Payload bytes of a call to method"""
    return encode_request(method, *args).encode('utf-8')


def decode_client_response(data, reply, charset_reader=None):
    """Bind a response payload onto reply, raising Fault for faults"""
    return decode(data, reply, charset_reader=charset_reader)

"""
Faults and local codec errors
"""

import xmlrpc.client


class Fault(xmlrpc.client.Fault):
    """A fault reported by the remote side

    Carries the numeric code and message of a <fault> response. The
    standard library attribute names (faultCode, faultString) are kept.
    """

    def __init__(self, code=0, message='', **extra):
        super(Fault, self).__init__(code, message, **extra)

    @property
    def code(self):
        return self.faultCode

    @property
    def message(self):
        return self.faultString

    def is_empty(self):
        """True when neither a code nor a message is set"""
        return not self.faultCode and not self.faultString

    def __str__(self):
        return "%d: %s" % (self.faultCode, self.faultString)


class GenericError(Exception):
    """Base class for local encode/decode errors"""

    faultCode = -32603
    description = 'Internal Server Error'

    def __init__(self, detail=None):
        super(GenericError, self).__init__(detail)
        self.detail = detail

    def __str__(self):
        if self.detail:
            return "%s: %s" % (self.description, self.detail)
        return self.description

    def to_fault(self):
        """Express this error as a wire fault"""
        return Fault(self.faultCode, str(self))


class DecodeError(GenericError):
    """The payload is not well formed XML-RPC"""
    faultCode = -32700
    description = 'Parsing error: not well formed'


class WrongArgumentsNumber(GenericError):
    """The target has fewer fields than the payload has params"""
    faultCode = -32602
    description = 'Wrong Arguments Number'


class InvalidParams(GenericError):
    """A decoded value does not fit the field it is bound to"""
    faultCode = -32602
    description = 'Invalid Method Parameters'


class ApplicationError(GenericError):
    """A field could not be written"""
    faultCode = -32500
    description = 'Application Error (unknown)'

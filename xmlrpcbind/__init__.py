"""
xmlrpcbind - XML-RPC codec binding payloads onto dataclass records

Encoding:

    encode_request('supervisor.getProcessInfo', 'api-gateway')

Decoding into a record owned by the caller:

    @dataclasses.dataclass
    class ProcessInfoResult:
        process: Optional[ProcessInfo] = None

    decode(payload, ProcessInfoResult())

Fault responses are raised as Fault.
"""

from xmlrpcbind.fault import (  # noqa: F401
    ApplicationError,
    DecodeError,
    Fault,
    GenericError,
    InvalidParams,
    WrongArgumentsNumber,
)
from xmlrpcbind.value import Member, Value  # noqa: F401
from xmlrpcbind.names import (  # noqa: F401
    FieldInfo,
    UnresolvedHint,
    get_fields,
    member,
    name_table,
)
from xmlrpcbind.marshal import (  # noqa: F401
    Marshaller,
    encode_fault,
    encode_params,
    encode_request,
    encode_response,
    encode_value,
)
from xmlrpcbind.unmarshal import (  # noqa: F401
    UNSET,
    bind_response,
    bind_value,
    decode,
    get_fault,
    loads,
    parse,
    to_python,
)
from xmlrpcbind.codec import (  # noqa: F401
    Codec,
    CodecRequest,
    decode_client_response,
    encode_client_request,
)

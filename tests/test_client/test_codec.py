import unittest
from dataclasses import dataclass
from typing import Optional

import mock

import xmlrpcbind


@dataclass
class GetInfoArgs:
    name: str = ''


@dataclass
class Info:
    name: str = ''
    pid: int = 0


@dataclass
class InfoResult:
    info: Optional[Info] = None


class TestServerCodec(unittest.TestCase):

    def setUp(self):
        self.codec = xmlrpcbind.Codec()

    def test_request(self):
        raw = xmlrpcbind.encode_client_request('supervisor.getProcessInfo', 'web')
        req = self.codec.new_request(raw)
        self.assertEqual(req.method, 'supervisor.getProcessInfo')
        args = req.read_request(GetInfoArgs())
        self.assertEqual(args, GetInfoArgs('web'))

    def test_alias(self):
        self.codec.register_alias('getProcessInfo', 'Supervisor.GetProcessInfo')
        req = self.codec.new_request(xmlrpcbind.encode_client_request('getProcessInfo'))
        self.assertEqual(req.method, 'Supervisor.GetProcessInfo')

    def test_alias_opts(self):
        codec = xmlrpcbind.Codec({'aliases': {'a': 'b'}})
        self.assertEqual(codec.new_request(xmlrpcbind.encode_client_request('a')).method, 'b')
        self.assertEqual(codec.opts['encoding'], 'utf-8')

    def test_bad_request(self):
        req = self.codec.new_request(b'<methodCall>')
        with self.assertRaises(xmlrpcbind.DecodeError):
            req.method
        body = req.write_response()
        with self.assertRaises(xmlrpcbind.Fault) as cm:
            xmlrpcbind.loads(body)
        self.assertEqual(cm.exception.code, -32700)

    def test_write_response(self):
        req = self.codec.new_request(xmlrpcbind.encode_client_request('x'))
        body = req.write_response(Info('web', 12))
        self.assertEqual(body, (b'<methodResponse><params>'
                                b'<param><value><string>web</string></value></param>'
                                b'<param><value><int>12</int></value></param>'
                                b'</params></methodResponse>'))

    def test_write_empty_response(self):
        req = self.codec.new_request(xmlrpcbind.encode_client_request('x'))
        self.assertEqual(req.write_response(),
                         b'<methodResponse><params></params></methodResponse>')

    def test_write_fault(self):
        req = self.codec.new_request(xmlrpcbind.encode_client_request('x'))
        body = req.write_response(error=xmlrpcbind.Fault(70, 'NOT_RUNNING'))
        with self.assertRaises(xmlrpcbind.Fault) as cm:
            xmlrpcbind.decode_client_response(body, InfoResult())
        self.assertEqual((cm.exception.code, cm.exception.message), (70, 'NOT_RUNNING'))

    def test_read_error_becomes_fault(self):
        req = self.codec.new_request(xmlrpcbind.encode_client_request('x', 'a', 'b'))
        with self.assertRaises(xmlrpcbind.WrongArgumentsNumber):
            req.read_request(GetInfoArgs())
        with self.assertRaises(xmlrpcbind.Fault) as cm:
            xmlrpcbind.loads(req.write_response())
        self.assertEqual(cm.exception.code, -32602)

    def test_unexpected_error(self):
        req = self.codec.new_request(xmlrpcbind.encode_client_request('x'))
        with mock.patch.object(self.codec, 'logger') as logger:
            body = req.write_response(error=RuntimeError('disk full'))
        logger.warning.assert_called_once()
        with self.assertRaises(xmlrpcbind.Fault) as cm:
            xmlrpcbind.loads(body)
        self.assertEqual(cm.exception.code, -32500)
        self.assertEqual(cm.exception.message, 'Application Error (unknown): disk full')

    def test_latin1_response(self):
        codec = xmlrpcbind.Codec({'encoding': 'iso-8859-1'})
        self.assertEqual(codec.content_type, 'text/xml; charset=iso-8859-1')
        req = codec.new_request(xmlrpcbind.encode_client_request('x'))
        body = req.write_response(Info(u'caf\xe9', 1))
        self.assertIn(b'caf\xe9', body)
        result = xmlrpcbind.decode_client_response(body, Info())
        self.assertEqual(result, Info(u'caf\xe9', 1))

    def test_charset_reader_passed(self):
        reader = mock.Mock(side_effect=lambda charset, data: data.decode('latin-1'))
        codec = xmlrpcbind.Codec({'charset_reader': reader})
        raw = (b'<?xml version="1.0" encoding="latin-1"?><methodCall>'
               b'<methodName>x</methodName><params><param><value>\xe9</value></param>'
               b'</params></methodCall>')
        req = codec.new_request(raw)
        self.assertEqual(req.read_request(GetInfoArgs()), GetInfoArgs(u'\xe9'))
        # the payload is parsed once, when the request is created
        reader.assert_called_once_with('latin-1', raw)


class TestClient(unittest.TestCase):

    def test_encode_request(self):
        self.assertEqual(xmlrpcbind.encode_client_request('supervisor.getState'),
                         b'<methodCall><methodName>supervisor.getState</methodName>'
                         b'<params></params></methodCall>')

    def test_decode_response(self):
        body = (b"<methodResponse><params><param><value><struct>"
                b"<member><name>name</name><value><string>web</string></value></member>"
                b"<member><name>pid</name><value><int>12</int></value></member>"
                b"</struct></value></param></params></methodResponse>")
        result = xmlrpcbind.decode_client_response(body, InfoResult())
        self.assertEqual(result.info, Info('web', 12))

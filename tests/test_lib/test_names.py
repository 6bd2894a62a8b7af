import unittest
from dataclasses import dataclass
from typing import List, Optional

import xmlrpcbind
from xmlrpcbind.names import UnresolvedHint, fold, get_fields, name_table, resolve


@dataclass
class Record:
    UserID: int = 0
    user_name: str = xmlrpcbind.member('login', default='')
    groups: List[str] = None
    _token: Optional[str] = None
    Userid: int = 0


class TestFields(unittest.TestCase):

    def test_descriptors(self):
        fields = get_fields(Record)
        self.assertEqual([f.name for f in fields],
                         ['UserID', 'user_name', 'groups', '_token', 'Userid'])
        self.assertEqual(fields[1].wire_name, 'login')
        self.assertEqual(fields[0].wire_name, 'UserID')
        self.assertEqual(fields[2].kind, List[str])
        self.assertFalse(fields[3].settable)
        self.assertTrue(fields[0].settable)

    def test_table_cached(self):
        self.assertIs(name_table(Record), name_table(Record))

    def test_member_keeps_metadata(self):
        f = xmlrpcbind.member('x', default=1, metadata={'doc': 'y'})
        self.assertEqual(dict(f.metadata), {'doc': 'y', 'xmlrpc': 'x'})


class TestResolve(unittest.TestCase):

    def test_wire_name(self):
        self.assertEqual(resolve(Record, 'login').name, 'user_name')

    def test_exact(self):
        self.assertEqual(resolve(Record, 'Userid').name, 'Userid')
        self.assertEqual(resolve(Record, 'user_name').name, 'user_name')

    def test_folded(self):
        # first declared field wins on folded collisions
        self.assertEqual(resolve(Record, 'user_id').name, 'UserID')
        self.assertEqual(resolve(Record, 'userid').name, 'UserID')
        self.assertEqual(resolve(Record, 'GROUPS').name, 'groups')

    def test_private_never_matched(self):
        self.assertIsNone(resolve(Record, '_token'))
        self.assertIsNone(resolve(Record, 'token'))

    def test_no_match(self):
        self.assertIsNone(resolve(Record, 'nothing'))

    def test_fold(self):
        self.assertEqual(fold('Stdout_LogFile'), 'stdoutlogfile')


@dataclass
class Tree:
    label: 'str' = ''
    children: 'List[Tree]' = None
    owner: 'Optional[Record]' = None
    extra: 'Missing' = None  # noqa: F821


class TestHints(unittest.TestCase):

    def test_forward_references(self):
        kinds = dict((f.name, f.kind) for f in get_fields(Tree))
        self.assertIs(kinds['label'], str)
        self.assertEqual(kinds['children'], List[Tree])
        self.assertEqual(kinds['owner'], Optional[Record])
        self.assertIsInstance(kinds['extra'], UnresolvedHint)
        self.assertEqual(kinds['extra'].annotation, 'Missing')

    def test_local_records(self):
        @dataclass
        class Inner:
            x: int = 0

        @dataclass
        class Outer:
            n: 'int' = 0
            inner: 'Inner' = None  # noqa: F821

        fields = get_fields(Outer)
        self.assertIs(fields[0].kind, int)
        self.assertIsInstance(fields[1].kind, UnresolvedHint)

        text = ("<methodResponse><params>"
                "<param><value><string>oops</string></value></param>"
                "</params></methodResponse>")
        with self.assertRaises(xmlrpcbind.InvalidParams):
            xmlrpcbind.decode(text, Outer())

        text = ("<methodResponse><params>"
                "<param><value><int>1</int></value></param>"
                "<param><value><struct><member><name>x</name>"
                "<value><int>2</int></value></member></struct></value></param>"
                "</params></methodResponse>")
        target = Outer()
        with self.assertRaises(xmlrpcbind.ApplicationError) as cm:
            xmlrpcbind.decode(text, target)
        self.assertIn('inner', str(cm.exception))
        self.assertEqual(target.n, 1)

        # encoding does not depend on hints
        self.assertEqual(xmlrpcbind.encode_value(Outer(3)),
                         "<value><struct>"
                         "<member><name>n</name><value><int>3</int></value></member>"
                         "<member><name>inner</name><value><nil/></value></member>"
                         "</struct></value>")

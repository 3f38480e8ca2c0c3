import datetime
import unittest
from xml.etree import ElementTree

from jssapi import tools
from jssapi.exceptions import InvalidDataError


class TestBools(unittest.TestCase):

    def test_to_bool_accepts_jss_strings(self):
        self.assertTrue(tools.to_bool('true'))
        self.assertTrue(tools.to_bool('Yes'))
        self.assertFalse(tools.to_bool('false'))
        self.assertFalse(tools.to_bool(None))

    def test_bool_text(self):
        self.assertEqual(tools.bool_text(True), 'true')
        self.assertEqual(tools.bool_text(0), 'false')

    def test_validate_bool_rejects_strings(self):
        self.assertTrue(tools.validate_bool(True))
        with self.assertRaises(InvalidDataError):
            tools.validate_bool('true')


class TestIntegers(unittest.TestCase):

    def test_validate_integer(self):
        self.assertEqual(tools.validate_integer(' 12 '), 12)
        with self.assertRaises(InvalidDataError):
            tools.validate_integer('twelve')
        with self.assertRaises(InvalidDataError):
            tools.validate_integer(True)

    def test_validate_priority_bounds(self):
        self.assertEqual(tools.validate_priority('5', 1, 20), 5)
        with self.assertRaises(InvalidDataError):
            tools.validate_priority(21, 1, 20)


class TestDates(unittest.TestCase):

    def test_epoch_round_trip(self):
        when = datetime.datetime(2017, 5, 1, 12, 30,
                                 tzinfo=datetime.timezone.utc)
        epoch = tools.datetime_to_epoch(when)
        self.assertEqual(epoch, 1493641800000)
        self.assertEqual(tools.epoch_to_datetime(epoch), when)

    def test_zero_epoch_is_none(self):
        self.assertIsNone(tools.epoch_to_datetime(0))
        self.assertIsNone(tools.epoch_to_datetime(''))
        self.assertEqual(tools.datetime_to_epoch(None), 0)

    def test_parse_datetime_formats(self):
        parsed = tools.parse_datetime('2017-05-01T12:30:00Z')
        self.assertEqual(parsed.hour, 12)
        self.assertIsNotNone(parsed.tzinfo)
        self.assertEqual(tools.parse_datetime('2017-05-01').day, 1)
        self.assertIsNone(tools.parse_datetime(''))
        with self.assertRaises(InvalidDataError):
            tools.parse_datetime('last tuesday')


class TestLists(unittest.TestCase):

    def test_as_list_unwraps_single_items(self):
        self.assertEqual(tools.as_list(None), [])
        self.assertEqual(tools.as_list({'computer': {'id': 1}}, 'computer'),
                         [{'id': 1}])
        self.assertEqual(tools.as_list([{'id': 1}, {'id': 2}]),
                         [{'id': 1}, {'id': 2}])

    def test_add_list(self):
        root = ElementTree.Element('root')
        tools.add_list(root, 'computers', 'computer',
                       [{'id': 1, 'name': 'a'}, {'name': 'b'}])
        computers = root.findall('computers/computer')
        self.assertEqual(len(computers), 2)
        self.assertEqual(computers[0].findtext('id'), '1')
        self.assertIsNone(computers[1].find('id'))

    def test_singularize(self):
        self.assertEqual(tools.singularize('computers'), 'computer')
        self.assertEqual(tools.singularize('categories'), 'category')
        self.assertEqual(tools.singularize('addresses'), 'address')


class TestOSRequirements(unittest.TestCase):

    def test_expand_min_os(self):
        versions = tools.expand_min_os('>=10.12.4')
        self.assertEqual(versions[0], '10.12.4')
        self.assertIn('10.12.15', versions)
        self.assertIn('10.13.x', versions)
        self.assertEqual(versions[-1], '10.19.x')

    def test_os_requirements_list(self):
        self.assertEqual(tools.os_requirements_list('10.9.x, 10.10.x'),
                         ['10.9.x', '10.10.x'])
        self.assertEqual(tools.os_requirements_list(''), [])
        with self.assertRaises(InvalidDataError):
            tools.os_requirements_list(10.9)

    def test_os_ok(self):
        self.assertTrue(tools.os_ok([], '10.13.1'))
        self.assertTrue(tools.os_ok(['10.13.x'], '10.13.1'))
        self.assertTrue(tools.os_ok(['10.13'], '10.13.0'))
        self.assertFalse(tools.os_ok(['10.13'], '10.13.1'))
        self.assertFalse(tools.os_ok(['10.12.x'], '10.13.1'))
        self.assertTrue(tools.os_ok(['10.9.x'], '10.9'))
        self.assertFalse(tools.os_ok(['10.9.x'], '10.91'))
        self.assertFalse(tools.os_ok(['10.9.x'], '10.9.'))

from jssapi.computer import Computer
from jssapi.criteria import Criteria, Criterion
from jssapi.exceptions import (InvalidDataError, MissingDataError,
                               NoSuchItemError, UnsupportedError)
from jssapi.group import ComputerGroup, UserGroup
from jssapi.user import User

from tests import JSSTestCase


STATIC_GROUP = {'id': 5, 'name': 'Lab', 'is_smart': False,
                'computers': [{'id': 1, 'name': 'lab-1',
                               'serial_number': 'S1'}]}
SMART_GROUP = {'id': 6, 'name': 'Old macOS', 'is_smart': True,
               'criteria': [{'name': 'Operating System Version',
                             'priority': 0, 'and_or': 'and',
                             'search_type': 'less than',
                             'value': '10'}],
               'computers': []}


class TestCriteria(JSSTestCase):

    def test_value_validated_by_search_type(self):
        with self.assertRaises(InvalidDataError):
            Criterion('Last Check-in', 'more than x days ago', 'ten')
        with self.assertRaises(InvalidDataError):
            Criterion('Last Check-in', 'before (yyyy-mm-dd)', '1/2/2017')
        with self.assertRaises(InvalidDataError):
            Criterion('Model', 'sounds like', 'Mac')

    def test_priorities_follow_order(self):
        first = Criterion('Model', 'like', 'MacBook')
        second = Criterion('Building', 'is', 'HQ', and_or='or')
        criteria = Criteria([first])
        criteria.prepend(second)
        self.assertEqual([c.priority for c in criteria], [0, 1])
        self.assertIs(criteria[0], second)

    def test_duplicates_rejected(self):
        criteria = Criteria([Criterion('Model', 'like', 'MacBook')])
        with self.assertRaises(InvalidDataError):
            criteria.append(Criterion('Model', 'like', 'MacBook'))

    def test_last_criterion_cant_be_deleted(self):
        criteria = Criteria([Criterion('Model', 'like', 'MacBook')])
        with self.assertRaises(MissingDataError):
            criteria.delete(0)

    def test_set_criterion_bounds(self):
        criteria = Criteria([Criterion('Model', 'like', 'MacBook')])
        with self.assertRaises(NoSuchItemError):
            criteria.set_criterion(3, Criterion('Model', 'is', 'iMac'))


class TestComputerGroup(JSSTestCase):

    def setUp(self):
        super(TestComputerGroup, self).setUp()
        self.add_list(Computer, [
            {'id': 1, 'name': 'lab-1', 'serial_number': 'S1'},
            {'id': 2, 'name': 'lab-2', 'serial_number': 'S2'}])
        self.add_list(ComputerGroup, [
            {'id': 5, 'name': 'Lab', 'is_smart': False},
            {'id': 6, 'name': 'Old macOS', 'is_smart': True}])
        self.add_object(ComputerGroup, STATIC_GROUP)

    def test_static_members(self):
        group = ComputerGroup(self.jss, STATIC_GROUP)
        self.assertEqual(group.member_ids, [1])
        self.assertEqual(group.member_serial_numbers, ['S1'])
        self.assertTrue(group.is_member('lab-1'))
        self.assertFalse(group.is_member('lab-2'))

    def test_add_and_remove_members(self):
        group = ComputerGroup(self.jss, STATIC_GROUP)
        group.add_member('S2')
        self.assertEqual(group.member_ids, [1, 2])
        self.assertTrue(group.need_to_update)
        group.remove_member('lab-1')
        self.assertEqual(group.member_names, ['lab-2'])
        with self.assertRaises(NoSuchItemError):
            group.add_member('lab-99')

    def test_smart_group_members_are_read_only(self):
        group = ComputerGroup(self.jss, SMART_GROUP)
        self.assertEqual(len(group.criteria), 1)
        self.assertEqual(group.criteria[0].search_type, 'less than')
        with self.assertRaises(UnsupportedError):
            group.add_member('lab-1')

    def test_static_group_has_no_criteria(self):
        group = ComputerGroup(self.jss, STATIC_GROUP)
        with self.assertRaises(InvalidDataError):
            group.add_criterion('Model', 0, 'and', 'like', 'Mac')

    def test_new_smart_group_needs_criteria(self):
        group = ComputerGroup(self.jss, 'Newer', smart=True)
        with self.assertRaises(MissingDataError):
            group.create()

    def test_create_smart_group(self):
        self.add_post('computergroups/id/0', new_id=8)
        self.add_object(ComputerGroup, {'id': 8, 'name': 'Newer',
                                        'is_smart': True,
                                        'computers': [{'id': 2,
                                                       'name': 'lab-2'}]})
        group = ComputerGroup(self.jss, 'Newer', smart=True)
        group.add_criterion('Model', 0, 'and', 'like', 'MacBook')
        self.assertEqual(group.create(), 8)
        body = self.last_body('POST')
        self.assertEqual(body.findtext('is_smart'), 'true')
        self.assertEqual(body.findtext('criteria/criterion/value'),
                         'MacBook')
        self.assertEqual(group.member_ids, [2])

    def test_rest_element_static(self):
        group = ComputerGroup(self.jss, STATIC_GROUP)
        element = group.rest_element()
        self.assertEqual(element.findtext('computers/computer/id'), '1')
        self.assertIsNone(element.find('criteria'))
        self.assertEqual(element.findtext('site/name'), 'None')

    def test_change_group_membership_sends_only_changes(self):
        self.add_put('computergroups/id/5')
        changed = ComputerGroup.change_group_membership(
            self.jss, 'Lab', add_members=['lab-2'], remove_members='lab-1')
        self.assertTrue(changed)
        body = self.last_body('PUT')
        self.assertEqual(body.findtext('computer_additions/computer/id'),
                         '2')
        self.assertEqual(body.findtext('computer_deletions/computer/id'),
                         '1')

    def test_change_membership_nothing_to_do(self):
        self.assertFalse(ComputerGroup.change_group_membership(
            self.jss, 'Lab', add_members=['lab-1']))
        self.assertEqual(self.sent('PUT'), [])

    def test_change_smart_group_membership_fails(self):
        with self.assertRaises(UnsupportedError):
            ComputerGroup.change_group_membership(self.jss, 'Old macOS',
                                                  add_members=['lab-2'])


class TestUserGroup(JSSTestCase):

    def test_members_by_username(self):
        self.add_list(User, [{'id': 4, 'name': 'alice'}])
        group = UserGroup(self.jss, {'id': 1, 'name': 'Staff',
                                     'is_smart': False,
                                     'users': [{'id': 4,
                                                'username': 'alice'}]})
        group.remove_member('alice')
        self.assertEqual(group.members, [])
        self.assertTrue(group.need_to_update)

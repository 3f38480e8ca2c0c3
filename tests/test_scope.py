from jssapi.computer import Computer
from jssapi.configuration_profile import OSXConfigurationProfile
from jssapi.exceptions import (AlreadyExistsError, InvalidDataError,
                               NoSuchItemError)
from jssapi.group import ComputerGroup
from jssapi.jssobjects import Building
from jssapi.ldap_server import LDAPServer
from jssapi.scope import Scope
from jssapi.user import User

from tests import JSSTestCase


RAW_SCOPE = {
    'all_computers': False,
    'computers': [{'id': 1, 'name': 'lab-1'}],
    'computer_groups': {'computer_group': {'id': 5, 'name': 'Lab'}},
    'buildings': [],
    'departments': [],
    'limitations': {'users': [], 'user_groups': [],
                    'network_segments': []},
    'exclusions': {'computers': [{'id': 2, 'name': 'lab-2'}]}}


class TestScope(JSSTestCase):

    def setUp(self):
        super(TestScope, self).setUp()
        self.add_list(Computer, [
            {'id': 1, 'name': 'lab-1', 'serial_number': 'S1'},
            {'id': 2, 'name': 'lab-2', 'serial_number': 'S2'},
            {'id': 3, 'name': 'lab-3', 'serial_number': 'S3'}])
        self.add_list(ComputerGroup, [{'id': 5, 'name': 'Lab'}])
        self.add_list(Building, [{'id': 9, 'name': 'HQ'}])
        self.add_list(User, [{'id': 4, 'name': 'alice'}])
        self.profile = OSXConfigurationProfile(self.jss, {
            'general': {'id': 10, 'name': 'Wifi'}, 'scope': RAW_SCOPE})
        self.scope = self.profile.scope

    def test_parses_raw_scope(self):
        self.assertFalse(self.scope.all_targets)
        self.assertEqual(self.scope.inclusions['computers'], [1])
        self.assertEqual(self.scope.inclusions['computer_groups'], [5])
        self.assertEqual(self.scope.exclusions['computers'], [2])
        self.assertEqual(self.scope.limitations['users'], [])

    def test_default_scope(self):
        scope = Scope('mobile_devices')
        self.assertFalse(scope.all_targets)
        self.assertEqual(scope.inclusions['mobile_device_groups'], [])
        with self.assertRaises(InvalidDataError):
            Scope('printers')

    def test_add_target_by_name(self):
        self.scope.add_target('computer', 'lab-3')
        self.assertEqual(self.scope.inclusions['computers'], [1, 3])
        self.assertTrue(self.profile.need_to_update)

    def test_add_existing_target_is_clean(self):
        self.scope.add_target('computers', 1)
        self.assertFalse(self.profile.need_to_update)

    def test_target_must_exist(self):
        with self.assertRaises(NoSuchItemError):
            self.scope.add_target('computers', 'lab-99')

    def test_excluded_item_cant_be_target(self):
        with self.assertRaises(AlreadyExistsError):
            self.scope.add_target('computers', 'lab-2')

    def test_included_item_cant_be_excluded(self):
        with self.assertRaises(AlreadyExistsError):
            self.scope.add_exclusion('computers', 'lab-1')

    def test_set_targets_replaces(self):
        self.scope.set_targets('buildings', ['HQ'])
        self.assertEqual(self.scope.inclusions['buildings'], [9])
        with self.assertRaises(InvalidDataError):
            self.scope.set_targets('buildings', 'HQ')

    def test_remove_target(self):
        self.scope.remove_target('computers', 'lab-1')
        self.assertEqual(self.scope.inclusions['computers'], [])
        self.scope.remove_target('computers', 'lab-99')

    def test_include_all_clear(self):
        self.scope.include_all(clear=True)
        self.assertTrue(self.scope.all_targets)
        self.assertEqual(self.scope.inclusions['computers'], [])
        self.assertEqual(self.scope.exclusions['computers'], [])

    def test_in_scope(self):
        self.assertTrue(self.scope.in_scope('computers', 'lab-1'))
        self.assertFalse(self.scope.in_scope('computers', 'lab-3'))

    def test_unknown_ldap_user_is_kept_by_name(self):
        self.add_list(LDAPServer, [{'id': 1, 'name': 'AD'}])
        self.add_object(LDAPServer, {'id': 1, 'name': 'AD'})
        self.add_get('ldapservers/id/1/user/bob', {'ldap_users': []})
        self.scope.add_limitation('users', 'bob')
        self.assertEqual(self.scope.limitations['users'], ['bob'])
        self.assertTrue(self.scope.unable_to_verify_ldap_entries)

    def test_known_jss_user_is_kept_by_id(self):
        self.scope.add_limitation('users', 'alice')
        self.assertEqual(self.scope.limitations['users'], [4])
        self.assertFalse(self.scope.unable_to_verify_ldap_entries)

    def test_ldap_entries_survive_update(self):
        raw = dict(RAW_SCOPE)
        raw['limitations'] = {
            'users': [{'name': 'jdoe'}],
            'user_groups': [{'id': '', 'name': 'Staff'}],
            'network_segments': []}
        raw['exclusions'] = {'users': {'user': {'id': -1, 'name': 'bob'}}}
        profile = OSXConfigurationProfile(self.jss, {
            'general': {'id': 11, 'name': 'VPN'}, 'scope': raw})
        scope = profile.scope
        self.assertEqual(scope.limitations['users'], ['jdoe'])
        self.assertEqual(scope.limitations['user_groups'], ['Staff'])
        self.assertEqual(scope.exclusions['users'], ['bob'])
        element = scope.scope_xml()
        self.assertEqual(element.findtext('limitations/users/user/name'),
                         'jdoe')
        self.assertEqual(
            element.findtext('limitations/user_groups/user_group/name'),
            'Staff')
        self.assertEqual(element.findtext('exclusions/users/user/name'),
                         'bob')

    def test_bad_key_for_realm(self):
        with self.assertRaises(InvalidDataError):
            self.scope.add_limitation('computers', 'lab-1')

    def test_scope_xml(self):
        self.scope.add_limitation('users', 'alice')
        scope = self.scope.scope_xml()
        self.assertEqual(scope.findtext('all_computers'), 'false')
        self.assertEqual(scope.findtext('computers/computer/id'), '1')
        self.assertEqual(
            scope.findtext('computer_groups/computer_group/id'), '5')
        self.assertEqual(scope.findtext('limitations/users/user/id'), '4')
        self.assertEqual(
            scope.findtext('exclusions/computers/computer/id'), '2')

import copy
import ipaddress

from jssapi.computer import Computer
from jssapi.exceptions import (InvalidDataError, MissingDataError,
                               NoSuchItemError, UnsupportedError)
from jssapi.extension_attribute import (ComputerExtensionAttribute,
                                        MobileDeviceExtensionAttribute,
                                        UserExtensionAttribute)
from jssapi.jssobjects import (Account, Building, Category,
                               ComputerInvitation, ComputerReport,
                               DiskEncryptionConfiguration, DockItem,
                               NetbootServer, Peripheral, PeripheralType,
                               Printer, RestrictedSoftware, Site)
from jssapi.ldap_server import LDAPServer
from jssapi.network_segment import NetworkSegment
from jssapi.user import User

from tests import JSSTestCase


LDAP_SERVER = {'id': 1, 'name': 'AD',
               'connection': {'hostname': 'ad.example.com', 'port': '636',
                              'use_ssl': 'true',
                              'account': {
                                  'distinguished_username': 'CN=jss'}}}


class TestLDAPServer(JSSTestCase):

    def setUp(self):
        super(TestLDAPServer, self).setUp()
        self.add_list(LDAPServer, [{'id': 1, 'name': 'AD'}])
        self.add_object(LDAPServer, LDAP_SERVER)
        self.add_get('ldapservers/id/1/user/bob', {
            'ldap_users': {'ldap_user': {'username': 'bob', 'uid': '1001'}}})
        self.add_get('ldapservers/id/1/user/bo', {
            'ldap_users': [{'username': 'bob'}, {'username': 'bonnie'}]})
        self.add_get('ldapservers/id/1/user/carol', {'ldap_users': []})
        self.server = LDAPServer(self.jss, LDAP_SERVER)

    def test_read_only(self):
        with self.assertRaises(UnsupportedError):
            LDAPServer(self.jss, 'OpenLDAP')

    def test_loads_connection(self):
        self.assertEqual(self.server.hostname, 'ad.example.com')
        self.assertEqual(self.server.port, 636)
        self.assertTrue(self.server.use_ssl)
        self.assertEqual(self.server.lookup_dn, 'CN=jss')

    def test_find_user(self):
        self.assertEqual(self.server.find_user('bob')[0]['uid'], '1001')
        self.assertEqual(len(self.server.find_user('bo')), 2)
        self.assertEqual(self.server.find_user('bo', exact=True), [])

    def test_server_for_user(self):
        self.assertEqual(LDAPServer.server_for_user(self.jss, 'bob'), 1)
        self.assertTrue(LDAPServer.user_in_ldap(self.jss, 'bob'))
        self.assertFalse(LDAPServer.user_in_ldap(self.jss, 'carol'))

    def test_find_group_quotes_name(self):
        self.add_get('ldapservers/id/1/group/Mac%20Admins', {
            'ldap_groups': [{'groupname': 'Mac Admins', 'uid': '50'}]})
        self.assertEqual(self.server.find_group('Mac Admins', exact=True),
                         [{'groupname': 'Mac Admins', 'uid': '50'}])

    def test_membership(self):
        self.add_get('ldapservers/id/1/group/Staff/user/bob', {
            'ldap_users': [{'username': 'bob'}]})
        self.add_get('ldapservers/id/1/group/Staff/user/carol', {
            'ldap_users': []})
        self.assertTrue(self.server.check_membership('bob', 'Staff'))
        self.assertFalse(LDAPServer.check_user_membership(
            self.jss, 'AD', 'carol', 'Staff'))
        with self.assertRaises(NoSuchItemError):
            LDAPServer.check_user_membership(self.jss, 'OD', 'bob', 'Staff')


USER = {'id': 4, 'name': 'alice', 'full_name': 'Alice Smith',
        'email': 'alice@example.com',
        'ldap_server': {'id': 1, 'name': 'AD'},
        'sites': [{'id': 1, 'name': 'East'}],
        'links': {'computers': [{'id': 1, 'name': 'lab-1'}],
                  'total_vpp_code_count': 0},
        'extension_attributes': [{'id': 1, 'name': 'Badge',
                                  'type': 'Number', 'value': '42'}]}


class TestUser(JSSTestCase):

    def setUp(self):
        super(TestUser, self).setUp()
        self.add_list(User, [{'id': 4, 'name': 'alice'}])
        self.add_list(Site, [{'id': 1, 'name': 'East'},
                             {'id': 2, 'name': 'West'}])
        self.add_list(LDAPServer, [{'id': 1, 'name': 'AD'}])
        self.user = User(self.jss, copy.deepcopy(USER))

    def test_loads(self):
        self.assertEqual(self.user.username, 'alice')
        self.assertEqual(self.user.ldap_server, 'AD')
        self.assertEqual(self.user.site_names, ['East'])
        self.assertEqual(self.user.computers[0]['name'], 'lab-1')
        self.assertEqual(self.user.ext_attrs['Badge'], 42)

    def test_sites(self):
        self.user.add_site('West')
        self.assertEqual(self.user.site_names, ['East', 'West'])
        self.user.remove_site('east')
        self.assertEqual(self.user.site_names, ['West'])
        with self.assertRaises(NoSuchItemError):
            self.user.add_site('North')

    def test_ldap_server(self):
        with self.assertRaises(InvalidDataError):
            self.user.set_ldap_server('OD')
        self.user.set_ldap_server(None)
        self.assertIsNone(self.user.ldap_server)
        root = self.user.rest_element()
        self.assertEqual(root.findtext('ldap_server/id'), '-1')

    def test_ext_attr_checked_against_definition(self):
        self.add_list(UserExtensionAttribute, [{'id': 1, 'name': 'Badge'}])
        self.add_object(UserExtensionAttribute, {
            'id': 1, 'name': 'Badge', 'data_type': 'Integer',
            'input_type': {'type': 'Text Field'}})
        self.user.set_ext_attr('Badge', '43')
        root = self.user.rest_element()
        self.assertEqual(
            root.findtext('extension_attributes/extension_attribute/value'),
            '43')
        self.assertEqual(root.findtext('sites/site/name'), 'East')

    def test_new_user(self):
        user = User(self.jss, 'bob', email='bob@example.com')
        self.assertEqual(user.email, 'bob@example.com')
        self.assertIsNone(user.rest_element().find('extension_attributes'))


class TestExtensionAttributes(JSSTestCase):

    def setUp(self):
        super(TestExtensionAttributes, self).setUp()
        self.add_list(ComputerExtensionAttribute, [])

    def test_popup_choices_match_data_type(self):
        attr = ComputerExtensionAttribute(self.jss, 'Seats',
                                          data_type='Integer',
                                          popup_choices=['1', 2])
        self.assertTrue(attr.from_popup_menu)
        self.assertEqual(attr.popup_choices, ['1', '2'])
        with self.assertRaises(InvalidDataError):
            attr.set_popup_choices(['one'])
        attr.set_data_type('Date')
        with self.assertRaises(InvalidDataError):
            attr.set_popup_choices(['2017-05-01'])
        attr.set_popup_choices(['2017-05-01 12:30:00'])

    def test_popup_needs_choices(self):
        attr = ComputerExtensionAttribute(self.jss, 'Team')
        attr.set_input_type('Pop-up Menu')
        with self.assertRaises(MissingDataError):
            attr.create()

    def test_windows_script(self):
        attr = ComputerExtensionAttribute(self.jss, 'Uptime')
        with self.assertRaises(InvalidDataError):
            attr.set_script('Get-Uptime', platform='Windows')
        attr.set_script('Get-Uptime', platform='Windows',
                        scripting_language='PowerShell')
        input_type = attr.rest_element().find('input_type')
        self.assertEqual(input_type.findtext('type'), 'script')
        self.assertEqual(input_type.findtext('platform'), 'Windows')
        self.assertEqual(input_type.findtext('scripting_language'),
                         'PowerShell')
        attr.set_input_type('Text Field')
        self.assertIsNone(attr.script)

    def test_loaded_popup(self):
        attr = ComputerExtensionAttribute(self.jss, {
            'id': 1, 'name': 'Team', 'data_type': 'String',
            'input_type': {'type': 'Pop-up Menu',
                           'popup_choices': {'choice': ['Blue', 'Red']}}})
        self.assertEqual(attr.popup_choices, ['Blue', 'Red'])
        choices = attr.rest_element().findall('input_type/popup_choices/'
                                              'choice')
        self.assertEqual([choice.text for choice in choices],
                         ['Blue', 'Red'])

    def test_class_limits(self):
        self.add_list(UserExtensionAttribute, [])
        self.add_list(MobileDeviceExtensionAttribute, [])
        user_attr = UserExtensionAttribute(self.jss, 'Badge')
        with self.assertRaises(InvalidDataError):
            user_attr.set_input_type('script')
        device_attr = MobileDeviceExtensionAttribute(self.jss, 'Case')
        with self.assertRaises(InvalidDataError):
            device_attr.set_inventory_display('Operating System')
        device_attr.set_inventory_display('Hardware')


class TestSimpleObjects(JSSTestCase):

    def test_category_priority(self):
        self.add_list(Category, [])
        self.assertEqual(Category(self.jss, 'Apps').priority, 5)
        self.assertEqual(Category(self.jss, 'Tools', priority=2).priority, 2)
        with self.assertRaises(InvalidDataError):
            Category(self.jss, 'Games', priority=25)

    def test_account_groups(self):
        self.add_get('accounts', {'accounts': {
            'users': [{'id': 1, 'name': 'admin'}],
            'groups': {'group': {'id': 2, 'name': 'Helpdesk'}}}})
        self.assertEqual(Account.all_names(self.jss), ['admin'])
        self.assertEqual(Account.all_groups(self.jss)[0]['name'],
                         'Helpdesk')
        self.assertEqual(Account.get_url(1), 'accounts/userid/1')

    def test_dock_item_and_netboot_validation(self):
        self.add_list(DockItem, [])
        self.add_list(NetbootServer, [])
        dock_item = DockItem(self.jss, 'Safari')
        with self.assertRaises(InvalidDataError):
            dock_item.set_type('Widget')
        dock_item.set_path('file:///Applications/Safari.app/')
        self.assertEqual(dock_item.rest_element().findtext('type'), 'App')
        server = NetbootServer(self.jss, 'Imaging')
        with self.assertRaises(InvalidDataError):
            server.set_protocol('ftp')

    def test_printer(self):
        self.add_list(Printer, [])
        printer = Printer(self.jss, 'Lobby', uri='lpd://10.0.0.5/',
                          make_default=True)
        with self.assertRaises(MissingDataError):
            printer.rest_element()
        with self.assertRaises(InvalidDataError):
            printer.set_field('shared', 'yes')
        with self.assertRaises(InvalidDataError):
            printer.set_field('color', 'cyan')
        printer.set_field('CUPS_name', 'Lobby_Printer')
        root = printer.rest_element()
        self.assertEqual(root.findtext('uri'), 'lpd://10.0.0.5/')
        self.assertEqual(root.findtext('make_default'), 'true')
        self.assertEqual(root.findtext('shared'), 'false')

    def test_restricted_software_needs_process(self):
        self.add_list(RestrictedSoftware, [])
        software = RestrictedSoftware(self.jss, 'Games')
        with self.assertRaises(MissingDataError):
            software.create()
        with self.assertRaises(InvalidDataError):
            software.set_flag('kill_process', 'yes')
        software.set_process_name('Chess.app')
        software.set_flag('kill_process', True)
        general = software.rest_element().find('general')
        self.assertEqual(general.findtext('kill_process'), 'true')
        self.assertEqual(general.findtext('display_message'), '')

    def test_computer_invitation(self):
        self.add_list(ComputerInvitation, [])
        with self.assertRaises(InvalidDataError):
            ComputerInvitation(self.jss, 'Lab', invitation_type='QR')
        invitation = ComputerInvitation(self.jss, 'Lab',
                                        expiration_date='2017-05-01',
                                        ssh_username='casper')
        root = invitation.rest_element()
        self.assertEqual(root.findtext('expiration_date_epoch'),
                         '1493596800000')
        self.assertEqual(root.findtext('multiple_users_allowed'), 'false')

    def test_computer_invitations_are_immutable(self):
        invitation = ComputerInvitation(self.jss, {'id': 1, 'name': 'Lab',
                                                   'invitation': '1234'})
        invitation.should_update()
        with self.assertRaises(UnsupportedError):
            invitation.update()

    def test_disk_encryption_configuration(self):
        self.add_list(DiskEncryptionConfiguration, [])
        with self.assertRaises(UnsupportedError):
            DiskEncryptionConfiguration(self.jss, 'FileVault')
        config = DiskEncryptionConfiguration(self.jss, {
            'id': 1, 'name': 'FileVault', 'key_type': 'Individual'})
        config.set_file_vault_enabled_users('current')
        self.assertEqual(
            config.rest_element().findtext('file_vault_enabled_users'),
            'Current or Next User')
        with self.assertRaises(InvalidDataError):
            config.set_file_vault_enabled_users('everyone')
        config.key_type = 'Individual and Institutional'
        with self.assertRaises(UnsupportedError):
            config.rest_element()

    def test_computer_report_rows(self):
        report = ComputerReport(self.jss, {'id': 1, 'name': 'Inventory',
                                           'computer': [{'Computer_Name':
                                                         'lab-1'}]})
        self.assertEqual(report.rows, [{'Computer_Name': 'lab-1'}])


PRINTER_TYPE = {'id': 1, 'name': 'Printer', 'fields': [
    {'order': 2, 'name': 'Model', 'type': 'text'},
    {'order': 1, 'name': 'Color', 'type': 'menu',
     'choices': ['Black', 'Color']}]}


class TestPeripherals(JSSTestCase):

    def setUp(self):
        super(TestPeripherals, self).setUp()
        self.add_list(PeripheralType, [{'id': 1, 'name': 'Printer'}])
        self.add_object(PeripheralType, PRINTER_TYPE)
        self.add_list(Peripheral, [])

    def test_type_fields(self):
        ptype = PeripheralType(self.jss, copy.deepcopy(PRINTER_TYPE))
        self.assertEqual([f['name'] for f in ptype.fields],
                         ['Color', 'Model'])
        with self.assertRaises(InvalidDataError):
            ptype.append_field({'name': 'Tray', 'type': 'dial'})
        with self.assertRaises(InvalidDataError):
            ptype.append_field({'name': 'Tray', 'type': 'menu',
                                'choices': 'A4'})
        ptype.insert_field(1, {'name': 'Asset', 'type': 'text'})
        self.assertEqual([f['order'] for f in ptype.fields], [1, 2, 3])
        self.assertEqual(ptype.fields[1]['name'], 'Color')
        with self.assertRaises(NoSuchItemError):
            ptype.delete_field(4)
        field = ptype.rest_element().find('fields/field')
        self.assertEqual(field.findtext('name'), 'Asset')
        self.assertEqual(field.findtext('order'), '1')

    def test_last_field_cant_be_deleted(self):
        ptype = PeripheralType(self.jss, {'id': 2, 'name': 'Scanner',
                                          'fields': [{'order': 1,
                                                      'name': 'Model',
                                                      'type': 'text'}]})
        with self.assertRaises(MissingDataError):
            ptype.delete_field(1)

    def test_new_peripheral_by_type(self):
        with self.assertRaises(NoSuchItemError):
            Peripheral(self.jss, 'Plotter')
        peripheral = Peripheral(self.jss, 'Printer')
        self.assertIsNone(peripheral.name)
        self.assertEqual(peripheral.type, 'Printer')
        with self.assertRaises(UnsupportedError):
            peripheral.name = 'Office printer'

    def test_fields_follow_type(self):
        peripheral = Peripheral(self.jss, 'Printer')
        with self.assertRaises(InvalidDataError):
            peripheral.set_field('Color', 'Pink')
        with self.assertRaises(InvalidDataError):
            peripheral.set_field('Tray', 'A4')
        peripheral.set_field('Color', 'Black')
        peripheral.set_field('Model', 'LaserJet')
        general = peripheral.rest_element().find('general')
        values = {field.findtext('name'): field.findtext('value')
                  for field in general.findall('fields/field')}
        self.assertEqual(values, {'Color': 'Black', 'Model': 'LaserJet'})
        self.assertEqual(general.findtext('type'), 'Printer')

    def test_associate(self):
        self.add_list(Computer, [{'id': 1, 'name': 'lab-1'}])
        peripheral = Peripheral(self.jss, 'Printer')
        peripheral.associate('lab-1')
        self.assertEqual(peripheral.computer_id, 1)
        with self.assertRaises(NoSuchItemError):
            peripheral.associate('lab-9')
        peripheral.disassociate()
        root = peripheral.rest_element()
        self.assertEqual(root.findtext('general/computer_id'), '')
        self.assertIsNone(root.find('purchasing'))
        self.assertEqual(root.findtext('location/username'), '')


SEGMENTS = [
    {'id': 1, 'name': 'Lab', 'starting_address': '10.0.0.0',
     'ending_address': '10.0.0.255'},
    {'id': 2, 'name': 'Campus', 'starting_address': '10.0.0.0',
     'ending_address': '10.255.255.255'}]


class TestNetworkSegment(JSSTestCase):

    def setUp(self):
        super(TestNetworkSegment, self).setUp()
        self.add_list(NetworkSegment, SEGMENTS)

    def test_segments_for_ip(self):
        self.assertEqual(
            NetworkSegment.network_segments_for_ip(self.jss, '10.0.0.7'),
            [1, 2])
        self.assertEqual(
            NetworkSegment.network_segments_for_ip(self.jss, '10.1.0.1'),
            [2])
        with self.assertRaises(InvalidDataError):
            NetworkSegment.network_segments_for_ip(self.jss, '10.0.0')

    def test_new_segment_from_cidr(self):
        segment = NetworkSegment(self.jss, 'Office',
                                 starting_address='192.168.1.0', cidr=24)
        self.assertEqual(segment.ending_address,
                         ipaddress.IPv4Address('192.168.1.255'))
        self.assertEqual(segment.cidr, 24)
        self.assertTrue(segment.include('192.168.1.20'))
        self.assertFalse(segment.include('192.168.2.1'))

    def test_new_segment_validation(self):
        with self.assertRaises(MissingDataError):
            NetworkSegment(self.jss, 'Office', starting_address='10.1.0.0')
        with self.assertRaises(InvalidDataError):
            NetworkSegment(self.jss, 'Office', starting_address='10.1.0.9',
                           ending_address='10.1.0.1')

    def test_addresses_and_building(self):
        self.add_list(Building, [{'id': 9, 'name': 'HQ'}])
        segment = NetworkSegment(self.jss, dict(SEGMENTS[0]))
        with self.assertRaises(InvalidDataError):
            segment.set_starting_address('10.0.1.0')
        segment.set_ending_address('10.0.0.5')
        self.assertIsNone(segment.cidr)
        with self.assertRaises(NoSuchItemError):
            segment.set_building('Garage')
        segment.set_building('hq')
        root = segment.rest_element()
        self.assertEqual(root.findtext('building'), 'HQ')
        self.assertEqual(root.findtext('ending_address'), '10.0.0.5')
        self.assertEqual(root.findtext('override_buildings'), 'false')

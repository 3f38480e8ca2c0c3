import copy
import plistlib

from jssapi.configuration_profile import (MobileDeviceConfigurationProfile,
                                          OSXConfigurationProfile)
from jssapi.directory_binding import DirectoryBinding
from jssapi.exceptions import (InvalidDataError, MissingDataError,
                               UnsupportedError)
from jssapi.mobile_device_application import MobileDeviceApplication
from jssapi.self_service import (AUTO_INSTALL, AUTO_INSTALL_OR_PROMPT,
                                 MAKE_AVAILABLE)

from tests import JSSTestCase


PAYLOADS = plistlib.dumps({
    'PayloadDisplayName': 'Wifi',
    'PayloadContent': [{'PayloadType': 'com.apple.wifi.managed',
                        'SSID_STR': 'Staff'},
                       {'PayloadType': 'com.apple.security.root'}]}
).decode('utf-8')

OSX_PROFILE = {
    'general': {'id': 10, 'name': 'Wifi', 'description': 'Staff network',
                'distribution_method': MAKE_AVAILABLE,
                'user_removable': False, 'level': 'System',
                'redeploy_on_update': 'All', 'payloads': PAYLOADS,
                'category': {'id': -1, 'name': 'No category assigned'},
                'site': {'id': -1, 'name': 'None'}},
    'scope': {'all_computers': True},
    'self_service': {'self_service_display_name': 'Staff Wifi',
                     'feature_on_main_page': 'true',
                     'self_service_categories': {
                         'category': {'id': 2, 'name': 'Network',
                                      'display_in': True,
                                      'feature_in': False}}}}


class TestOSXConfigurationProfile(JSSTestCase):

    def setUp(self):
        super(TestOSXConfigurationProfile, self).setUp()
        self.add_list(OSXConfigurationProfile, [{'id': 10, 'name': 'Wifi'}])
        self.profile = OSXConfigurationProfile(
            self.jss, copy.deepcopy(OSX_PROFILE))

    def test_loads(self):
        profile = self.profile
        self.assertEqual(profile.description, 'Staff network')
        self.assertEqual(profile.level, 'System')
        self.assertEqual(profile.redeploy_on_update, 'All')
        self.assertFalse(profile.category_assigned)
        self.assertTrue(profile.scope.all_targets)
        self.assertTrue(profile.in_self_service)
        self.assertEqual(profile.distribution_method, MAKE_AVAILABLE)
        self.assertEqual(profile.self_service_display_name, 'Staff Wifi')
        self.assertTrue(profile.self_service_feature_on_main_page)
        self.assertEqual(profile.self_service_categories[0]['name'],
                         'Network')
        self.assertFalse(profile.user_removable)

    def test_parsed_payloads(self):
        self.assertEqual(self.profile.parsed_payloads()['PayloadDisplayName'],
                         'Wifi')
        self.assertEqual(self.profile.payload_types(),
                         ['com.apple.wifi.managed',
                          'com.apple.security.root'])

    def test_set_payloads_from_dict(self):
        self.profile.set_payloads({'PayloadContent': []})
        self.assertTrue(self.profile.need_to_update)
        self.assertEqual(self.profile.payload_content(), [])

    def test_new_profile_has_no_payloads(self):
        profile = OSXConfigurationProfile(self.jss, 'Dock')
        self.assertEqual(profile.level, 'computer')
        self.assertEqual(profile.distribution_method, AUTO_INSTALL)
        with self.assertRaises(MissingDataError):
            profile.parsed_payloads()

    def test_distribution_method(self):
        self.profile.set_distribution_method(AUTO_INSTALL)
        self.assertFalse(self.profile.in_self_service)
        self.assertTrue(self.profile.need_to_update)
        general = self.profile.rest_element().find('general')
        self.assertEqual(general.findtext('distribution_method'),
                         AUTO_INSTALL)
        with self.assertRaises(InvalidDataError):
            self.profile.set_distribution_method('Whenever')

    def test_level_and_redeploy_choices(self):
        with self.assertRaises(InvalidDataError):
            self.profile.set_level('System')
        self.profile.set_level('user')
        self.assertEqual(self.profile.level, 'user')
        with self.assertRaises(InvalidDataError):
            self.profile.set_redeploy_on_update('Some')

    def test_removal_with_auth_is_ios_only(self):
        with self.assertRaises(UnsupportedError):
            self.profile.set_self_service_user_removable('with_auth', 'pw')
        self.profile.set_self_service_user_removable('always')
        general = self.profile.rest_element().find('general')
        self.assertEqual(general.findtext('user_removable'), 'true')

    def test_rest_element(self):
        root = self.profile.rest_element()
        self.assertEqual(root.tag, 'os_x_configuration_profile')
        general = root.find('general')
        self.assertEqual(general.findtext('name'), 'Wifi')
        self.assertEqual(general.findtext('level'), 'System')
        self.assertEqual(general.findtext('payloads'), PAYLOADS)
        self.assertEqual(general.findtext('category/name'), '')
        self.assertEqual(general.findtext('site/name'), 'None')
        self.assertEqual(root.findtext('scope/all_computers'), 'true')
        ssvc = root.find('self_service')
        self.assertEqual(ssvc.findtext('self_service_display_name'),
                         'Staff Wifi')
        self.assertEqual(
            ssvc.findtext('self_service_categories/category/display_in'),
            'true')
        self.assertEqual(ssvc.findtext('install_button_text'), 'Install')


class TestMobileDeviceConfigurationProfile(JSSTestCase):

    def setUp(self):
        super(TestMobileDeviceConfigurationProfile, self).setUp()
        self.add_list(MobileDeviceConfigurationProfile, [])
        self.profile = MobileDeviceConfigurationProfile(self.jss, {
            'general': {'id': 3, 'name': 'Restrictions',
                        'deployment_method': AUTO_INSTALL,
                        'redeploy_days_before_certificate_expires': '14'},
            'scope': {'all_mobile_devices': False,
                      'mobile_devices': [{'id': 7, 'name': 'iPad'}]},
            'self_service': {'security': {
                'removal_disallowed': 'With Authorization',
                'password': 'open sesame'}}})

    def test_loads(self):
        self.assertEqual(self.profile.redeploy_days_before_cert_expires, 14)
        self.assertFalse(self.profile.in_self_service)
        self.assertEqual(self.profile.scope.inclusions['mobile_devices'],
                         [7])
        self.assertEqual(self.profile.self_service_user_removable,
                         'with_auth')
        self.assertEqual(self.profile.self_service_removal_password,
                         'open sesame')

    def test_macos_only_settings_rejected(self):
        with self.assertRaises(UnsupportedError):
            self.profile.set_self_service_display_name('Restrictions')

    def test_redeploy_days(self):
        with self.assertRaises(InvalidDataError):
            self.profile.set_redeploy_days_before_cert_expires('soon')
        self.profile.set_redeploy_days_before_cert_expires('30')
        general = self.profile.rest_element().find('general')
        self.assertEqual(
            general.findtext('redeploy_days_before_certificate_expires'),
            '30')

    def test_rest_element_security(self):
        self.profile.set_self_service_user_removable('never')
        root = self.profile.rest_element()
        self.assertEqual(root.tag, 'configuration_profile')
        security = root.find('self_service/security')
        self.assertEqual(security.findtext('removal_disallowed'), 'Never')
        self.assertEqual(security.findtext('password'), '')
        self.assertEqual(root.findtext('general/deployment_method'),
                         AUTO_INSTALL)
        self.assertIsNone(root.find('self_service/self_service_display_name'))


APP = {
    'general': {'id': 3, 'name': 'Maps Pro', 'bundle_id': 'com.example.maps',
                'version': '2.1', 'free': 'true',
                'deploy_as_managed_app': 'false',
                'deployment_type': MAKE_AVAILABLE,
                'display_name': 'Maps',
                'site': {'id': -1, 'name': 'None'}},
    'scope': {'all_mobile_devices': True},
    'vpp': {'assign_vpp_device_based_licenses': True,
            'total_vpp_licenses': 20},
    'app_configuration': {'preferences': '<dict/>'}}


class TestMobileDeviceApplication(JSSTestCase):

    def setUp(self):
        super(TestMobileDeviceApplication, self).setUp()
        self.add_list(MobileDeviceApplication, [
            {'id': 3, 'name': 'Maps Pro', 'bundle_id': 'com.example.maps'}])
        self.app = MobileDeviceApplication(self.jss, copy.deepcopy(APP))

    def test_fetch_by_bundle_id(self):
        self.add_object(MobileDeviceApplication, APP)
        app = MobileDeviceApplication.fetch(
            self.jss, 'bundle_id=com.example.maps')
        self.assertEqual(app.id, 3)
        self.assertEqual(
            MobileDeviceApplication.all_bundle_ids(self.jss),
            ['com.example.maps'])

    def test_loads(self):
        self.assertEqual(self.app.version, '2.1')
        self.assertTrue(self.app.free)
        self.assertFalse(self.app.deploy_as_managed_app)
        self.assertEqual(self.app.display_name, 'Maps')
        self.assertEqual(self.app.deployment_type, MAKE_AVAILABLE)
        self.assertTrue(self.app.assign_vpp_device_based_licenses)
        self.assertEqual(self.app.total_vpp_licenses, 20)
        self.assertEqual(self.app.configuration_prefs, '<dict/>')

    def test_vpp_flag_from_text(self):
        data = copy.deepcopy(APP)
        data['vpp']['assign_vpp_device_based_licenses'] = 'false'
        app = MobileDeviceApplication(self.jss, data)
        self.assertIs(app.assign_vpp_device_based_licenses, False)
        self.assertEqual(app.rest_element().findtext(
            'vpp/assign_vpp_device_based_licenses'), 'false')
        app.assign_vpp_device_based_licenses = False
        self.assertFalse(app.need_to_update)

    def test_flags_and_text(self):
        self.app.set_deploy_as_managed_app(True)
        self.assertTrue(self.app.need_to_update)
        with self.assertRaises(InvalidDataError):
            self.app.set_flag('free', 'yes')
        with self.assertRaises(InvalidDataError):
            self.app.set_flag('sparkly', True)
        with self.assertRaises(InvalidDataError):
            self.app.set_text('bundle_id', 'com.example.other')

    def test_deployment_type(self):
        self.app.set_deployment_type(AUTO_INSTALL_OR_PROMPT)
        self.assertFalse(self.app.in_self_service)
        root = self.app.rest_element()
        self.assertEqual(root.findtext('general/deployment_type'),
                         AUTO_INSTALL_OR_PROMPT)
        with self.assertRaises(InvalidDataError):
            self.app.set_deployment_type(AUTO_INSTALL)

    def test_new_app(self):
        app = MobileDeviceApplication(self.jss, 'Notes Pro',
                                      bundle_id='com.example.notes',
                                      version='1.0')
        root = app.rest_element()
        self.assertEqual(root.findtext('general/bundle_id'),
                         'com.example.notes')
        self.assertEqual(root.findtext('general/free'), 'false')
        self.assertIsNone(root.find('app_configuration'))

    def test_rest_element(self):
        root = self.app.rest_element()
        self.assertEqual(root.tag, 'mobile_device_application')
        self.assertEqual(root.findtext('general/display_name'), 'Maps')
        self.assertIsNone(root.find('general/description'))
        self.assertEqual(
            root.findtext('vpp/assign_vpp_device_based_licenses'), 'true')
        self.assertEqual(root.findtext('app_configuration/preferences'),
                         '<dict/>')
        self.assertEqual(root.findtext('scope/all_mobile_devices'), 'true')


class TestDirectoryBinding(JSSTestCase):

    def setUp(self):
        super(TestDirectoryBinding, self).setUp()
        self.add_list(DirectoryBinding, [{'id': 1, 'name': 'Corp'}])

    def loaded(self):
        return DirectoryBinding(self.jss, {
            'id': 1, 'name': 'Corp', 'priority': 2,
            'domain': 'corp.example.com', 'username': 'binder',
            'password_sha256': 'abc', 'computer_ou': 'OU=Macs',
            'type': 'Active Directory',
            'active_directory': {'cache_last_user': True,
                                 'admin_groups': {'group': 'Admins'}}})

    def test_new_binding_needs_password(self):
        binding = DirectoryBinding(self.jss, 'Lab', domain='corp.example.com',
                                   username='binder', computer_ou='OU=Lab',
                                   type='active_directory')
        self.assertEqual(binding.type, 'Active Directory')
        with self.assertRaises(MissingDataError):
            binding.create()
        self.assertEqual(self.sent('POST'), [])

    def test_create(self):
        self.add_post('directorybindings/id/0', new_id=2)
        binding = DirectoryBinding(
            self.jss, 'Lab', domain='corp.example.com', username='binder',
            password='hunter2', computer_ou='OU=Lab', type='Open Directory',
            priority=3, type_settings={'encrypt_using_ssl': True})
        self.assertEqual(binding.create(), 2)
        body = self.last_body('POST')
        self.assertEqual(body.tag, 'directory_binding')
        self.assertEqual(body.findtext('password'), 'hunter2')
        self.assertEqual(body.findtext('priority'), '3')
        self.assertEqual(body.findtext('open_directory/encrypt_using_ssl'),
                         'true')

    def test_loaded(self):
        binding = self.loaded()
        self.assertEqual(binding.type_key, 'active_directory')
        self.assertTrue(binding.type_settings['cache_last_user'])
        self.assertIsNone(binding.password)

    def test_priority_bounds(self):
        binding = self.loaded()
        with self.assertRaises(InvalidDataError):
            binding.set_priority(11)
        binding.set_priority('10')
        self.assertEqual(binding.priority, 10)

    def test_change_type_resets_settings(self):
        binding = self.loaded()
        with self.assertRaises(InvalidDataError):
            binding.set_type('NIS')
        binding.set_type('Centrify')
        self.assertEqual(binding.type_key, 'centrify')
        self.assertEqual(binding.type_settings, {})

    def test_update_skips_nested_settings(self):
        self.add_put('directorybindings/id/1')
        binding = self.loaded()
        binding.set_type_setting('cache_last_user', False)
        binding.update()
        body = self.last_body('PUT')
        self.assertEqual(body.findtext('active_directory/cache_last_user'),
                         'false')
        self.assertIsNone(body.find('active_directory/admin_groups'))
        self.assertIsNone(body.find('password'))

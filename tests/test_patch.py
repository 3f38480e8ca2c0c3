from jssapi.exceptions import (InvalidDataError, MissingDataError,
                               NoSuchItemError, UnsupportedError)
from jssapi.package import Package
from jssapi.patch import (PatchExternalSource, PatchInternalSource,
                          PatchPolicy, PatchSource, PatchTitle)

from tests import JSSTestCase


TITLE = {
    'id': 5, 'name': 'Firefox', 'name_id': 'FF', 'source_id': 1,
    'category': {'id': -1, 'name': 'No category assigned'},
    'site': {'id': -1, 'name': 'None'},
    'notifications': {'web_notification': 'true',
                      'email_notification': 'false'},
    'versions': [
        {'software_version': '60',
         'package': {'id': 1, 'name': 'Firefox-60.pkg'}},
        {'software_version': '59', 'package': {'id': -1, 'name': ''}},
        {'software_version': 'Unknown', 'package': None}]}


class TestPatchSources(JSSTestCase):

    def setUp(self):
        super(TestPatchSources, self).setUp()
        self.add_list(PatchInternalSource, [{'id': 1, 'name': 'Jamf'}])
        self.add_list(PatchExternalSource, [{'id': 2, 'name': 'Community'}])

    def test_internal_sources_are_read_only(self):
        with self.assertRaises(UnsupportedError):
            PatchInternalSource(self.jss, 'Mine')

    def test_endpoint_parsed(self):
        source = PatchInternalSource(self.jss, {
            'id': 1, 'name': 'Jamf', 'enabled': 'true',
            'endpoint': 'https://jamf-patch.jamfcloud.com/v1/'})
        self.assertTrue(source.ssl_enabled)
        self.assertEqual(source.host_name, 'jamf-patch.jamfcloud.com')
        self.assertEqual(source.port, 443)

    def test_external_source(self):
        source = PatchExternalSource(self.jss, {
            'id': 2, 'name': 'Community', 'host_name': 'patch.example.com',
            'ssl_enabled': 'false', 'port': '8080'})
        self.assertEqual(source.endpoint, 'http://patch.example.com:8080/')
        with self.assertRaises(InvalidDataError):
            source.set_port('eighty')
        source.use_ssl()
        source.enable()
        root = source.rest_element()
        self.assertEqual(root.findtext('ssl_enabled'), 'true')
        self.assertEqual(root.findtext('enabled'), 'true')
        self.assertEqual(root.findtext('port'), '8080')

    def test_new_source_needs_host(self):
        source = PatchExternalSource(self.jss, 'Lab')
        self.assertEqual(source.port, 443)
        with self.assertRaises(UnsupportedError):
            source.enable()
        with self.assertRaises(UnsupportedError):
            source.create()

    def test_available_titles(self):
        self.add_get('patchavailabletitles/sourceid/2', {
            'patch_available_titles': {'available_titles': [
                {'name_id': 'FF', 'app_name': 'Firefox',
                 'current_version': '60',
                 'last_modified': '2018-05-01T12:00:00.000Z'}]}})
        titles = PatchSource.available_titles(self.jss, 'Community')
        self.assertEqual(titles[0]['last_modified'].year, 2018)
        self.assertEqual(PatchSource.available_name_ids(self.jss, 2), ['FF'])
        self.assertEqual(PatchSource.available_titles(self.jss, 'Jamf'), [])
        with self.assertRaises(NoSuchItemError):
            PatchSource.available_titles(self.jss, 'Nowhere')


class TestPatchTitle(JSSTestCase):

    def setUp(self):
        super(TestPatchTitle, self).setUp()
        self.add_list(PatchTitle, [{'id': 5, 'name': 'Firefox',
                                    'name_id': 'FF', 'source_id': 1}])
        self.add_list(Package, [{'id': 1, 'name': 'Firefox-60.pkg'},
                                {'id': 2, 'name': 'Firefox-59.pkg'}])
        self.title = PatchTitle(self.jss, TITLE)

    def test_loads(self):
        self.assertTrue(self.title.web_notification)
        self.assertFalse(self.title.email_notification)
        self.assertEqual(sorted(self.title.versions),
                         ['59', '60', 'Unknown'])
        self.assertEqual(list(self.title.versions_with_packages), ['60'])
        self.assertEqual(PatchTitle.all_source_ids(self.jss), [1])
        self.assertEqual(PatchTitle.all_name_ids(self.jss), ['FF'])

    def test_assign_package_to_version(self):
        self.title.versions['59'].set_package('Firefox-59.pkg')
        self.assertEqual(self.title.changed_pkgs, ['59'])
        self.assertTrue(self.title.need_to_update)
        version = self.title.rest_element().find('versions/version')
        self.assertEqual(version.findtext('software_version'), '59')
        self.assertEqual(version.findtext('package/id'), '2')
        with self.assertRaises(NoSuchItemError):
            self.title.versions['59'].set_package('Chrome.pkg')
        with self.assertRaises(UnsupportedError):
            self.title.versions['Unknown'].set_package('Firefox-59.pkg')

    def test_unchanged_versions_not_sent(self):
        root = self.title.rest_element()
        self.assertIsNone(root.find('versions'))
        self.assertEqual(root.findtext('name_id'), 'FF')
        self.assertEqual(root.findtext('notifications/web_notification'),
                         'true')

    def test_new_title_needs_source_first(self):
        title = PatchTitle(self.jss, 'Chrome')
        with self.assertRaises(MissingDataError):
            title.set_name_id('GC')
        with self.assertRaises(MissingDataError):
            title.create()

    def test_patch_report(self):
        self.add_get('patchreports/patchsoftwaretitleid/5/version/Latest', {
            'patch_report': {
                'total_computers': 2, 'total_versions': 1,
                'versions': {'version': {
                    'software_version': '60',
                    'computers': [{'id': 1, 'name': 'lab-1'},
                                  {'id': 2, 'name': 'lab-2'}]}}}})
        report = self.title.report('latest')
        self.assertEqual(report['total_computers'], 2)
        self.assertEqual([comp['id'] for comp in report['versions']['60']],
                         [1, 2])


class TestPatchPolicy(JSSTestCase):

    def setUp(self):
        super(TestPatchPolicy, self).setUp()
        self.add_list(PatchTitle, [{'id': 5, 'name': 'Firefox',
                                    'name_id': 'FF', 'source_id': 1}])
        self.add_object(PatchTitle, TITLE)
        self.add_list(PatchPolicy, [])

    def test_title_required(self):
        with self.assertRaises(MissingDataError):
            PatchPolicy(self.jss, 'FF 60')
        with self.assertRaises(NoSuchItemError):
            PatchPolicy(self.jss, 'FF 60', patch_title='Chrome')

    def test_target_needs_package(self):
        with self.assertRaises(UnsupportedError):
            PatchPolicy(self.jss, 'FF 59', patch_title='Firefox',
                        target_version='59')
        with self.assertRaises(NoSuchItemError):
            PatchPolicy(self.jss, 'FF 58', patch_title='Firefox',
                        target_version='58')

    def test_deadlines_and_grace_period(self):
        policy = PatchPolicy(self.jss, 'FF 60', patch_title='Firefox',
                             target_version='60')
        self.assertIsNone(policy.deadline)
        self.assertEqual(policy.grace_period, 15)
        policy.set_deadline('5')
        policy.set_grace_period(-3)
        interaction = policy.rest_element().find('user_interaction')
        self.assertEqual(interaction.findtext('deadlines/deadline_enabled'),
                         'true')
        self.assertEqual(interaction.findtext('deadlines/deadline_period'),
                         '5')
        self.assertEqual(
            interaction.findtext('grace_period/grace_period_duration'), '0')
        policy.set_deadline(0)
        self.assertIsNone(policy.deadline)

    def test_create_posts_under_title(self):
        self.add_post('patchpolicies/softwaretitleconfig/id/5', new_id=9)
        policy = PatchPolicy(self.jss, 'FF 60', patch_title='Firefox',
                             target_version='60')
        self.add_list(PatchPolicy, [{'id': 9, 'name': 'FF 60'}])
        self.add_object(PatchPolicy, {
            'general': {'id': 9, 'name': 'FF 60', 'target_version': '60',
                        'release_date': 1493641800000, 'reboot': 'true'},
            'software_title_configuration_id': 5})
        self.assertEqual(policy.create(), 9)
        body = self.last_body('POST')
        self.assertEqual(body.tag, 'patch_policy')
        self.assertEqual(body.findtext('general/target_version'), '60')
        self.assertEqual(body.findtext('general/distribution_method'),
                         'prompt')
        self.assertEqual(policy.release_date.year, 2017)
        self.assertTrue(policy.reboot)

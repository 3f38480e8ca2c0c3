import os
import shutil
import tempfile

from jssapi.computer import Computer
from jssapi.exceptions import (
    AlreadyExistsError, AmbiguousError, InvalidDataError, MissingDataError,
    NoSuchItemError, UnsupportedError)
from jssapi.file_upload import FileUpload
from jssapi.jssobjects import Account, Building, Category
from jssapi.policy import Policy

from tests import JSSTestCase


class TestIdentity(JSSTestCase):

    def setUp(self):
        super(TestIdentity, self).setUp()
        self.add_list(Building, [{'id': 1, 'name': 'HQ'},
                                 {'id': 2, 'name': 'Annex'},
                                 {'id': 3, 'name': '4'}])

    def test_valid_id_by_id_and_name(self):
        self.assertEqual(Building.valid_id(self.jss, 2), 2)
        self.assertEqual(Building.valid_id(self.jss, '2'), 2)
        self.assertEqual(Building.valid_id(self.jss, 'hq'), 1)
        self.assertIsNone(Building.valid_id(self.jss, 'Garage'))

    def test_numeric_name_falls_back_to_names(self):
        self.assertEqual(Building.valid_id(self.jss, '4'), 3)

    def test_list_is_cached(self):
        Building.all_ids(self.jss)
        Building.all_names(self.jss)
        self.assertEqual(len(self.sent('GET')), 1)
        Building.all(self.jss, refresh=True)
        self.assertEqual(len(self.sent('GET')), 2)

    def test_helpers(self):
        self.assertEqual(Building.all_ids(self.jss), [1, 2, 3])
        self.assertEqual(Building.map_all_ids_to(self.jss, 'name')[2],
                         'Annex')
        self.assertTrue(Building.exist(self.jss, 'annex'))
        self.assertFalse(Building.exist(self.jss, 99))

    def test_fetch_missing(self):
        with self.assertRaises(NoSuchItemError):
            Building.fetch(self.jss, 'Garage')

    def test_ambiguous(self):
        self.add_list(Computer, [
            {'id': 1, 'name': 'lab-1', 'serial_number': 'C02A',
             'udid': 'U1', 'mac_address': 'M1'},
            {'id': 2, 'name': 'C02A', 'serial_number': 'C02B',
             'udid': 'U2', 'mac_address': 'M2'}])
        with self.assertRaises(AmbiguousError):
            Computer.valid_id(self.jss, 'C02A')

    def test_fetch_by_search_type(self):
        self.add_list(Computer, [
            {'id': 1, 'name': 'lab-1', 'serial_number': 'C02A',
             'udid': 'U1', 'mac_address': 'M1'}])
        self.assertEqual(Computer.valid_id(self.jss, 'C02A',
                                           key='serial_number'), 1)
        with self.assertRaises(UnsupportedError):
            Computer.fetch(self.jss, 'color=blue')


class TestLifecycle(JSSTestCase):

    def setUp(self):
        super(TestLifecycle, self).setUp()
        self.add_list(Building, [{'id': 1, 'name': 'HQ'}])
        self.add_list(Category, [{'id': 1, 'name': 'Apps'}])

    def test_new_requires_unique_name(self):
        with self.assertRaises(AlreadyExistsError):
            Building(self.jss, 'hq')
        with self.assertRaises(MissingDataError):
            Building(self.jss, '  ')

    def test_read_only_class_cant_be_made(self):
        self.add_get('accounts', {'accounts': {'users': []}})
        with self.assertRaises(UnsupportedError):
            Account(self.jss, 'bob')

    def test_create_posts_to_id_zero(self):
        self.add_post('buildings/id/0', new_id=7)
        building = Building(self.jss, 'Garage')
        self.assertFalse(building.in_jss)
        self.assertEqual(building.create(), 7)
        self.assertTrue(building.in_jss)
        self.assertEqual(building.id, 7)
        body = self.last_body('POST')
        self.assertEqual(body.tag, 'building')
        self.assertEqual(body.findtext('name'), 'Garage')
        # The list cache was flushed.
        self.assertNotIn(Building, self.jss.object_list_cache)

    def test_create_twice_fails(self):
        building = Building(self.jss, {'id': 1, 'name': 'HQ'})
        with self.assertRaises(AlreadyExistsError):
            building.create()

    def test_update_only_when_dirty(self):
        self.add_put('categories/id/1')
        category = Category(self.jss, {'id': 1, 'name': 'Apps',
                                       'priority': 9})
        self.assertIsNone(category.update())
        self.assertEqual(self.sent('PUT'), [])
        category.set_priority(3)
        self.assertTrue(category.need_to_update)
        self.assertEqual(category.save(), 1)
        self.assertFalse(category.need_to_update)
        self.assertEqual(self.last_body('PUT').findtext('priority'), '3')

    def test_setting_same_value_stays_clean(self):
        category = Category(self.jss, {'id': 1, 'name': 'Apps',
                                       'priority': 9})
        category.set_priority(9)
        self.assertFalse(category.need_to_update)

    def test_rename(self):
        building = Building(self.jss, {'id': 1, 'name': 'HQ'})
        with self.assertRaises(AlreadyExistsError):
            building.name = 'annex'
        building.name = 'Head Office'
        self.assertTrue(building.need_to_update)

    def test_rename_changing_case(self):
        building = Building(self.jss, {'id': 1, 'name': 'HQ'})
        building.name = 'hq'
        self.assertEqual(building.name, 'hq')
        self.assertTrue(building.need_to_update)

    def test_update_unsaved_fails(self):
        building = Building(self.jss, 'Garage')
        building.should_update()
        with self.assertRaises(NoSuchItemError):
            building.update()

    def test_delete(self):
        self.add_delete('buildings/id/1')
        building = Building(self.jss, {'id': 1, 'name': 'HQ'})
        building.name = 'Head Office'
        building.delete()
        self.assertFalse(building.in_jss)
        self.assertFalse(building.need_to_update)
        self.assertEqual(self.sent('DELETE')[0][1], 'buildings/id/1')

    def test_clone(self):
        category = Category(self.jss, {'id': 1, 'name': 'Apps',
                                       'priority': 9})
        clone = category.clone('Apps 2')
        self.assertIsNone(clone.id)
        self.assertFalse(clone.in_jss)
        self.assertEqual(clone.priority, 9)
        self.assertIs(clone.jss, self.jss)

    def test_pretty_xml(self):
        category = Category(self.jss, {'id': 1, 'name': 'Apps',
                                       'priority': 9})
        self.assertIn('\n    <name>Apps</name>', category.pretty_xml())


class TestUploadAndMatch(JSSTestCase):

    def setUp(self):
        super(TestUploadAndMatch, self).setUp()
        self.add_list(Policy, [{'id': 4, 'name': 'Install Foo'}])
        self.policy = Policy(self.jss, {
            'general': {'id': 4, 'name': 'Install Foo'},
            'self_service': {'use_for_self_service': 'true',
                             'self_service_icon': {'id': 3}}})
        self.tmp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp_dir)
        self.icon = os.path.join(self.tmp_dir, 'foo.png')
        with open(self.icon, 'wb') as handle:
            handle.write(b'\x89PNG')

    def test_upload_posts_multipart_file(self):
        self.add_post('fileuploads/policies/id/4')
        self.policy.upload('icon', self.icon)
        method, rsrc, kwargs = self.sent('POST')[0]
        self.assertEqual(rsrc, 'fileuploads/policies/id/4')
        filename, handle, content_type = kwargs['files']['name']
        self.assertEqual(filename, 'foo.png')
        self.assertEqual(content_type, 'multipart/form-data')

    def test_upload_checks(self):
        with self.assertRaises(InvalidDataError):
            self.policy.upload('attachment', self.icon)
        with self.assertRaises(InvalidDataError):
            self.policy.upload('icon', os.path.join(self.tmp_dir, 'no.png'))
        with self.assertRaises(InvalidDataError):
            FileUpload(self.jss, 'buildings', 'id', 1, self.icon)
        with self.assertRaises(InvalidDataError):
            FileUpload(self.jss, 'policies', 'udid', 1, self.icon)
        new_policy = Policy(self.jss, 'Install Bar')
        with self.assertRaises(NoSuchItemError):
            new_policy.upload('icon', self.icon)
        self.assertEqual(self.sent('POST'), [])

    def test_file_upload_url(self):
        upload = FileUpload(self.jss, 'policies', 'name', 'Install Foo',
                            self.icon)
        self.assertEqual(upload.upload_url,
                         'fileuploads/policies/name/Install Foo')

    def test_set_icon_from_path(self):
        self.add_post('fileuploads/policies/id/4')
        self.add_object(Policy, {
            'general': {'id': 4, 'name': 'Install Foo'},
            'self_service': {'self_service_icon': {
                'id': 12, 'filename': 'foo.png'}}})
        self.policy.set_icon(self.icon)
        self.assertEqual(self.policy.self_service_icon['id'], 12)
        self.assertEqual(self.sent('POST')[0][1],
                         'fileuploads/policies/id/4')

    def test_set_icon_by_id(self):
        self.policy.set_icon(3)
        self.assertFalse(self.policy.need_to_update)
        self.policy.set_icon(5)
        self.assertTrue(self.policy.need_to_update)
        self.assertEqual(self.policy.rest_element().findtext(
            'self_service/self_service_icon/id'), '5')

    def test_match(self):
        self.add_get('computers/match/lab*', {'computers': [
            {'id': 1, 'name': 'lab-1'}, {'id': 2, 'name': 'lab-2'}]})
        matches = Computer.match(self.jss, 'lab*')
        self.assertEqual([item['id'] for item in matches], [1, 2])
        with self.assertRaises(InvalidDataError):
            Computer.match(self.jss, '  ')
        with self.assertRaises(UnsupportedError):
            Building.match(self.jss, 'HQ')

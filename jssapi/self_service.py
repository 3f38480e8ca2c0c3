#!/usr/bin/env python
"""self_service.py

Self Service display data for policies, profiles and apps.
Copyright (C) 2014 Shea G Craig <shea.craig@da.org>

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""

from xml.etree import ElementTree

from .exceptions import InvalidDataError, NoSuchItemError, UnsupportedError
from .tools import add_text, as_list, bool_text, to_bool, validate_bool


PROFILE_REMOVAL_BY_USER = {'always': 'Always',
                           'never': 'Never',
                           'with_auth': 'With Authorization'}
MAKE_AVAILABLE = 'Make Available in Self Service'
AUTO_INSTALL = 'Install Automatically'
AUTO_INSTALL_OR_PROMPT = 'Install Automatically/Prompt Users to Install'
PATCHPOL_SELF_SERVICE = 'selfservice'
PATCHPOL_AUTO = 'prompt'

DEFAULT_INSTALL_BUTTON_TEXT = 'Install'
DEFAULT_REINSTALL_BUTTON_TEXT = 'Reinstall'
DEFAULT_FORCE_TO_VIEW_DESC = False

NOTIFICATION_OPTIONS = {
    'off': 'false',
    'ssvc_only': 'Self Service',
    'ssvc_and_nctr': 'Self Service and Notification Center'}


class SelfServable(object):
    """Mixin for objects that can appear in Self Service.

    Classes describe where their data lives with self_service_config:
        in_self_service_data_path:  (subset, key) holding whether the
                                    object is in Self Service.
        in_self_service:            Value of that key when it is.
        not_in_self_service:        Value of that key when it isn't.
        self_service_subset:        Data subset with the display data.
        targets:                    Tuple of 'macos' and/or 'ios'.
        payload:                    'policy', 'profile', 'app' or
                                    'patchpolicy'.
        can_display_in_categories:  Bool.
        can_feature_in_categories:  Bool.

    """
    self_service_config = {}

    def _load(self):
        super(SelfServable, self)._load()
        config = self.self_service_config
        ss_data = self.data.get(config.get('self_service_subset',
                                           'self_service')) or {}

        path = config.get('in_self_service_data_path')
        if path:
            subset, key = path
            value = (self.data.get(subset) or {}).get(key)
            expected = config['in_self_service']
            if isinstance(expected, bool):
                value = to_bool(value)
            self.in_self_service = value == expected
        else:
            self.in_self_service = False

        security = ss_data.get('security') or {}
        self.self_service_user_removable = None
        for key, value in PROFILE_REMOVAL_BY_USER.items():
            if security.get('removal_disallowed') == value:
                self.self_service_user_removable = key
        if self.self_service_payload == 'profile' and not \
                self.self_service_user_removable:
            removable = (self.data.get('general') or {}).get(
                'user_removable')
            if removable is not None:
                self.self_service_user_removable = (
                    'always' if to_bool(removable) else 'never')
        self.self_service_removal_password = security.get('password')

        self.self_service_description = ss_data.get(
            'self_service_description')
        self.self_service_icon = ss_data.get('self_service_icon') or None
        self._new_icon_id = None
        self.self_service_feature_on_main_page = to_bool(
            ss_data.get('feature_on_main_page'))
        self.self_service_categories = [
            dict(cat) for cat in as_list(ss_data.get(
                'self_service_categories'), 'category')]

        if 'macos' not in self.self_service_targets:
            return
        self.self_service_display_name = (
            ss_data.get('self_service_display_name') or self.name)
        self.self_service_install_button_text = (
            ss_data.get('install_button_text') or DEFAULT_INSTALL_BUTTON_TEXT)
        self.self_service_reinstall_button_text = (
            ss_data.get('reinstall_button_text') or
            DEFAULT_REINSTALL_BUTTON_TEXT)
        self.self_service_force_users_to_view_description = to_bool(
            ss_data.get('force_users_to_view_description',
                        DEFAULT_FORCE_TO_VIEW_DESC))
        notification = ss_data.get('notification')
        if notification in (None, False, 'false', ''):
            self.self_service_notifications = 'off'
        elif notification == NOTIFICATION_OPTIONS['ssvc_and_nctr']:
            self.self_service_notifications = 'ssvc_and_nctr'
        else:
            self.self_service_notifications = 'ssvc_only'
        self.self_service_notification_subject = (
            ss_data.get('notification_subject') or self.name)
        self.self_service_notification_message = ss_data.get(
            'notification_message')

    @property
    def self_service_targets(self):
        return self.self_service_config.get('targets', ())

    @property
    def self_service_payload(self):
        return self.self_service_config.get('payload')

    @property
    def user_removable(self):
        if self.self_service_payload != 'profile':
            return None
        return self.self_service_user_removable != 'never'

    def _require_macos(self, what):
        if 'macos' not in self.self_service_targets:
            raise UnsupportedError("Only macOS Self Service items can have %s"
                                   % what)

    def _set_ss(self, attr, value):
        if getattr(self, attr, None) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    def set_self_service_description(self, value):
        self._set_ss('self_service_description', value.strip())

    def set_self_service_display_name(self, value):
        self._require_macos('display names')
        self._set_ss('self_service_display_name', value.strip())

    def set_self_service_install_button_text(self, value):
        self._require_macos('custom button text')
        self._set_ss('self_service_install_button_text', value.strip())

    def set_self_service_reinstall_button_text(self, value):
        self._require_macos('custom button text')
        self._set_ss('self_service_reinstall_button_text', value.strip())

    def set_self_service_feature_on_main_page(self, value):
        if not self.self_service_config.get('can_feature_in_categories'):
            return
        validate_bool(value, 'feature_on_main_page')
        self._set_ss('self_service_feature_on_main_page', value)

    def set_self_service_force_users_to_view_description(self, value):
        self._require_macos('a forced description')
        validate_bool(value, 'force_users_to_view_description')
        self._set_ss('self_service_force_users_to_view_description', value)

    def add_self_service_category(self, category, display_in=True,
                                  feature_in=False):
        """Show this item in a Self Service category, by name or id."""
        from .jssobjects import Category
        if isinstance(category, int):
            category = Category.map_all_ids_to(self.jss, 'name').get(
                category)
        if category not in Category.all_names(self.jss, refresh=True):
            raise NoSuchItemError("No category '%s' in the JSS" % category)
        validate_bool(display_in, 'display_in')
        validate_bool(feature_in, 'feature_in')
        if not display_in:
            feature_in = False
        new_data = {'name': category}
        if self.self_service_config.get('can_display_in_categories'):
            new_data['display_in'] = display_in
        if self.self_service_config.get('can_feature_in_categories'):
            new_data['feature_in'] = feature_in
        for index, cat in enumerate(self.self_service_categories):
            if cat.get('name') == category:
                self.self_service_categories[index] = new_data
                break
        else:
            self.self_service_categories.append(new_data)
        self.should_update()

    def remove_self_service_category(self, category):
        self.self_service_categories = [
            cat for cat in self.self_service_categories
            if category not in (cat.get('name'), cat.get('id'))]
        self.should_update()

    def set_self_service_user_removable(self, value, password=None):
        """Set who may remove a profile: 'always', 'never' or
        'with_auth' (iOS only, with password).

        """
        if self.self_service_payload != 'profile':
            raise UnsupportedError("User removal settings not applicable to "
                                   "this class")
        if value == 'with_auth' and 'ios' not in self.self_service_targets:
            raise UnsupportedError("Removal with_auth not applicable to this "
                                   "class")
        if value not in PROFILE_REMOVAL_BY_USER:
            raise InvalidDataError("Value must be one of: %s" %
                                   ', '.join(sorted(PROFILE_REMOVAL_BY_USER)))
        if value != 'with_auth':
            password = None
        if (value == self.self_service_user_removable and
                password == self.self_service_removal_password):
            return
        self.self_service_user_removable = value
        self.self_service_removal_password = password
        self.should_update()

    def set_self_service_notifications(self, location):
        self._require_macos('self service notifications')
        if location not in NOTIFICATION_OPTIONS:
            raise InvalidDataError("Location must be one of: %s" %
                                   ', '.join(sorted(NOTIFICATION_OPTIONS)))
        self._set_ss('self_service_notifications', location)

    def set_self_service_notification_subject(self, subject):
        self._require_macos('self service notifications')
        self._set_ss('self_service_notification_subject', subject.strip())

    def set_self_service_notification_message(self, message):
        self._require_macos('self service notifications')
        self._set_ss('self_service_notification_message', message.strip())

    def set_icon(self, icon):
        """Use an existing icon id, or upload a new icon from a path."""
        if isinstance(icon, int):
            if self.self_service_icon and \
                    self.self_service_icon.get('id') == icon:
                return
            self._new_icon_id = icon
            self.should_update()
            return
        if 'icon' not in self.upload_types:
            raise UnsupportedError("%s does not support icon uploads." %
                                   self.__class__.__name__)
        self.upload('icon', icon)
        self._refresh_icon()

    def _refresh_icon(self):
        fresh = self.jss.get(self.get_object_url()).get(self.list_type, {})
        subset = self.self_service_config.get('self_service_subset',
                                              'self_service')
        self.self_service_icon = (fresh.get(subset) or {}).get(
            'self_service_icon')

    def add_to_self_service(self):
        if not self.self_service_config.get('in_self_service_data_path'):
            return
        if self.in_self_service:
            return
        self.in_self_service = True
        self.should_update()

    def remove_from_self_service(self):
        if not self.self_service_config.get('in_self_service_data_path'):
            return
        if not self.in_self_service:
            return
        self.in_self_service = False
        self.should_update()

    def add_self_service_xml(self, root):
        """Add the self service data to root, the object's Element."""
        config = self.self_service_config
        subset = config.get('self_service_subset', 'self_service')
        ssvc = root.find(subset)
        if ssvc is None:
            ssvc = ElementTree.SubElement(root, subset)
        add_text(ssvc, 'self_service_description',
                 self.self_service_description or '')
        add_text(ssvc, 'feature_on_main_page',
                 bool_text(self.self_service_feature_on_main_page))
        if self._new_icon_id:
            icon = ElementTree.SubElement(ssvc, 'self_service_icon')
            add_text(icon, 'id', self._new_icon_id)

        cats = ElementTree.SubElement(ssvc, 'self_service_categories')
        for cat in self.self_service_categories:
            cat_element = ElementTree.SubElement(cats, 'category')
            add_text(cat_element, 'name', cat.get('name'))
            if config.get('can_display_in_categories'):
                add_text(cat_element, 'display_in',
                         bool_text(cat.get('display_in')))
            if config.get('can_feature_in_categories'):
                add_text(cat_element, 'feature_in',
                         bool_text(cat.get('feature_in')))

        if 'macos' in self.self_service_targets:
            add_text(ssvc, 'self_service_display_name',
                     self.self_service_display_name)
            add_text(ssvc, 'install_button_text',
                     self.self_service_install_button_text)
            add_text(ssvc, 'reinstall_button_text',
                     self.self_service_reinstall_button_text)
            add_text(ssvc, 'force_users_to_view_description',
                     bool_text(
                         self.self_service_force_users_to_view_description))
            add_text(ssvc, 'notification',
                     NOTIFICATION_OPTIONS[self.self_service_notifications])
            add_text(ssvc, 'notification_subject',
                     self.self_service_notification_subject)
            add_text(ssvc, 'notification_message',
                     self.self_service_notification_message or '')

        if self.self_service_payload == 'profile' and \
                self.self_service_user_removable:
            if 'ios' in self.self_service_targets:
                security = ElementTree.SubElement(ssvc, 'security')
                add_text(security, 'removal_disallowed',
                         PROFILE_REMOVAL_BY_USER[
                             self.self_service_user_removable])
                add_text(security, 'password',
                         self.self_service_removal_password or '')
            else:
                general = root.find('general')
                if general is None:
                    general = ElementTree.SubElement(root, 'general')
                add_text(general, 'user_removable', bool_text(
                    self.self_service_user_removable == 'always'))

        path = config.get('in_self_service_data_path')
        if not path:
            return
        section, key = path
        value = (config['in_self_service'] if self.in_self_service
                 else config['not_in_self_service'])
        section_element = root.find(section)
        if section_element is None:
            section_element = ElementTree.SubElement(root, section)
        add_text(section_element, key, value)

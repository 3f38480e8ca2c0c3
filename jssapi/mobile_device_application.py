#!/usr/bin/env python
"""mobile_device_application.py

iOS apps distributed to mobile devices.
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

from .exceptions import InvalidDataError
from .jssobject import JSSObject
from .mixins import Categorizable, Sitable, VPPable
from .scope import Scopable
from .self_service import (AUTO_INSTALL_OR_PROMPT, MAKE_AVAILABLE,
                           SelfServable)
from .tools import add_text, bool_text, to_bool, validate_bool


BOOL_FIELDS = ('free', 'make_available_after_install',
               'deploy_as_managed_app',
               'remove_app_when_mdm_profile_is_removed',
               'prevent_backup_of_app_data',
               'keep_description_and_icon_up_to_date',
               'take_over_management', 'host_externally')
TEXT_FIELDS = ('display_name', 'description', 'url', 'external_url')


class MobileDeviceApplication(Scopable, SelfServable, VPPable,
                              Categorizable, Sitable, JSSObject):
    """An app for iOS devices, either from the App Store or in-house.

    Apps can be looked up by bundle id as well as by name, e.g.
    j.MobileDeviceApplication('bundle_id=com.example.app').

    """
    _url = 'mobiledeviceapplications'
    container = 'mobile_device_applications'
    list_type = 'mobile_device_application'
    main_subset = 'general'
    search_types = {'name': 'name', 'bundle_id': 'bundle_id',
                    'bundleid': 'bundle_id'}
    upload_types = {'icon': 'mobiledeviceapplicationsicon',
                    'app': 'mobiledeviceapplicationsipa',
                    'attachment': 'mobiledeviceapplications'}
    scope_target_key = 'mobile_devices'
    self_service_config = {
        'in_self_service_data_path': ('general', 'deployment_type'),
        'in_self_service': MAKE_AVAILABLE,
        'not_in_self_service': AUTO_INSTALL_OR_PROMPT,
        'targets': ('ios',),
        'payload': 'app',
        'can_display_in_categories': True,
        'can_feature_in_categories': False}

    @classmethod
    def all_bundle_ids(cls, jss, refresh=False):
        return [item.get('bundle_id') for item in cls.all(jss, refresh)]

    def _load(self):
        super(MobileDeviceApplication, self)._load()
        general = self.main_data
        self.bundle_id = general.get('bundle_id')
        self.version = general.get('version')
        self.itunes_store_url = general.get('itunes_store_url')
        self.itunes_country_region = general.get('itunes_country_region')
        self.provisioning_profile = general.get('provisioning_profile')
        for field in TEXT_FIELDS:
            setattr(self, field, general.get(field))
        for field in BOOL_FIELDS:
            setattr(self, field, to_bool(general.get(field)))
        config = self.data.get('app_configuration') or {}
        self.configuration_prefs = config.get('preferences')

    def new(self, name, bundle_id=None, version=None, **kwargs):
        self.bundle_id = bundle_id
        self.version = version

    @property
    def deployment_type(self):
        return (MAKE_AVAILABLE if self.in_self_service
                else AUTO_INSTALL_OR_PROMPT)

    def _set(self, attr, value):
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    def set_text(self, field, value):
        """Set display_name, description, url or external_url."""
        if field not in TEXT_FIELDS:
            raise InvalidDataError("Unknown field '%s', must be one of: %s" %
                                   (field, ', '.join(TEXT_FIELDS)))
        self._set(field, None if value is None else str(value))

    def set_flag(self, field, value):
        """Set one of the boolean fields, e.g. 'deploy_as_managed_app'."""
        if field not in BOOL_FIELDS:
            raise InvalidDataError("Unknown flag '%s', must be one of: %s" %
                                   (field, ', '.join(BOOL_FIELDS)))
        self._set(field, validate_bool(value, field))

    def set_free(self, value):
        self.set_flag('free', value)

    def set_deploy_as_managed_app(self, value):
        self.set_flag('deploy_as_managed_app', value)

    def set_configuration_prefs(self, prefs):
        """Set the managed app configuration plist, as a string."""
        self._set('configuration_prefs', prefs)

    def set_deployment_type(self, deployment):
        if deployment == MAKE_AVAILABLE:
            self.add_to_self_service()
        elif deployment == AUTO_INSTALL_OR_PROMPT:
            self.remove_from_self_service()
        else:
            raise InvalidDataError("Deployment type must be one of: '%s' "
                                   "'%s'" % (MAKE_AVAILABLE,
                                             AUTO_INSTALL_OR_PROMPT))

    def upload_ipa(self, local_file):
        """Upload an in-house app's .ipa file."""
        return self.upload('app', local_file)

    def rest_element(self):
        root = super(MobileDeviceApplication, self).rest_element()
        general = root.find('general')
        add_text(general, 'bundle_id', self.bundle_id)
        add_text(general, 'version', self.version)
        for field in TEXT_FIELDS:
            if getattr(self, field) is not None:
                add_text(general, field, getattr(self, field))
        for field in BOOL_FIELDS:
            add_text(general, field, bool_text(getattr(self, field)))
        self.add_category_to_xml(root)
        self.add_site_to_xml(root)
        root.append(self.scope.scope_xml())
        self.add_self_service_xml(root)
        self.add_vpp_xml(root)
        if self.configuration_prefs:
            config = ElementTree.SubElement(root, 'app_configuration')
            add_text(config, 'preferences', self.configuration_prefs)
        return root

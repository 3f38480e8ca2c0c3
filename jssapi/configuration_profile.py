#!/usr/bin/env python
"""configuration_profile.py

Configuration profiles for macOS computers and iOS devices.
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

import plistlib

from .exceptions import InvalidDataError, MissingDataError
from .jssobject import JSSObject
from .mixins import Categorizable, Sitable
from .scope import Scopable
from .self_service import AUTO_INSTALL, MAKE_AVAILABLE, SelfServable
from .tools import add_text, validate_integer


REDEPLOY_CHOICES = ('Newly Assigned', 'All')
LEVELS = ('user', 'computer', 'System')


class ConfigurationProfile(Scopable, SelfServable, Categorizable, Sitable,
                           JSSObject):
    """Abstract base for configuration profiles.

    The payloads are a plist string, which parsed_payloads() reads with
    plistlib.

    """
    main_subset = 'general'

    def _load(self):
        super(ConfigurationProfile, self)._load()
        general = self.main_data
        self.description = general.get('description')
        self.uuid = general.get('uuid')
        self.redeploy_on_update = (general.get('redeploy_on_update') or
                                   REDEPLOY_CHOICES[0])
        self.payloads = general.get('payloads')

    @property
    def distribution_method(self):
        return MAKE_AVAILABLE if self.in_self_service else AUTO_INSTALL

    def set_distribution_method(self, method):
        """Install automatically, or make available in Self Service."""
        if method == MAKE_AVAILABLE:
            self.add_to_self_service()
        elif method == AUTO_INSTALL:
            self.remove_from_self_service()
        else:
            raise InvalidDataError("Distribution method must be one of: "
                                   "'%s' '%s'" % (AUTO_INSTALL,
                                                  MAKE_AVAILABLE))

    def set_description(self, description):
        if description == self.description:
            return
        self.description = description
        self.should_update()

    def set_redeploy_on_update(self, value):
        if value not in REDEPLOY_CHOICES:
            raise InvalidDataError("redeploy_on_update must be one of: %s" %
                                   ', '.join(REDEPLOY_CHOICES))
        if value == self.redeploy_on_update:
            return
        self.redeploy_on_update = value
        self.should_update()

    def set_payloads(self, payloads):
        """Replace the payloads with a plist string or a dict."""
        if isinstance(payloads, dict):
            payloads = plistlib.dumps(payloads).decode('utf-8')
        if payloads == self.payloads:
            return
        self.payloads = payloads
        self.should_update()

    def parsed_payloads(self):
        """Return the payloads plist as a dict."""
        if not self.payloads:
            raise MissingDataError("This profile has no payloads.")
        return plistlib.loads(self.payloads.encode('utf-8'))

    def payload_content(self):
        return self.parsed_payloads().get('PayloadContent', [])

    def payload_types(self):
        return [payload.get('PayloadType')
                for payload in self.payload_content()]

    def rest_element(self):
        root = super(ConfigurationProfile, self).rest_element()
        general = root.find('general')
        add_text(general, 'description', self.description)
        add_text(general, 'redeploy_on_update', self.redeploy_on_update)
        if self.payloads:
            add_text(general, 'payloads', self.payloads)
        self.add_category_to_xml(root)
        self.add_site_to_xml(root)
        root.append(self.scope.scope_xml())
        self.add_self_service_xml(root)
        return root


class OSXConfigurationProfile(ConfigurationProfile):
    _url = 'osxconfigurationprofiles'
    container = 'os_x_configuration_profiles'
    list_type = 'os_x_configuration_profile'
    scope_target_key = 'computers'
    self_service_config = {
        'in_self_service_data_path': ('general', 'distribution_method'),
        'in_self_service': MAKE_AVAILABLE,
        'not_in_self_service': AUTO_INSTALL,
        'targets': ('macos',),
        'payload': 'profile',
        'can_display_in_categories': True,
        'can_feature_in_categories': True}

    def _load(self):
        super(OSXConfigurationProfile, self)._load()
        self.level = self.main_data.get('level') or 'computer'

    def set_level(self, level):
        """Install at the 'user' or 'computer' level."""
        if level not in LEVELS[:2]:
            raise InvalidDataError("level must be one of: 'user' "
                                   "'computer'")
        if level == self.level:
            return
        self.level = level
        self.should_update()

    def rest_element(self):
        root = super(OSXConfigurationProfile, self).rest_element()
        add_text(root.find('general'), 'level', self.level)
        return root


class MobileDeviceConfigurationProfile(ConfigurationProfile):
    _url = 'mobiledeviceconfigurationprofiles'
    container = 'configuration_profiles'
    list_type = 'configuration_profile'
    scope_target_key = 'mobile_devices'
    self_service_config = {
        'in_self_service_data_path': ('general', 'deployment_method'),
        'in_self_service': MAKE_AVAILABLE,
        'not_in_self_service': AUTO_INSTALL,
        'targets': ('ios',),
        'payload': 'profile',
        'can_display_in_categories': False,
        'can_feature_in_categories': False}

    def _load(self):
        super(MobileDeviceConfigurationProfile, self)._load()
        days = self.main_data.get(
            'redeploy_days_before_certificate_expires')
        self.redeploy_days_before_cert_expires = int(days or 0)

    def set_redeploy_days_before_cert_expires(self, days):
        days = validate_integer(days, 'redeploy days')
        if days == self.redeploy_days_before_cert_expires:
            return
        self.redeploy_days_before_cert_expires = days
        self.should_update()

    def rest_element(self):
        root = super(MobileDeviceConfigurationProfile, self).rest_element()
        add_text(root.find('general'),
                 'redeploy_days_before_certificate_expires',
                 self.redeploy_days_before_cert_expires)
        return root

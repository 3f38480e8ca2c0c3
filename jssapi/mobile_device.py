#!/usr/bin/env python
"""mobile_device.py

iOS and tvOS devices enrolled in the JSS.
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

from .exceptions import InvalidDataError
from .jssobject import JSSDeviceObject
from .management_history import (HIST_DEVICE_SUBSETS, ManagementHistory,
                                 app_store_app_history, ebook_history)
from .mdm import MDMCommandable, device_name, passcode_lock_grace_period
from .mixins import Extendable, Locatable, Purchasable, Sitable
from .tools import add_text, as_list, epoch_to_datetime, to_bool


class MobileDevice(Extendable, Locatable, Purchasable, Sitable,
                   MDMCommandable, ManagementHistory, JSSDeviceObject):
    """A mobile device in the JSS.

    Devices are enrolled, not created through the API. Renaming a
    supervised device is done with the DeviceName MDM command
    (set_device_name), which the device applies when it next checks in.

    """
    _url = 'mobiledevices'
    container = 'mobile_devices'
    list_type = 'mobile_device'
    can_post = False
    search_types = {'name': 'name', 'udid': 'udid',
                    'serial_number': 'serial_number',
                    'serialnumber': 'serial_number',
                    'wifi_mac_address': 'wifi_mac_address',
                    'mac_address': 'wifi_mac_address',
                    'macaddress': 'wifi_mac_address'}
    upload_types = {'attachment': 'mobiledevices'}
    mdm_command_target = 'mobiledevices'
    history_rsrc = 'mobiledevicehistory'
    history_key = 'mobile_device_history'
    history_subsets = HIST_DEVICE_SUBSETS

    @property
    def ext_attr_class(self):
        from .extension_attribute import MobileDeviceExtensionAttribute
        return MobileDeviceExtensionAttribute

    @classmethod
    def all_serial_numbers(cls, jss, refresh=False):
        return [item.get('serial_number') for item in cls.all(jss, refresh)]

    @classmethod
    def all_phone_numbers(cls, jss, refresh=False):
        return [item['phone_number'] for item in cls.all(jss, refresh)
                if item.get('phone_number')]

    @classmethod
    def all_wifi_mac_addresses(cls, jss, refresh=False):
        return [item.get('wifi_mac_address')
                for item in cls.all(jss, refresh)]

    all_mac_addresses = all_wifi_mac_addresses

    @classmethod
    def all_udids(cls, jss, refresh=False):
        return [item.get('udid') for item in cls.all(jss, refresh)]

    @classmethod
    def all_managed(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if to_bool(item.get('managed'))]

    @classmethod
    def all_unmanaged(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if not to_bool(item.get('managed'))]

    @classmethod
    def all_supervised(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if to_bool(item.get('supervised'))]

    @classmethod
    def all_iphones(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if (item.get('model') or '').startswith('iPhone')]

    @classmethod
    def all_ipads(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if (item.get('model') or '').startswith('iPad')]

    @classmethod
    def all_apple_tvs(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if (item.get('model_identifier') or '').startswith('AppleTV')]

    def _load(self):
        super(MobileDevice, self)._load()
        general = self.main_data
        self.device_name = general.get('device_name')
        self.display_name = general.get('display_name')
        self.device_id = general.get('device_id')
        self.airplay_password = general.get('airplay_password')
        self.capacity_mb = general.get('capacity_mb')
        self.available_mb = general.get('available_mb')
        self.percentage_used = general.get('percentage_used')
        self.battery_level = general.get('battery_level')
        self.bluetooth_mac_address = general.get('bluetooth_mac_address')
        self.wifi_mac_address = general.get('wifi_mac_address')
        self.ip_address = general.get('ip_address')
        self.phone_number = general.get('phone_number')
        self.model = general.get('model_display') or general.get('model')
        self.model_identifier = general.get('model_identifier')
        self.modem_firmware = general.get('modem_firmware')
        self.os_version = general.get('os_version')
        self.os_build = general.get('os_build')
        self.supervised = to_bool(general.get('supervised'))
        self.tethered = general.get('tethered')
        self.languages = general.get('languages')
        self.locales = general.get('locales')
        self.computer = general.get('computer')
        self.initial_entry_date = epoch_to_datetime(
            general.get('initial_entry_date_epoch'))
        self.last_backup_time = epoch_to_datetime(
            general.get('last_backup_time_epoch'))
        self.last_inventory_update = epoch_to_datetime(
            general.get('last_inventory_update_epoch'))
        self.last_enrollment = epoch_to_datetime(
            general.get('last_enrollment_epoch'))

        self.network = self.data.get('network') or {}
        self.security = self.data.get('security') or {}
        self.applications = as_list(self.data.get('applications'),
                                    'application')
        self.certificates = as_list(self.data.get('certificates'),
                                    'certificate')
        self.configuration_profiles = as_list(
            self.data.get('configuration_profiles'), 'configuration_profile')
        self.provisioning_profiles = as_list(
            self.data.get('provisioning_profiles'),
            'mobile_device_provisioning_profile')
        self.mobile_device_groups = as_list(
            self.data.get('mobile_device_groups'), 'mobile_device_group')

    @property
    def battery_percent(self):
        return self.battery_level

    # MDM ##################################################################

    def set_device_name(self, new_name):
        """Send a DeviceName command. Only supervised devices obey."""
        return device_name(self.jss, self.__class__, self.id, new_name)

    def passcode_lock_grace_period(self, secs):
        return passcode_lock_grace_period(self.jss, self.__class__, self.id,
                                          secs)

    def installed_managed_apps(self, source='all'):
        """Return installed managed apps, optionally from one source.

        source is 'all', 'in_house', 'app_store' or 'other'.

        """
        apps = app_store_app_history(self.jss, self.__class__, self.id,
                                     'installed')
        if source == 'all':
            return apps
        if source not in ('in_house', 'app_store', 'other'):
            raise InvalidDataError("Unknown app source '%s'" % source)
        return [app for app in apps if app.source == source]

    def pending_managed_apps(self):
        return app_store_app_history(self.jss, self.__class__, self.id,
                                     'pending')

    def failed_managed_apps(self):
        return app_store_app_history(self.jss, self.__class__, self.id,
                                     'failed')

    def installed_managed_ebooks(self, source='all'):
        """Return installed ebooks. source is 'all', 'in_house' or
        'ibookstore'.

        """
        books = ebook_history(self.jss, self.__class__, self.id, 'installed')
        if source == 'all':
            return books
        if source not in ('in_house', 'ibookstore'):
            raise InvalidDataError("Unknown ebook source '%s'" % source)
        return [book for book in books if book.source == source]

    def rest_element(self):
        root = super(MobileDevice, self).rest_element()
        general = root.find('general')
        add_text(general, 'asset_tag', self.asset_tag)
        self.add_site_to_xml(root)
        if self.changed_eas:
            root.append(self.ext_attr_xml())
        root.append(self.location_xml())
        if self.has_purchasing:
            root.append(self.purchasing_xml())
        return root

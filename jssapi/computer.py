#!/usr/bin/env python
"""computer.py

Computers enrolled in the JSS.
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

import ipaddress
import re
from xml.etree import ElementTree

from .exceptions import InvalidDataError, MissingDataError
from .jssobject import JSSDeviceObject
from .management_history import HIST_COMPUTER_SUBSETS, ManagementHistory
from .mdm import MDMCommandable
from .mixins import Extendable, Locatable, Purchasable, Sitable
from .tools import add_text, as_list, bool_text, epoch_to_datetime, to_bool


LAPTOP_MODEL = re.compile(r'book', re.IGNORECASE)


class Computer(Extendable, Locatable, Purchasable, Sitable, MDMCommandable,
               ManagementHistory, JSSDeviceObject):
    """A computer in the JSS.

    The list data comes from the 'basic' subset, so serial numbers,
    udids, MAC addresses and managed state are available without
    fetching every computer.

    Computers can't be created through the API, only updated. The name
    and general fields, extension attributes, location and purchasing
    data are sent back on update().

    """
    _url = 'computers'
    list_url = 'computers/subset/basic'
    container = 'computers'
    list_type = 'computer'
    can_post = False
    search_types = {'name': 'name', 'udid': 'udid',
                    'serial_number': 'serial_number',
                    'serialnumber': 'serial_number',
                    'mac_address': 'mac_address',
                    'macaddress': 'mac_address'}
    upload_types = {'attachment': 'computers'}
    mdm_command_target = 'computers'
    history_rsrc = 'computerhistory'
    history_key = 'computer_history'
    history_subsets = HIST_COMPUTER_SUBSETS

    @property
    def ext_attr_class(self):
        from .extension_attribute import ComputerExtensionAttribute
        return ComputerExtensionAttribute

    # Class lists ##########################################################

    @classmethod
    def all_serial_numbers(cls, jss, refresh=False):
        return [item.get('serial_number') for item in cls.all(jss, refresh)]

    @classmethod
    def all_mac_addresses(cls, jss, refresh=False):
        """Return every primary and alternate MAC address."""
        macs = []
        for item in cls.all(jss, refresh):
            macs.extend(mac for mac in (item.get('mac_address'),
                                        item.get('alt_mac_address')) if mac)
        return macs

    all_macs = all_mac_addresses

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
    def all_laptops(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if LAPTOP_MODEL.search(item.get('model') or '')]

    @classmethod
    def all_desktops(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if not LAPTOP_MODEL.search(item.get('model') or '')]

    @classmethod
    def _all_models(cls, jss, pattern, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if re.search(pattern, item.get('model') or '', re.IGNORECASE)]

    @classmethod
    def all_macbooks(cls, jss, refresh=False):
        return cls._all_models(jss, r'^macbook\d', refresh)

    @classmethod
    def all_macbookpros(cls, jss, refresh=False):
        return cls._all_models(jss, r'^macbook ?pro', refresh)

    @classmethod
    def all_macbookairs(cls, jss, refresh=False):
        return cls._all_models(jss, r'^macbook ?air', refresh)

    @classmethod
    def all_imacs(cls, jss, refresh=False):
        return cls._all_models(jss, r'^imac', refresh)

    @classmethod
    def all_minis(cls, jss, refresh=False):
        return cls._all_models(jss, r'^mac ?mini', refresh)

    @classmethod
    def all_macpros(cls, jss, refresh=False):
        return cls._all_models(jss, r'^mac ?pro', refresh)

    # Loading ##############################################################

    def _load(self):
        super(Computer, self)._load()
        general = self.main_data
        remote = general.get('remote_management') or {}
        self.alt_mac_address = general.get('alt_mac_address')
        self.barcode_1 = general.get('barcode_1')
        self.barcode_2 = general.get('barcode_2')
        self.ip_address = general.get('ip_address')
        self.last_reported_ip = general.get('last_reported_ip')
        self.mac_address = general.get('mac_address')
        self.platform = general.get('platform')
        self.jamf_version = general.get('jamf_version')
        self.mdm_capable = to_bool(general.get('mdm_capable'))
        self.management_username = remote.get('management_username')
        self._management_password = None
        self.report_date = epoch_to_datetime(general.get('report_date_epoch'))
        self.last_contact_time = epoch_to_datetime(
            general.get('last_contact_time_epoch'))
        self.initial_entry_date = epoch_to_datetime(
            general.get('initial_entry_date_epoch'))
        self.distribution_point = general.get('distribution_point')
        self.netboot_server = general.get('netboot_server')
        self.sus = general.get('sus')

        self.hardware = self.data.get('hardware') or {}
        self.software = self.data.get('software') or {}
        self.groups_accounts = self.data.get('groups_accounts') or {}
        self.configuration_profiles = as_list(
            self.data.get('configuration_profiles'), 'configuration_profile')
        self.peripherals = as_list(self.data.get('peripherals'),
                                   'peripheral')

    # Aliases ##############################################################

    @property
    def alt_macaddress(self):
        return self.alt_mac_address

    @property
    def last_recon(self):
        return self.report_date

    @property
    def mdm(self):
        return self.mdm_capable

    @property
    def model(self):
        return self.hardware.get('model')

    @property
    def os_version(self):
        return self.hardware.get('os_version')

    @property
    def local_accounts(self):
        return as_list((self.groups_accounts.get('local_accounts') or {}),
                       'user')

    @property
    def computer_groups(self):
        return as_list(self.groups_accounts.get('computer_group_memberships'),
                       'group')

    @property
    def applications(self):
        return as_list(self.software.get('applications'), 'application')

    # Setters ##############################################################

    def _set_general(self, attr, value):
        if value is not None:
            value = str(value).strip()
        if value == getattr(self, attr):
            return
        setattr(self, attr, value)
        self.should_update()

    def set_barcode_1(self, value):
        self._set_general('barcode_1', value)

    def set_barcode_2(self, value):
        self._set_general('barcode_2', value)

    def set_ip_address(self, value):
        if value:
            try:
                ipaddress.ip_address(str(value).strip())
            except ValueError:
                raise InvalidDataError("'%s' is not a valid IP address" %
                                       value)
        self._set_general('ip_address', value)

    def set_management_to(self, name, password=None):
        """Set the management account, or unmanage with name None.

        The password is write-only, and sent only with the next update.

        """
        if name is None:
            self.management_username = None
            self._management_password = None
            self.managed = False
        else:
            if not password:
                raise MissingDataError("A password is required for the "
                                       "management account.")
            self.management_username = name
            self._management_password = password
            self.managed = True
        self.should_update()

    def make_managed(self, name, password):
        self.set_management_to(name, password)

    @property
    def name(self):
        return self._name

    @name.setter
    def name(self, new_name):
        # Computers may share names, so don't insist on uniqueness.
        if new_name == self._name:
            return
        if not new_name or not str(new_name).strip():
            raise InvalidDataError("Names may not be empty.")
        self._name = new_name
        self.should_update()

    # Saving ###############################################################

    def update(self):
        result = super(Computer, self).update()
        self._management_password = None
        return result

    def rest_element(self):
        root = super(Computer, self).rest_element()
        general = root.find('general')
        add_text(general, 'alt_mac_address', self.alt_mac_address)
        add_text(general, 'asset_tag', self.asset_tag)
        add_text(general, 'barcode_1', self.barcode_1)
        add_text(general, 'barcode_2', self.barcode_2)
        add_text(general, 'ip_address', self.ip_address)
        add_text(general, 'mac_address', self.mac_address)
        add_text(general, 'udid', self.udid)
        remote = ElementTree.SubElement(general, 'remote_management')
        add_text(remote, 'managed', bool_text(self.managed))
        add_text(remote, 'management_username', self.management_username)
        if self._management_password:
            add_text(remote, 'management_password',
                     self._management_password)
        self.add_site_to_xml(root)
        root.append(self.ext_attr_xml())
        root.append(self.location_xml())
        if self.has_purchasing:
            root.append(self.purchasing_xml())
        return root

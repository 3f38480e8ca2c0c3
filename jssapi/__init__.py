#!/usr/bin/env python
"""jssapi

Python wrapper for the Casper JSS REST API.
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

import logging

from .exceptions import (
    AlreadyExistsError, AmbiguousError, APIRequestError, AuthenticationError,
    AuthorizationError, BadRequestError, ConflictError, FileServiceError,
    InvalidConnectionError, InvalidDataError, JSSError,
    JSSPrefsMissingFileError, JSSPrefsMissingKeyError, JSSTimeoutError,
    MissingDataError, NoSuchItemError, UnmanagedError, UnsupportedError)
from .jss import JSS, JSSObjectFactory
from .jss_prefs import JSSPrefs
from .jssobject import JSSListData, JSSObject, JSSObjectList
from .jssobjects import (
    Account, Building, Category, ComputerInvitation, ComputerReport,
    Department, DiskEncryptionConfiguration, DockItem, NetbootServer,
    Peripheral, PeripheralType, Printer, RestrictedSoftware, Site)
from .computer import Computer
from .configuration_profile import (MobileDeviceConfigurationProfile,
                                    OSXConfigurationProfile)
from .criteria import Criteria, Criterion
from .directory_binding import DirectoryBinding
from .distribution_point import DistributionPoint, DistributionPoints
from .extension_attribute import (ComputerExtensionAttribute,
                                  MobileDeviceExtensionAttribute,
                                  UserExtensionAttribute)
from .group import ComputerGroup, MobileDeviceGroup, UserGroup
from .ldap_server import LDAPServer
from .management_history import ManagementHistory
from .mdm import flush_mdm_commands, send_mdm_command
from .mobile_device import MobileDevice
from .mobile_device_application import MobileDeviceApplication
from .network_segment import NetworkSegment
from .package import Package
from .patch import (PatchExternalSource, PatchInternalSource, PatchPolicy,
                    PatchTitle, PatchTitleVersion)
from .policy import Policy
from .scope import Scope
from .script import Script
from .user import User


__version__ = '2.0.0'

# Library logging is silent unless the application configures it.
logging.getLogger(__name__).addHandler(logging.NullHandler())

#!/usr/bin/env python
"""jss.py

Python wrapper for JSS API.
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
import os
import re
from xml.etree import ElementTree

import requests

from .exceptions import (
    APIRequestError, AuthenticationError, AuthorizationError, BadRequestError,
    ConflictError, InvalidConnectionError, InvalidDataError, JSSTimeoutError,
    NoSuchItemError, UnsupportedError)
from .jssobject import JSSListData, JSSObjectList
from .tools import XML_HEADER
from .jssobjects import (
    Account, Building, Category, ComputerInvitation, ComputerReport,
    Department, DiskEncryptionConfiguration, DockItem, NetbootServer,
    Peripheral, PeripheralType, Printer, RestrictedSoftware, Site)
from .computer import Computer
from .configuration_profile import (MobileDeviceConfigurationProfile,
                                    OSXConfigurationProfile)
from .directory_binding import DirectoryBinding
from .distribution_point import DistributionPoint
from .extension_attribute import (ComputerExtensionAttribute,
                                  MobileDeviceExtensionAttribute,
                                  UserExtensionAttribute)
from .group import ComputerGroup, MobileDeviceGroup, UserGroup
from .ldap_server import LDAPServer
from .mobile_device import MobileDevice
from .mobile_device_application import MobileDeviceApplication
from .network_segment import NetworkSegment
from .package import Package
from .patch import (PatchExternalSource, PatchInternalSource, PatchPolicy,
                    PatchTitle)
from .policy import Policy
from .script import Script
from .user import User


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60

# HTTP status codes and the exceptions they turn into.
ERROR_CODES = {
    400: BadRequestError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NoSuchItemError,
    409: ConflictError,
}


class JSS(object):
    """Connect to a JSS and handle API requests."""
    def __init__(self, jss_prefs=None, url=None, user=None, password=None,
                 ssl_verify=True, verbose=False, timeout=DEFAULT_TIMEOUT,
                 repo_prefs=None):
        """Provide either a JSSPrefs object OR specify url, user, and password
        to init.

        jss_prefs:  A JSSPrefs object.
        url:        Path with port to a JSS. See JSSPrefs.__doc__
        user:       API Username.
        password:   API Password.
        ssl_verify: Boolean indicating whether to verify SSL certificates.
                    Defaults to True.
        verbose:    Log every request at DEBUG level.
        timeout:    Seconds to wait for the JSS to answer.
        repo_prefs: List of dicts with distribution point 'name' and
                    'password' keys, used for mounting file shares.

        """
        if jss_prefs is not None:
            url = jss_prefs.url
            user = jss_prefs.user
            password = jss_prefs.password
            ssl_verify = jss_prefs.verify
            timeout = jss_prefs.timeout
            repo_prefs = jss_prefs.repos

        if not url:
            raise InvalidConnectionError("A JSS url is required.")

        self.url = url.rstrip('/')
        self.base_url = '%s/JSSResource' % self.url
        self.user = user
        self.password = password
        self.ssl_verify = ssl_verify
        self.timeout = timeout
        self.repo_prefs = repo_prefs or []
        self.verbose = verbose
        self.factory = JSSObjectFactory(self)
        self.object_list_cache = {}
        self.ext_attr_definition_cache = {}
        self.session = requests.Session()
        self.session.auth = (self.user, self.password)
        self.session.verify = self.ssl_verify
        self.session.headers.update({'Accept': 'application/json'})
        self.connected = True

    def __repr__(self):
        return "<JSS %s%s>" % (self.url,
                               '' if self.connected else ' (disconnected)')

    @property
    def verbose(self):
        return self._verbose

    @verbose.setter
    def verbose(self, value):
        self._verbose = bool(value)
        if self._verbose:
            logging.getLogger('jssapi').setLevel(logging.DEBUG)

    def disconnect(self):
        """Close the session. Further requests raise an error."""
        self.session.close()
        self.connected = False
        self.flushcache()

    def flushcache(self, obj_class=None):
        """Forget cached list data for obj_class, or for every class."""
        if obj_class is None:
            self.object_list_cache.clear()
            self.ext_attr_definition_cache.clear()
            logger.debug("Flushed all cached lists.")
        else:
            self.object_list_cache.pop(obj_class, None)
            logger.debug("Flushed cached list for %s.", obj_class.__name__)

    def _error_handler(self, exception_cls, response):
        """Generic error handler. Converts html responses to friendlier
        text.

        """
        # Responses are sent as html. Split on the newlines and give us the
        # <p> text back.
        error = []
        for line in response.text.splitlines():
            e = re.search(r'<p.*?>(.*)</p>', line)
            if e:
                error.append(e.group(1))
        error = '\n'.join(error)

        if response.status_code == 409:
            conflict = re.search(r'<p>Error:\s*(.*?)</p>', response.text)
            if conflict:
                error = conflict.group(1)

        exception = exception_cls('JSS Error. Response Code: %s\tResponse: %s'
                                  % (response.status_code, error))
        exception.status_code = response.status_code
        raise exception

    def _request(self, method, rsrc, **kwargs):
        """Send a request for rsrc, a path below /JSSResource."""
        if not self.connected:
            raise InvalidConnectionError("Not connected to a JSS.")
        url = '%s/%s' % (self.base_url, rsrc.lstrip('/'))
        try:
            response = self.session.request(method, url,
                                            timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as error:
            raise JSSTimeoutError("%s %s timed out: %s" % (method, url, error))
        except requests.exceptions.ConnectionError as error:
            raise InvalidConnectionError("Could not connect to %s: %s" %
                                         (self.url, error))

        logger.debug("%s %s: %s", method, url, response.status_code)
        if response.status_code >= 400:
            self._error_handler(
                ERROR_CODES.get(response.status_code, APIRequestError),
                response)
        return response

    def _prepare_xml(self, data):
        """Return data as a string body ready for PUT or POST."""
        if isinstance(data, ElementTree.Element):
            data = XML_HEADER + ElementTree.tostring(data, encoding='unicode')
        # The JSS drops bare carriage returns.
        return data.replace('\r', '&#13;').encode('utf-8')

    def get(self, rsrc):
        """Get a resource, handle errors, and return the decoded JSON."""
        response = self._request('GET', rsrc)
        try:
            return response.json()
        except ValueError:
            raise APIRequestError("Error parsing JSON:\n%s" % response.text)

    def post(self, rsrc, data):
        """Post XML data to the JSS. Returns the response text, which
        includes the new object's id.

        """
        response = self._request('POST', rsrc, data=self._prepare_xml(data),
                                 headers={'Content-Type': 'text/xml'})
        return response.text

    def put(self, rsrc, data):
        """Updates an object on the JSS."""
        response = self._request('PUT', rsrc, data=self._prepare_xml(data),
                                 headers={'Content-Type': 'text/xml'})
        return response.text

    def delete(self, rsrc, data=None):
        """Delete an object from the JSS."""
        kwargs = {}
        if data is not None:
            kwargs['data'] = self._prepare_xml(data)
            kwargs['headers'] = {'Content-Type': 'text/xml'}
        response = self._request('DELETE', rsrc, **kwargs)
        return response.text

    def upload(self, rsrc, local_file):
        """POST local_file as multipart form data to rsrc."""
        with open(local_file, 'rb') as handle:
            files = {'name': (os.path.basename(local_file), handle,
                              'multipart/form-data')}
            response = self._request('POST', rsrc, files=files)
        return response.text

    # Factory methods for all JSSObject types #############################

    def Account(self, data=None):
        return self.factory.get_object(Account, data)

    def Building(self, data=None):
        return self.factory.get_object(Building, data)

    def Category(self, data=None):
        return self.factory.get_object(Category, data)

    def Computer(self, data=None):
        return self.factory.get_object(Computer, data)

    def ComputerExtensionAttribute(self, data=None):
        return self.factory.get_object(ComputerExtensionAttribute, data)

    def ComputerGroup(self, data=None):
        return self.factory.get_object(ComputerGroup, data)

    def ComputerInvitation(self, data=None):
        return self.factory.get_object(ComputerInvitation, data)

    def ComputerReport(self, data=None):
        return self.factory.get_object(ComputerReport, data)

    def Department(self, data=None):
        return self.factory.get_object(Department, data)

    def DirectoryBinding(self, data=None):
        return self.factory.get_object(DirectoryBinding, data)

    def DiskEncryptionConfiguration(self, data=None):
        return self.factory.get_object(DiskEncryptionConfiguration, data)

    def DistributionPoint(self, data=None):
        return self.factory.get_object(DistributionPoint, data)

    def DockItem(self, data=None):
        return self.factory.get_object(DockItem, data)

    def LDAPServer(self, data=None):
        return self.factory.get_object(LDAPServer, data)

    def MobileDevice(self, data=None):
        return self.factory.get_object(MobileDevice, data)

    def MobileDeviceApplication(self, data=None):
        return self.factory.get_object(MobileDeviceApplication, data)

    def MobileDeviceConfigurationProfile(self, data=None):
        return self.factory.get_object(MobileDeviceConfigurationProfile, data)

    def MobileDeviceExtensionAttribute(self, data=None):
        return self.factory.get_object(MobileDeviceExtensionAttribute, data)

    def MobileDeviceGroup(self, data=None):
        return self.factory.get_object(MobileDeviceGroup, data)

    def NetbootServer(self, data=None):
        return self.factory.get_object(NetbootServer, data)

    def NetworkSegment(self, data=None):
        return self.factory.get_object(NetworkSegment, data)

    def OSXConfigurationProfile(self, data=None):
        return self.factory.get_object(OSXConfigurationProfile, data)

    def Package(self, data=None):
        return self.factory.get_object(Package, data)

    def PatchExternalSource(self, data=None):
        return self.factory.get_object(PatchExternalSource, data)

    def PatchInternalSource(self, data=None):
        return self.factory.get_object(PatchInternalSource, data)

    def PatchPolicy(self, data=None):
        return self.factory.get_object(PatchPolicy, data)

    def PatchTitle(self, data=None):
        return self.factory.get_object(PatchTitle, data)

    def Peripheral(self, data=None):
        return self.factory.get_object(Peripheral, data)

    def PeripheralType(self, data=None):
        return self.factory.get_object(PeripheralType, data)

    def Policy(self, data=None):
        return self.factory.get_object(Policy, data)

    def Printer(self, data=None):
        return self.factory.get_object(Printer, data)

    def RestrictedSoftware(self, data=None):
        return self.factory.get_object(RestrictedSoftware, data)

    def Script(self, data=None):
        return self.factory.get_object(Script, data)

    def Site(self, data=None):
        return self.factory.get_object(Site, data)

    def User(self, data=None):
        return self.factory.get_object(User, data)

    def UserExtensionAttribute(self, data=None):
        return self.factory.get_object(UserExtensionAttribute, data)

    def UserGroup(self, data=None):
        return self.factory.get_object(UserGroup, data)


class JSSObjectFactory(object):
    """Create JSSObjects intelligently based on a single data argument."""
    def __init__(self, jss):
        self.jss = jss

    def get_object(self, obj_class, data=None):
        """Return a subclassed JSSObject instance by querying for existing
        objects. List operations return a JSSObjectList.

        obj_class is the class to retrieve.
        data is flexible.
            If data is type:
                None:   Perform a list operation.
                int:    Retrieve an object with ID of <data>
                str:    Retrieve an object with name of <str>. Use
                        'key=value' to search by any key in the class's
                        search_types, e.g. 'serial_number=C02XXXX'.
                dict:   Build the object from already retrieved data.

                Warning! Be sure to pass ID's as ints, not str!

        """
        # List objects
        if data is None:
            if not obj_class.can_list:
                raise UnsupportedError("%s can't be listed." %
                                       obj_class.__name__)
            objects = [JSSListData(obj_class, item)
                       for item in obj_class.all(self.jss)]
            return JSSObjectList(self, obj_class, objects)
        # Retrieve individual objects
        elif isinstance(data, (str, int)) and not isinstance(data, bool):
            return obj_class.fetch(self.jss, data)
        elif isinstance(data, dict):
            return obj_class(self.jss, data)
        else:
            raise InvalidDataError("Can't retrieve a %s with %r." %
                                   (obj_class.__name__, data))

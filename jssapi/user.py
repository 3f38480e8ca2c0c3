#!/usr/bin/env python
"""user.py

Users in the JSS.
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

from .exceptions import InvalidDataError, NoSuchItemError
from .jssobject import JSSObject
from .mixins import Extendable
from .tools import add_list, add_text, as_list, name_of


class User(Extendable, JSSObject):
    """A user, usually looked up from LDAP.

    Unlike other objects, users may belong to more than one site, so
    sites are kept as a list of {id, name} dicts.

    """
    _url = 'users'
    container = 'users'
    list_type = 'user'
    search_types = {'name': 'name', 'username': 'name', 'email': 'email'}

    @property
    def ext_attr_class(self):
        from .extension_attribute import UserExtensionAttribute
        return UserExtensionAttribute

    def new(self, name, **kwargs):
        for key in ('full_name', 'email', 'phone_number', 'position'):
            if key in kwargs:
                setattr(self, key, kwargs[key])

    def _load(self):
        super(User, self)._load()
        self.full_name = self.data.get('full_name')
        self.email = self.data.get('email')
        self.phone_number = self.data.get('phone_number')
        self.position = self.data.get('position')
        ldap = self.data.get('ldap_server') or {}
        self.ldap_server = name_of(ldap) or None
        self.ldap_server_id = self._parse_id(ldap.get('id'))
        self.sites = [dict(site) for site in as_list(self.data.get('sites'),
                                                     'site')]
        links = self.data.get('links') or {}
        self.computers = as_list(links.get('computers'), 'computer')
        self.peripherals = as_list(links.get('peripherals'), 'peripheral')
        self.mobile_devices = as_list(links.get('mobile_devices'),
                                      'mobile_device')
        self.vpp_assignments = as_list(links.get('vpp_assignments'),
                                       'vpp_assignment')
        self.total_vpp_code_count = links.get('total_vpp_code_count')

    @property
    def username(self):
        return self.name

    @property
    def site_names(self):
        return [site.get('name') for site in self.sites]

    def _set(self, attr, value):
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    def set_full_name(self, value):
        self._set('full_name', value)

    def set_email(self, value):
        self._set('email', value)

    def set_phone_number(self, value):
        self._set('phone_number', value)

    def set_position(self, value):
        self._set('position', value)

    def set_ldap_server(self, server):
        """Set the LDAP server by name or id. None unsets it."""
        from .ldap_server import LDAPServer
        if server in (None, ''):
            self._set('ldap_server_id', None)
            self._set('ldap_server', None)
            return
        server_id = LDAPServer.valid_id(self.jss, server)
        if server_id is None:
            raise InvalidDataError("No LDAP server in the JSS named %s" %
                                   server)
        self._set('ldap_server_id', server_id)
        self._set('ldap_server',
                  LDAPServer.map_all_ids_to(self.jss, 'name')[server_id])

    def add_site(self, site):
        from .jssobjects import Site
        site_id = Site.valid_id(self.jss, site)
        if site_id is None:
            raise NoSuchItemError("No site in the JSS named %s" % site)
        if site_id in [self._parse_id(s.get('id')) for s in self.sites]:
            return
        self.sites.append({'id': site_id,
                           'name': Site.map_all_ids_to(self.jss,
                                                       'name')[site_id]})
        self.should_update()

    def remove_site(self, site):
        before = len(self.sites)
        self.sites = [s for s in self.sites
                      if str(site).lower() not in (str(s.get('id')),
                                                   str(s.get('name')).lower())]
        if len(self.sites) != before:
            self.should_update()

    def rest_element(self):
        root = super(User, self).rest_element()
        add_text(root, 'full_name', self.full_name)
        add_text(root, 'email', self.email)
        add_text(root, 'phone_number', self.phone_number)
        add_text(root, 'position', self.position)
        ldap = ElementTree.SubElement(root, 'ldap_server')
        add_text(ldap, 'id', self.ldap_server_id
                 if self.ldap_server_id is not None else -1)
        add_list(root, 'sites', 'site', self.sites)
        if self.changed_eas:
            root.append(self.ext_attr_xml())
        return root

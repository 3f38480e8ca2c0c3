#!/usr/bin/env python
"""directory_binding.py

Directory bindings: how computers join AD, OD and friends.
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

from .exceptions import InvalidDataError, MissingDataError
from .jssobject import JSSObject
from .tools import add_text, validate_priority


# Keys are also the data subset holding each type's settings.
BINDING_TYPES = {
    'open_directory': 'Open Directory',
    'active_directory': 'Active Directory',
    'powerbroker_identity_services': 'PowerBroker Identity Services',
    'admitmac': 'ADmitMac',
    'centrify': 'Centrify'}
MIN_PRIORITY = 1
MAX_PRIORITY = 10
REQUIRED = ('domain', 'username', 'computer_ou', 'type')


class DirectoryBinding(JSSObject):
    _url = 'directorybindings'
    container = 'directory_bindings'
    list_type = 'directory_binding'

    def new(self, name, **kwargs):
        """Set up a binding.

        Keyword args: domain, username, password, computer_ou, type
        (a key or label of BINDING_TYPES), priority and type_settings.

        """
        for key in ('domain', 'username', 'password', 'computer_ou'):
            if kwargs.get(key) is not None:
                setattr(self, key, str(kwargs[key]))
        if kwargs.get('type') is not None:
            self.set_type(kwargs['type'])
        if kwargs.get('priority') is not None:
            self.set_priority(kwargs['priority'])
        self.type_settings = dict(kwargs.get('type_settings') or {})

    def _load(self):
        super(DirectoryBinding, self)._load()
        self.domain = self.data.get('domain')
        self.username = self.data.get('username')
        self.password_sha256 = self.data.get('password_sha256')
        self.password = None
        self.computer_ou = self.data.get('computer_ou')
        self.type = self.data.get('type')
        self.priority = int(self.data.get('priority') or MIN_PRIORITY)
        key = self.type_key
        self.type_settings = dict(self.data.get(key) or {}) if key else {}

    @property
    def type_key(self):
        for key, label in BINDING_TYPES.items():
            if label == self.type:
                return key
        return None

    def _set(self, attr, value):
        if getattr(self, attr, None) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    def set_domain(self, value):
        self._set('domain', str(value))

    def set_username(self, value):
        self._set('username', str(value))

    def set_password(self, value):
        self._set('password', str(value))

    def set_computer_ou(self, value):
        self._set('computer_ou', str(value))

    def set_priority(self, value):
        self._set('priority', validate_priority(value, MIN_PRIORITY,
                                                MAX_PRIORITY))

    def set_type(self, value):
        """Set the binding type by key ('active_directory') or label."""
        if value in BINDING_TYPES:
            value = BINDING_TYPES[value]
        if value not in BINDING_TYPES.values():
            raise InvalidDataError("Type must be one of: %s" %
                                   ', '.join(sorted(BINDING_TYPES)))
        if value != getattr(self, 'type', None):
            self.type_settings = {}
        self._set('type', value)

    def set_type_setting(self, key, value):
        """Set one of the settings specific to the binding type."""
        if self.type_settings.get(key) == value:
            return
        self.type_settings[key] = value
        self.should_update()

    def _validate(self):
        missing = [key for key in REQUIRED if not getattr(self, key)]
        if not self.in_jss and not self.password:
            missing.append('password')
        if missing:
            raise MissingDataError("DirectoryBinding needs: %s" %
                                   ', '.join(missing))

    def create(self):
        self._validate()
        return super(DirectoryBinding, self).create()

    def update(self):
        self._validate()
        return super(DirectoryBinding, self).update()

    def rest_element(self):
        root = super(DirectoryBinding, self).rest_element()
        add_text(root, 'priority', self.priority)
        add_text(root, 'domain', self.domain)
        add_text(root, 'username', self.username)
        add_text(root, 'computer_ou', self.computer_ou)
        add_text(root, 'type', self.type)
        if self.password:
            add_text(root, 'password', self.password)
        if self.type_key:
            settings = ElementTree.SubElement(root, self.type_key)
            for key, value in sorted(self.type_settings.items()):
                # Nested settings are read only.
                if isinstance(value, (list, dict)):
                    continue
                add_text(settings, key, value)
        return root

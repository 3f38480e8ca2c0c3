#!/usr/bin/env python
"""scope.py

Scoping of policies, profiles and apps to computers and mobile devices.
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
from xml.etree import ElementTree

from .exceptions import (AlreadyExistsError, ConflictError, InvalidDataError,
                         NoSuchItemError)
from .tools import add_text, as_list, bool_text, singularize, to_bool


logger = logging.getLogger(__name__)

TARGETS_AND_GROUPS = {'computers': 'computer_groups',
                      'mobile_devices': 'mobile_device_groups'}
INCLUSIONS = ('buildings', 'departments')
LIMITATIONS = ('network_segments', 'users', 'user_groups')
EXCLUSIONS = INCLUSIONS + LIMITATIONS
LDAP_KEYS = ('users', 'user_groups')


def scoping_classes():
    """Return the classes that validate each scope key."""
    # Imported here since most of these classes are scopable themselves.
    from .computer import Computer
    from .group import ComputerGroup, MobileDeviceGroup, UserGroup
    from .jssobjects import Building, Department
    from .mobile_device import MobileDevice
    from .network_segment import NetworkSegment
    from .user import User
    return {'computers': Computer,
            'computer_groups': ComputerGroup,
            'mobile_devices': MobileDevice,
            'mobile_device_groups': MobileDeviceGroup,
            'buildings': Building,
            'departments': Department,
            'network_segments': NetworkSegment,
            'users': User,
            'user_groups': UserGroup}


def pluralize_key(key):
    """Accept 'computer' or 'computers' for the same scope key."""
    key = str(key)
    return key if key.endswith('s') else key + 's'


class Scope(object):
    """The scope of a Scopable JSS object.

    Targets are the computers or mobile devices (plus their groups, and
    the buildings and departments) that are included. all_targets
    includes everything. Limitations narrow the targets by network
    segment or user, and exclusions remove matching targets.

    Items are stored as JSS ids. LDAP users and groups that can't be
    verified are kept by name.

    """
    def __init__(self, target_key, raw_scope=None, container=None):
        if target_key not in TARGETS_AND_GROUPS:
            raise InvalidDataError("The target key of a Scope must be one of"
                                   " %s" % ', '.join(TARGETS_AND_GROUPS))
        self.target_key = target_key
        self.group_key = TARGETS_AND_GROUPS[target_key]
        self.all_key = 'all_%s' % target_key
        self.inclusion_keys = (target_key, self.group_key) + INCLUSIONS
        self.exclusion_keys = (target_key, self.group_key) + EXCLUSIONS
        self.container = container
        self.unable_to_verify_ldap_entries = False

        if raw_scope is None:
            raw_scope = {self.all_key: False}
        self.all_targets = to_bool(raw_scope.get(self.all_key))
        self.inclusions = self._parse_lists(raw_scope, self.inclusion_keys)
        self.limitations = self._parse_lists(raw_scope.get('limitations'),
                                             LIMITATIONS)
        self.exclusions = self._parse_lists(raw_scope.get('exclusions'),
                                            self.exclusion_keys)

    @staticmethod
    def _parse_lists(raw, keys):
        result = {}
        raw = raw or {}
        for key in keys:
            result[key] = []
            for item in as_list(raw.get(key), singularize(key)):
                if not item:
                    continue
                try:
                    item_id = int(item.get('id'))
                except (TypeError, ValueError):
                    item_id = None
                if item_id is not None and item_id > 0:
                    result[key].append(item_id)
                elif key in LDAP_KEYS and item.get('name'):
                    # LDAP users and groups arrive by name only.
                    result[key].append(str(item['name']))
        return result

    def __repr__(self):
        return ("<Scope %s all_targets=%s inclusions=%s limitations=%s "
                "exclusions=%s>" % (self.target_key, self.all_targets,
                                    self.inclusions, self.limitations,
                                    self.exclusions))

    def _changed(self):
        if self.container is not None:
            self.container.should_update()

    @property
    def jss(self):
        return self.container.jss if self.container is not None else None

    def validate_item(self, realm, key, ident, error_if_not_found=True):
        """Return the id of ident, a member of the key list in realm.

        realm is one of 'target', 'limitation', or 'exclusion'.

        """
        possible_keys = {'target': self.inclusion_keys,
                         'limitation': LIMITATIONS,
                         'exclusion': self.exclusion_keys}.get(realm)
        if possible_keys is None:
            raise ValueError("Unknown realm %s, must be target, limitation, "
                             "or exclusion" % realm)
        key = pluralize_key(key)
        if key not in possible_keys:
            raise InvalidDataError("%s key must be one of %s" %
                                   (realm, ', '.join(possible_keys)))
        klass = scoping_classes()[key]
        item_id = klass.valid_id(self.jss, ident)
        if item_id is None and key in LDAP_KEYS and realm != 'target':
            item_id = self._validate_ldap_item(key, ident)
        if item_id is None and error_if_not_found:
            raise NoSuchItemError("No existing %s matching '%s'" %
                                  (key, ident))
        return item_id

    def _validate_ldap_item(self, key, ident):
        """Look for ident in the LDAP servers, keeping it by name."""
        from .ldap_server import LDAPServer
        try:
            if key == 'users':
                found = LDAPServer.user_in_ldap(self.jss, ident)
            else:
                found = LDAPServer.group_in_ldap(self.jss, ident)
        except NoSuchItemError:
            found = False
        if not found:
            logger.warning("Can't verify LDAP %s '%s'; keeping it anyway.",
                           key, ident)
            self.unable_to_verify_ldap_entries = True
        return str(ident)

    def include_all(self, clear=False):
        """Scope to all targets. With clear, drop limitations and
        exclusions too.

        """
        self.inclusions = {key: [] for key in self.inclusion_keys}
        self.all_targets = True
        if clear:
            self.limitations = {key: [] for key in LIMITATIONS}
            self.exclusions = {key: [] for key in self.exclusion_keys}
        self._changed()

    def set_targets(self, key, items):
        """Replace the list of targets for key."""
        key = pluralize_key(key)
        if not isinstance(items, (list, tuple)):
            raise InvalidDataError("List must be a list of %s identifiers, "
                                   "it may be empty." % key)
        new_ids = []
        for ident in items:
            item_id = self.validate_item('target', key, ident)
            if item_id in self.exclusions.get(key, []):
                raise AlreadyExistsError(
                    "Can't set %s target to '%s' because it's already an "
                    "explicit exclusion." % (key, ident))
            new_ids.append(item_id)
        if sorted(new_ids) == sorted(self.inclusions[key]):
            return
        self.inclusions[key] = new_ids
        self.all_targets = False
        self._changed()

    def add_target(self, key, item):
        key = pluralize_key(key)
        item_id = self.validate_item('target', key, item)
        if item_id in self.inclusions[key]:
            return
        if item_id in self.exclusions.get(key, []):
            raise AlreadyExistsError(
                "Can't set %s target to '%s' because it's already an "
                "explicit exclusion." % (key, item))
        self.inclusions[key].append(item_id)
        self.all_targets = False
        self._changed()

    def remove_target(self, key, item):
        key = pluralize_key(key)
        item_id = self.validate_item('target', key, item,
                                     error_if_not_found=False)
        if item_id is None or item_id not in self.inclusions[key]:
            return
        self.inclusions[key].remove(item_id)
        self._changed()

    def set_limitation(self, key, items):
        """Replace the list of limitations for key."""
        key = pluralize_key(key)
        if not isinstance(items, (list, tuple)):
            raise InvalidDataError("List must be a list of %s identifiers, "
                                   "it may be empty." % key)
        new_ids = []
        for ident in items:
            item_id = self.validate_item('limitation', key, ident)
            if item_id in self.exclusions[key]:
                raise AlreadyExistsError(
                    "Can't set %s limitation for '%s' because it's already "
                    "an explicit exclusion." % (key, ident))
            new_ids.append(item_id)
        if sorted(new_ids, key=str) == sorted(self.limitations[key],
                                              key=str):
            return
        self.limitations[key] = new_ids
        self._changed()

    def add_limitation(self, key, item):
        key = pluralize_key(key)
        item_id = self.validate_item('limitation', key, item)
        if item_id in self.limitations[key]:
            return
        if item_id in self.exclusions[key]:
            raise AlreadyExistsError(
                "Can't set %s limitation for '%s' because it's already an "
                "explicit exclusion." % (key, item))
        self.limitations[key].append(item_id)
        self._changed()

    def remove_limitation(self, key, item):
        key = pluralize_key(key)
        item_id = self.validate_item('limitation', key, item,
                                     error_if_not_found=False)
        if item_id is None or item_id not in self.limitations[key]:
            return
        self.limitations[key].remove(item_id)
        self._changed()

    def _check_exclusion(self, key, ident, item_id):
        if item_id in self.inclusions.get(key, []):
            raise AlreadyExistsError("Can't exclude %s '%s' because it's "
                                     "already explicitly included." %
                                     (key, ident))
        if item_id in self.limitations.get(key, []):
            raise AlreadyExistsError("Can't exclude %s '%s' because it's "
                                     "already an explicit limitation." %
                                     (key, ident))

    def set_exclusion(self, key, items):
        """Replace the list of exclusions for key."""
        key = pluralize_key(key)
        if not isinstance(items, (list, tuple)):
            raise InvalidDataError("List must be a list of %s identifiers, "
                                   "it may be empty." % key)
        new_ids = []
        for ident in items:
            item_id = self.validate_item('exclusion', key, ident)
            self._check_exclusion(key, ident, item_id)
            new_ids.append(item_id)
        if sorted(new_ids, key=str) == sorted(self.exclusions[key], key=str):
            return
        self.exclusions[key] = new_ids
        self._changed()

    def add_exclusion(self, key, item):
        key = pluralize_key(key)
        item_id = self.validate_item('exclusion', key, item)
        if item_id in self.exclusions[key]:
            return
        self._check_exclusion(key, item, item_id)
        self.exclusions[key].append(item_id)
        self._changed()

    def remove_exclusion(self, key, item):
        key = pluralize_key(key)
        item_id = self.validate_item('exclusion', key, item,
                                     error_if_not_found=False)
        if item_id is None or item_id not in self.exclusions[key]:
            return
        self.exclusions[key].remove(item_id)
        self._changed()

    def in_scope(self, key, ident):
        """Return whether ident is explicitly included under key."""
        key = pluralize_key(key)
        item_id = self.validate_item('target', key, ident,
                                     error_if_not_found=False)
        return item_id is not None and item_id in self.inclusions[key]

    @staticmethod
    def _add_items(parent, key, items):
        list_element = ElementTree.SubElement(parent, key)
        for item in items:
            if not item:
                continue
            item_element = ElementTree.SubElement(list_element,
                                                  singularize(key))
            if isinstance(item, int):
                add_text(item_element, 'id', item)
            else:
                add_text(item_element, 'name', item)

    def scope_xml(self):
        """Return the scope as a <scope> Element."""
        scope = ElementTree.Element('scope')
        add_text(scope, self.all_key, bool_text(self.all_targets))
        for key in self.inclusion_keys:
            self._add_items(scope, key, self.inclusions[key])
        limitations = ElementTree.SubElement(scope, 'limitations')
        for key in LIMITATIONS:
            self._add_items(limitations, key, self.limitations[key])
        exclusions = ElementTree.SubElement(scope, 'exclusions')
        for key in self.exclusion_keys:
            self._add_items(exclusions, key, self.exclusions[key])
        return scope


class Scopable(object):
    """Mixin for objects with a scope.

    Classes set scope_target_key to 'computers' or 'mobile_devices'.

    """
    scope_target_key = 'computers'

    def _load(self):
        super(Scopable, self)._load()
        self.scope = Scope(self.scope_target_key, self.data.get('scope'),
                           container=self)

    def set_scope(self, new_scope):
        """Replace the scope with another Scope instance."""
        if not isinstance(new_scope, Scope):
            raise InvalidDataError("A Scope instance is required.")
        if new_scope.target_key != self.scope_target_key:
            raise InvalidDataError("Scope must have a target_key of %s" %
                                   self.scope_target_key)
        new_scope.container = self
        self.scope = new_scope
        self.should_update()

    def update(self):
        try:
            return super(Scopable, self).update()
        except ConflictError:
            if self.scope.unable_to_verify_ldap_entries:
                raise InvalidDataError("Potentially non-existant LDAP user or"
                                       " group in new scope values.")
            raise

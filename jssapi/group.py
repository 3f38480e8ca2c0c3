#!/usr/bin/env python
"""group.py

Static and smart groups of computers, mobile devices and users.
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

from .computer import Computer
from .criteria import Criteriable
from .exceptions import (InvalidDataError, MissingDataError, NoSuchItemError,
                         UnsupportedError)
from .jssobject import JSSObject
from .mdm import MDMCommandable
from .mixins import Sitable
from .mobile_device import MobileDevice
from .tools import (XML_HEADER, add_text, as_list, bool_text, to_bool,
                    validate_bool)
from .user import User


logger = logging.getLogger(__name__)


class Group(Criteriable, Sitable, JSSObject):
    """Abstract base for groups.

    Static groups have members set explicitly. Smart groups compute
    their members on the server from criteria, so their members can't
    be changed here.

    Subclasses set:
        member_class:   The JSSObject class of the members.
        member_key:     Data key of the member list, e.g. 'computers'.
        member_tag:     Element name of one member, e.g. 'computer'.

    """
    member_class = None
    member_key = None
    member_tag = None
    site_subset = None

    @classmethod
    def all_smart(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if to_bool(item.get('is_smart'))]

    @classmethod
    def all_static(cls, jss, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if not to_bool(item.get('is_smart'))]

    def new(self, name, **kwargs):
        """Make a new group. Pass smart=True for a smart group."""
        self.is_smart = validate_bool(kwargs.get('smart', False), 'smart')

    def _load(self):
        super(Group, self)._load()
        self.is_smart = to_bool(self.data.get('is_smart'))
        self.members = [dict(member) for member in as_list(
            self.data.get(self.member_key), self.member_tag)]

    # Criteria #############################################################

    @property
    def criteria(self):
        return self._criteria

    @criteria.setter
    def criteria(self, new_criteria):
        if not self.is_smart:
            raise InvalidDataError("Only smart groups have criteria.")
        Criteriable.criteria.fset(self, new_criteria)

    def add_criterion(self, name, priority, and_or, search_type, value):
        if not self.is_smart:
            raise InvalidDataError("Only smart groups have criteria.")
        super(Group, self).add_criterion(name, priority, and_or, search_type,
                                         value)

    # Membership ###########################################################

    @property
    def size(self):
        return len(self.members)

    count = size

    @property
    def member_ids(self):
        return [int(member['id']) for member in self.members]

    @property
    def member_names(self):
        return [member.get('name') for member in self.members]

    def _require_static(self):
        if self.is_smart:
            raise UnsupportedError("Smart group members can't be changed.")

    def _check_member(self, ident):
        """Return {id, name} list data for a potential member."""
        if isinstance(ident, JSSObject):
            ident = ident.id
        member_id = self.member_class.valid_id(self.jss, ident)
        if member_id is None:
            raise NoSuchItemError("No %s matching '%s' in the JSS." %
                                  (self.member_class.__name__, ident))
        names = self.member_class.map_all_ids_to(self.jss, 'name')
        return {'id': member_id, 'name': names[member_id]}

    def set_members(self, new_members):
        """Replace the members of a static group."""
        self._require_static()
        if not isinstance(new_members, (list, tuple)):
            raise InvalidDataError("Members must be a list of names and/or "
                                   "ids.")
        checked = []
        for ident in new_members:
            member = self._check_member(ident)
            if member['id'] not in [m['id'] for m in checked]:
                checked.append(member)
        if sorted(m['id'] for m in checked) == sorted(self.member_ids):
            return
        self.members = checked
        self.should_update()

    def add_member(self, ident):
        self._require_static()
        member = self._check_member(ident)
        if member['id'] in self.member_ids:
            return
        self.members.append(member)
        self.should_update()

    def remove_member(self, ident):
        self._require_static()
        if ident is None:
            raise InvalidDataError("Can't remove None.")
        if isinstance(ident, JSSObject):
            ident = ident.id
        wanted = str(ident).lower()
        before = len(self.members)
        self.members = [
            member for member in self.members
            if wanted not in [str(member.get(key)).lower() for key in
                              ('id', 'name', 'username')
                              if member.get(key) is not None]]
        if len(self.members) != before:
            self.should_update()

    def clear(self):
        self._require_static()
        if not self.members:
            return
        self.members = []
        self.should_update()

    def is_member(self, ident):
        """Return whether ident (an id, name or object) is a member."""
        if isinstance(ident, JSSObject):
            ident = ident.id
        member_id = self.member_class.valid_id(self.jss, ident)
        return member_id is not None and member_id in self.member_ids

    def refresh_members(self):
        """Reload the member list from the JSS."""
        data = self.jss.get(self.get_object_url()).get(self.list_type, {})
        self.members = [dict(member) for member in as_list(
            data.get(self.member_key), self.member_tag)]
        return self.members

    @classmethod
    def change_group_membership(cls, jss, group, add_members=(),
                                remove_members=()):
        """PUT member additions and deletions to a static group.

        Only the changes are sent, so other edits to the group aren't
        touched. Returns False if there was nothing to change.

        """
        group_id = cls.valid_id(jss, group)
        if group_id is None:
            raise NoSuchItemError("No %s matching '%s'" % (cls.__name__,
                                                           group))
        if to_bool(cls.map_all_ids_to(jss, 'is_smart').get(group_id)):
            raise UnsupportedError("Not a static group, can't change "
                                   "membership directly")
        if isinstance(add_members, (str, int)):
            add_members = [add_members]
        if isinstance(remove_members, (str, int)):
            remove_members = [remove_members]
        if not add_members and not remove_members:
            return False

        current_ids = cls.fetch(jss, group_id).member_ids
        root = ElementTree.Element(cls.list_type)
        additions = [cls._member_id(jss, ident, True)
                     for ident in add_members]
        additions = [m_id for m_id in additions if m_id not in current_ids]
        removals = [cls._member_id(jss, ident, False)
                    for ident in remove_members]
        removals = [m_id for m_id in removals if m_id in current_ids]
        if not additions and not removals:
            return False
        for tag, ids in (('%s_additions' % cls.member_tag, additions),
                         ('%s_deletions' % cls.member_tag, removals)):
            if not ids:
                continue
            parent = ElementTree.SubElement(root, tag)
            for m_id in ids:
                add_text(ElementTree.SubElement(parent, cls.member_tag), 'id',
                         m_id)
        jss.put(cls.get_url(group_id),
                XML_HEADER + ElementTree.tostring(root, encoding='unicode'))
        logger.debug("Changed membership of %s %s: +%s -%s", cls.__name__,
                     group_id, additions, removals)
        return True

    @classmethod
    def _member_id(cls, jss, ident, required):
        member_id = cls.member_class.valid_id(jss, ident)
        if member_id is None and required:
            raise NoSuchItemError("No %s matching '%s'" %
                                  (cls.member_class.__name__, ident))
        return member_id

    def change_membership(self, add_members=(), remove_members=()):
        """Directly add and remove members, then reload the members."""
        if not self.in_jss:
            raise NoSuchItemError("Create this group before changing its "
                                  "membership.")
        changed = self.change_group_membership(self.jss, self.id, add_members,
                                               remove_members)
        if changed:
            self.refresh_members()
        return changed

    # Saving ###############################################################

    def create(self, calculate_members=True):
        if self.is_smart and not len(self.criteria):
            raise MissingDataError("No criteria specified for smart group")
        result = super(Group, self).create()
        if calculate_members:
            self.refresh_members()
        return result

    def update(self):
        result = super(Group, self).update()
        if result is not None:
            self.refresh_members()
        return result

    def rest_element(self):
        root = super(Group, self).rest_element()
        add_text(root, 'is_smart', bool_text(self.is_smart))
        if self.is_smart:
            root.append(self.criteria.rest_element())
        else:
            members = ElementTree.SubElement(root, self.member_key)
            for m_id in self.member_ids:
                add_text(ElementTree.SubElement(members, self.member_tag),
                         'id', m_id)
        self.add_site_to_xml(root)
        return root


class ComputerGroup(MDMCommandable, Group):
    _url = 'computergroups'
    container = 'computer_groups'
    list_type = 'computer_group'
    member_class = Computer
    member_key = 'computers'
    member_tag = 'computer'
    mdm_command_target = 'computergroups'

    @property
    def member_serial_numbers(self):
        return [member.get('serial_number') for member in self.members]

    @property
    def member_mac_addresses(self):
        return [mac for member in self.members
                for mac in (member.get('mac_address'),
                            member.get('alt_mac_address')) if mac]

    @property
    def member_udids(self):
        return [member.get('udid') for member in self.members]


class MobileDeviceGroup(MDMCommandable, Group):
    _url = 'mobiledevicegroups'
    container = 'mobile_device_groups'
    list_type = 'mobile_device_group'
    member_class = MobileDevice
    member_key = 'mobile_devices'
    member_tag = 'mobile_device'
    mdm_command_target = 'mobiledevicegroups'

    @property
    def member_serial_numbers(self):
        return [member.get('serial_number') for member in self.members]

    @property
    def member_wifi_mac_addresses(self):
        return [member.get('wifi_mac_address') for member in self.members]

    @property
    def member_udids(self):
        return [member.get('udid') for member in self.members]


class UserGroup(Group):
    _url = 'usergroups'
    container = 'user_groups'
    list_type = 'user_group'
    member_class = User
    member_key = 'users'
    member_tag = 'user'

    @property
    def member_usernames(self):
        return [member.get('username') or member.get('name')
                for member in self.members]

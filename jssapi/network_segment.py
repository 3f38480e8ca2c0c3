#!/usr/bin/env python
"""network_segment.py

IP address ranges defined in the JSS.
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

from .exceptions import InvalidDataError, MissingDataError, NoSuchItemError
from .jssobject import JSSObject
from .tools import add_text, bool_text, name_of, to_bool, validate_bool


def _address(value):
    try:
        return ipaddress.IPv4Address(str(value).strip())
    except ValueError:
        raise InvalidDataError("'%s' is not a valid IPv4 address" % value)


class NetworkSegment(JSSObject):
    """A range of IPv4 addresses, with the building, department and
    servers used by machines in it.

    """
    _url = 'networksegments'
    container = 'network_segments'
    list_type = 'network_segment'

    @classmethod
    def network_ranges(cls, jss, refresh=False):
        """Return {id: (starting address, ending address)}."""
        return {int(item['id']): (_address(item['starting_address']),
                                  _address(item['ending_address']))
                for item in cls.all(jss, refresh)}

    @classmethod
    def network_segments_for_ip(cls, jss, ip, refresh=False):
        """Return the ids of all segments that include ip."""
        ip = _address(ip)
        return sorted(seg_id for seg_id, (start, end) in
                      cls.network_ranges(jss, refresh).items()
                      if start <= ip <= end)

    def new(self, name, **kwargs):
        if not kwargs.get('starting_address'):
            raise MissingDataError("Missing starting_address.")
        if not (kwargs.get('ending_address') or kwargs.get('cidr')):
            raise MissingDataError("Missing ending_address or cidr.")
        self.starting_address = _address(kwargs['starting_address'])
        if kwargs.get('ending_address'):
            self.ending_address = _address(kwargs['ending_address'])
            if self.ending_address < self.starting_address:
                raise InvalidDataError("ending_address is lower than "
                                       "starting_address")
        else:
            self.set_cidr(kwargs['cidr'])

    def _load(self):
        super(NetworkSegment, self)._load()
        self.starting_address = None
        self.ending_address = None
        if self.data.get('starting_address'):
            self.starting_address = _address(self.data['starting_address'])
        if self.data.get('ending_address'):
            self.ending_address = _address(self.data['ending_address'])
        self.building = name_of(self.data.get('building')) or None
        self.department = name_of(self.data.get('department')) or None
        self.distribution_point = name_of(
            self.data.get('distribution_point')) or None
        self.netboot_server = name_of(self.data.get('netboot_server')) or None
        self.swu_server = name_of(self.data.get('swu_server')) or None
        self.url = self.data.get('url')
        self.override_buildings = to_bool(self.data.get('override_buildings'))
        self.override_departments = to_bool(
            self.data.get('override_departments'))

    @property
    def cidr(self):
        """The prefix length, if the range is exactly one subnet."""
        if self.starting_address is None or self.ending_address is None:
            return None
        networks = list(ipaddress.summarize_address_range(
            self.starting_address, self.ending_address))
        if len(networks) != 1:
            return None
        return networks[0].prefixlen

    def set_cidr(self, cidr):
        """Set the ending address from starting_address and a prefix
        length.

        """
        if self.starting_address is None:
            raise MissingDataError("Set starting_address before cidr.")
        try:
            network = ipaddress.IPv4Network('%s/%s' % (self.starting_address,
                                                       int(cidr)),
                                            strict=False)
        except ValueError:
            raise InvalidDataError("Invalid cidr: %s" % cidr)
        self.ending_address = network.broadcast_address
        self.should_update()

    def set_starting_address(self, value):
        address = _address(value)
        if self.ending_address is not None and address > self.ending_address:
            raise InvalidDataError("New starting address %s is higher than "
                                   "ending address %s" %
                                   (address, self.ending_address))
        self.starting_address = address
        self.should_update()

    def set_ending_address(self, value):
        address = _address(value)
        if self.starting_address is not None and \
                address < self.starting_address:
            raise InvalidDataError("New ending address %s is lower than "
                                   "starting address %s" %
                                   (address, self.starting_address))
        self.ending_address = address
        self.should_update()

    def include(self, ip):
        """Return whether ip is within this segment."""
        ip = _address(ip)
        return self.starting_address <= ip <= self.ending_address

    def _set_named(self, attr, klass, value):
        if value in (None, ''):
            new_name = None
        else:
            obj_id = klass.valid_id(self.jss, value)
            if obj_id is None:
                raise NoSuchItemError("No %s matching '%s'" %
                                      (klass.__name__, value))
            new_name = klass.map_all_ids_to(self.jss, 'name')[obj_id]
        if new_name == getattr(self, attr):
            return
        setattr(self, attr, new_name)
        self.should_update()

    def set_building(self, value):
        from .jssobjects import Building
        self._set_named('building', Building, value)

    def set_department(self, value):
        from .jssobjects import Department
        self._set_named('department', Department, value)

    def set_distribution_point(self, value):
        from .distribution_point import DistributionPoint
        self._set_named('distribution_point', DistributionPoint, value)

    def set_netboot_server(self, value):
        from .jssobjects import NetbootServer
        self._set_named('netboot_server', NetbootServer, value)

    def set_override_buildings(self, value):
        validate_bool(value, 'override_buildings')
        self.override_buildings = value
        self.should_update()

    def set_override_departments(self, value):
        validate_bool(value, 'override_departments')
        self.override_departments = value
        self.should_update()

    def rest_element(self):
        root = super(NetworkSegment, self).rest_element()
        add_text(root, 'starting_address', self.starting_address)
        add_text(root, 'ending_address', self.ending_address)
        add_text(root, 'building', self.building)
        add_text(root, 'department', self.department)
        add_text(root, 'distribution_point', self.distribution_point)
        add_text(root, 'netboot_server', self.netboot_server)
        add_text(root, 'swu_server', self.swu_server)
        add_text(root, 'override_buildings',
                 bool_text(self.override_buildings))
        add_text(root, 'override_departments',
                 bool_text(self.override_departments))
        return root

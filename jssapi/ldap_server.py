#!/usr/bin/env python
"""ldap_server.py

LDAP servers, and user and group lookups through them.
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

from urllib.parse import quote

from .exceptions import NoSuchItemError
from .jssobject import JSSObject
from .tools import as_list, to_bool


DEFAULT_PORT = 389


class LDAPServer(JSSObject):
    """An LDAP server known to the JSS. Read only.

    The JSS does the lookups, so users and groups can be checked without
    an LDAP connection of our own.

    """
    _url = 'ldapservers'
    container = 'ldap_servers'
    list_type = 'ldap_server'
    can_put = False
    can_post = False
    can_delete = False

    @classmethod
    def server_for_user(cls, jss, user):
        """Return the id of the first server knowing user, or None."""
        for server in cls.all_objects(jss, refresh=True):
            if server.find_user(user, exact=True):
                return server.id
        return None

    @classmethod
    def user_in_ldap(cls, jss, user):
        return cls.server_for_user(jss, user) is not None

    @classmethod
    def server_for_group(cls, jss, group):
        """Return the id of the first server knowing group, or None."""
        for server in cls.all_objects(jss, refresh=True):
            if server.find_group(group, exact=True):
                return server.id
        return None

    @classmethod
    def group_in_ldap(cls, jss, group):
        return cls.server_for_group(jss, group) is not None

    @classmethod
    def check_user_membership(cls, jss, server, user, group):
        """Return whether user is a member of group on server."""
        server_id = cls.valid_id(jss, server)
        if server_id is None:
            raise NoSuchItemError("No LDAPServer matching %s" % server)
        rsrc = '%s/group/%s/user/%s' % (cls.get_url(server_id),
                                        quote(str(group), safe=''),
                                        quote(str(user), safe=''))
        data = jss.get(rsrc)
        return bool(as_list(data.get('ldap_users'), 'ldap_user'))

    def _load(self):
        super(LDAPServer, self)._load()
        connection = self.data.get('connection') or {}
        account = connection.get('account') or {}
        self.hostname = connection.get('hostname')
        self.port = int(connection.get('port') or DEFAULT_PORT)
        self.use_ssl = to_bool(connection.get('use_ssl'))
        self.authentication_type = connection.get('authentication_type')
        self.open_close_timeout = connection.get('open_close_timeout')
        self.search_timeout = connection.get('search_timeout')
        self.referral_response = connection.get('referral_response')
        self.use_wildcards = to_bool(connection.get('use_wildcards'))
        self.lookup_dn = account.get('distinguished_username')
        self.lookup_pw_sha256 = account.get('password_sha256')
        mappings = self.data.get('mappings_for_users') or {}
        self.user_mappings = mappings.get('user_mappings') or {}
        self.user_group_mappings = mappings.get('user_group_mappings') or {}
        self.user_group_membership_mappings = mappings.get(
            'user_group_membership_mappings') or {}

    def _require_saved(self):
        if not self.in_jss:
            raise NoSuchItemError("LDAPServer not yet saved in the JSS")

    def find_user(self, user, exact=False):
        """Return the mapped LDAP data of users matching user.

        Without exact, the server's wildcard matching applies.

        """
        self._require_saved()
        data = self.jss.get('%s/user/%s' % (self.get_object_url(),
                                            quote(str(user), safe='')))
        found = as_list(data.get('ldap_users'), 'ldap_user')
        if exact:
            found = [item for item in found if item.get('username') == user]
        return found

    def find_group(self, group, exact=False):
        """Return the name and uid of groups matching group."""
        self._require_saved()
        data = self.jss.get('%s/group/%s' % (self.get_object_url(),
                                             quote(str(group), safe='')))
        found = as_list(data.get('ldap_groups'), 'ldap_group')
        if exact:
            found = [item for item in found
                     if item.get('groupname') == group]
        return found

    def check_membership(self, user, group):
        self._require_saved()
        return self.check_user_membership(self.jss, self.id, user, group)

#!/usr/bin/env python
"""distribution_point.py

Distribution points, and mounting their file shares to copy packages
and scripts to them.

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
import shutil
import subprocess
from urllib.parse import quote

from .exceptions import FileServiceError, MissingDataError, NoSuchItemError
from .jssobject import JSSObject
from .tools import add_text, bool_text, to_bool


logger = logging.getLogger(__name__)

MOUNT_OPTIONS = 'nobrowse'
MOUNT_ROOT = '/Volumes'
PACKAGES_FOLDER = 'Packages'
SCRIPTS_FOLDER = 'Scripts'
PROTOCOLS = {'AFP': 'afp', 'SMB': 'smbfs'}
ACCESS_LEVELS = ('ro', 'rw')

FIELDS = ('ip_address', 'local_path', 'enable_load_balancing',
          'failover_point', 'is_master', 'connection_type', 'share_port',
          'share_name', 'read_write_username', 'read_only_username',
          'workgroup_or_domain', 'http_downloads_enabled', 'protocol', 'port',
          'context', 'no_authentication_required', 'certificate_required',
          'username_password_required', 'http_username', 'certificate',
          'http_url', 'failover_point_url', 'ssh_username')
BOOL_FIELDS = ('enable_load_balancing', 'is_master', 'http_downloads_enabled',
               'no_authentication_required', 'certificate_required',
               'username_password_required')


class DistributionPoint(JSSObject):
    """A file share distribution point.

    Mounting uses the system mount and umount commands, so it is only
    available where those can mount AFP and SMB shares (e.g. macOS).

    Passwords for mounting are passed to mount(), or looked up by
    distribution point name in the JSS's repo_prefs.

    """
    _url = 'distributionpoints'
    container = 'distribution_points'
    list_type = 'distribution_point'

    @classmethod
    def master_distribution_point(cls, jss, refresh=False):
        """Return the master distribution point.

        With only one distribution point, it is the master.

        """
        ids = cls.all_ids(jss, refresh)
        if not ids:
            raise NoSuchItemError("No distribution points defined")
        if len(ids) == 1:
            return cls.fetch(jss, ids[0])
        for dp_id in ids:
            dp = cls.fetch(jss, dp_id)
            if dp.is_master:
                return dp
        raise NoSuchItemError("No master distribution point is defined")

    def _load(self):
        super(DistributionPoint, self)._load()
        for field in FIELDS:
            value = self.data.get(field)
            if field in BOOL_FIELDS:
                value = to_bool(value)
            setattr(self, field, value)
        self._read_write_password = None
        self._read_only_password = None
        self.mounted = None

    @property
    def hostname(self):
        return self.ip_address

    @property
    def mount_point(self):
        return os.path.join(MOUNT_ROOT,
                            'CasperDistribution-id-%s' % self.id)

    # Mounting #############################################################

    def _password(self, password):
        if password is None:
            for repo in getattr(self.jss, 'repo_prefs', None) or []:
                if repo.get('name') == self.name:
                    password = repo.get('password')
                    break
        return password

    def mount_url(self, password, access='ro'):
        """Return the URL for the mount command."""
        if self.connection_type not in PROTOCOLS:
            raise FileServiceError("Can't mount distribution point %s: no "
                                   "known connection type." % self.name)
        username = (self.read_only_username if access == 'ro'
                    else self.read_write_username)
        auth = '%s:%s@' % (quote(username or '', safe=''),
                           quote(password, safe=''))
        port = ':%s' % self.share_port if self.share_port else ''
        if self.connection_type == 'SMB':
            if self.workgroup_or_domain:
                auth = '%s;%s' % (self.workgroup_or_domain, auth)
            return '//%s%s%s/%s' % (auth, self.ip_address, port,
                                    self.share_name)
        return 'afp://%s%s%s/%s' % (auth, self.ip_address, port,
                                    self.share_name)

    def is_mounted(self):
        """Test for whether the mount point is mounted."""
        return os.path.ismount(self.mount_point)

    def mount(self, password=None, access='ro'):
        """Mount the share read-only ('ro') or read-write ('rw').

        Returns the mount point. Nothing is done if it is already mounted.

        """
        if access not in ACCESS_LEVELS:
            raise ValueError("access must be 'ro' or 'rw'")
        if self.is_mounted():
            return self.mount_point
        password = self._password(password)
        if not password:
            raise MissingDataError("Password required to mount %s." %
                                   self.name)
        url = self.mount_url(password, access)
        if not os.path.exists(self.mount_point):
            os.mkdir(self.mount_point)
        args = ['mount', '-t', PROTOCOLS[self.connection_type], '-o',
                MOUNT_OPTIONS, url, self.mount_point]
        logger.info("Mounting %s (%s) at %s", self.name, access,
                    self.mount_point)
        try:
            subprocess.check_call(args)
        except (OSError, subprocess.CalledProcessError) as error:
            if os.path.isdir(self.mount_point) and not self.is_mounted():
                os.rmdir(self.mount_point)
            raise FileServiceError("There was a problem mounting %s: %s" %
                                   (self.ip_address, error))
        self.mounted = access
        return self.mount_point

    def unmount(self):
        """Unmount the share, if mounted."""
        if not self.is_mounted():
            return
        logger.info("Unmounting %s from %s", self.name, self.mount_point)
        try:
            subprocess.check_call(['umount', self.mount_point])
        except (OSError, subprocess.CalledProcessError) as error:
            raise FileServiceError("There was a problem unmounting %s: %s" %
                                   (self.mount_point, error))
        if os.path.isdir(self.mount_point) and not self.is_mounted():
            os.rmdir(self.mount_point)
        self.mounted = None

    umount = unmount

    # Copying ##############################################################

    def copy_pkg(self, filename, password=None):
        """Copy a package (or bundle) to the Packages folder."""
        return self._copy(filename, PACKAGES_FOLDER, password)

    def copy_script(self, filename, password=None):
        """Copy a script to the Scripts folder."""
        return self._copy(filename, SCRIPTS_FOLDER, password)

    def copy(self, filename, password=None):
        """Copy a file, choosing the folder by its extension."""
        extension = os.path.splitext(filename)[1].upper()
        if extension in ('.PKG', '.DMG', '.ZIP', '.MPKG'):
            return self.copy_pkg(filename, password)
        return self.copy_script(filename, password)

    def _copy(self, filename, folder, password):
        """Copy a file or folder to the share, mounting read-write if
        needed. Returns the destination path.

        """
        if not self.is_mounted():
            self.mount(password, 'rw')
        full_filename = os.path.abspath(os.path.expanduser(filename))
        destination = os.path.join(self.mount_point, folder,
                                   os.path.basename(full_filename))
        logger.info("Copying %s to %s", full_filename, destination)
        if os.path.isdir(full_filename):
            shutil.copytree(full_filename, destination)
        elif os.path.isfile(full_filename):
            shutil.copyfile(full_filename, destination)
        else:
            raise NoSuchItemError("Local file '%s' doesn't exist" %
                                  full_filename)
        return destination

    def exists(self, filename):
        """Report whether filename (no path) is on the mounted share."""
        extension = os.path.splitext(filename)[1].upper()
        folder = PACKAGES_FOLDER if extension in ('.PKG', '.DMG', '.ZIP',
                                                  '.MPKG') else SCRIPTS_FOLDER
        return os.path.exists(os.path.join(self.mount_point, folder,
                                           filename))

    # Saving ###############################################################

    def set_read_write_password(self, password):
        """Set the password sent with the next update. Write-only."""
        self._read_write_password = password
        self.should_update()

    def set_read_only_password(self, password):
        self._read_only_password = password
        self.should_update()

    def rest_element(self):
        root = super(DistributionPoint, self).rest_element()
        for field in FIELDS:
            value = getattr(self, field)
            if field in BOOL_FIELDS:
                value = bool_text(value)
            add_text(root, field, value)
        if self._read_write_password:
            add_text(root, 'read_write_password', self._read_write_password)
        if self._read_only_password:
            add_text(root, 'read_only_password', self._read_only_password)
        return root


class DistributionPoints(object):
    """All distribution points of a JSS, for copying files to each.

    Passwords come from the JSS's repo_prefs, matched by name.

    """
    def __init__(self, jss):
        self._children = [DistributionPoint.fetch(jss, dp_id)
                          for dp_id in DistributionPoint.all_ids(jss)]

    def __iter__(self):
        return iter(self._children)

    def __repr__(self):
        output = ''
        for child in self._children:
            output += 79 * '-'
            output += "\nDistribution Point: %s\nMounted: %s\n" % (
                child.ip_address, child.is_mounted())
        return output

    def mount(self):
        for child in self._children:
            child.mount(access='rw')

    def umount(self):
        for child in self._children:
            child.unmount()

    def copy(self, filename):
        """Copy file to all repos, choosing the folder by extension."""
        return [child.copy(filename) for child in self._children]

    def copy_pkg(self, filename):
        return [child.copy_pkg(filename) for child in self._children]

    def copy_script(self, filename):
        return [child.copy_script(filename) for child in self._children]

    def exists(self, filename):
        """Report whether a file exists on all distribution points."""
        return all(child.exists(filename) for child in self._children)

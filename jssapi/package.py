#!/usr/bin/env python
"""package.py

Packages, and the files behind them on the master distribution point.

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

from .distribution_point import PACKAGES_FOLDER, DistributionPoint
from .exceptions import InvalidDataError, NoSuchItemError
from .jssobject import JSSObject
from .mixins import Categorizable
from .tools import (add_text, bool_text, os_ok, os_requirements_list,
                    to_bool, validate_bool, validate_priority)


logger = logging.getLogger(__name__)

CPU_TYPES = {None: 'None', 'x86': 'x86', 'ppc': 'PowerPC'}
MIN_PRIORITY = 1
MAX_PRIORITY = 20
DEFAULT_PRIORITY = 10
DO_NOT_INSTALL = 'Do Not Install'
DO_NOT_REINSTALL = 'Do Not Reinstall'
BOOL_FIELDS = ('fill_existing_users', 'fill_user_template', 'reboot_required',
               'allow_uninstalled', 'install_if_reported_available',
               'boot_volume_required', 'send_notification')


class Package(Categorizable, JSSObject):
    """A package record in the JSS.

    The record only describes the installer. The file itself lives on
    the distribution points, and can be copied to the master with
    upload_master_file().

    """
    _url = 'packages'
    container = 'packages'
    list_type = 'package'
    category_style = 'old'

    def new(self, name, **kwargs):
        """Make a new package. The filename defaults to the name."""
        self.filename = kwargs.get('filename', name)
        if 'category' in kwargs:
            self.set_category(kwargs['category'])

    def _load(self):
        super(Package, self)._load()
        self.filename = self.data.get('filename')
        self.info = self.data.get('info')
        self.notes = self.data.get('notes')
        for field in BOOL_FIELDS:
            setattr(self, field, to_bool(self.data.get(field)))
        processor = self.data.get('required_processor')
        self.required_processor = None
        for key, value in CPU_TYPES.items():
            if processor == value:
                self.required_processor = key
        priority = self.data.get('priority')
        self.priority = (int(priority) if priority not in (None, '')
                         else DEFAULT_PRIORITY)
        self.os_requirements = os_requirements_list(
            self.data.get('os_requirements'))
        self.switch_with_package = (self.data.get('switch_with_package') or
                                    DO_NOT_INSTALL)
        self.reinstall_option = (self.data.get('reinstall_option') or
                                 DO_NOT_REINSTALL)

    def _set(self, attr, value):
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    # Setters ##############################################################

    def set_filename(self, filename):
        if not filename or not str(filename).strip():
            raise InvalidDataError("filename can't be empty")
        self._set('filename', str(filename).strip())

    def set_info(self, info):
        self._set('info', info)

    def set_notes(self, notes):
        # The JSS keeps line breaks as carriage returns.
        if notes is not None:
            notes = notes.replace('\n', '\r')
        self._set('notes', notes)

    def set_flag(self, field, value):
        """Set one of the boolean fields, e.g. 'reboot_required'."""
        if field not in BOOL_FIELDS:
            raise InvalidDataError("Unknown flag '%s', must be one of: %s" %
                                   (field, ', '.join(BOOL_FIELDS)))
        self._set(field, validate_bool(value, field))

    def set_reboot_required(self, value):
        self.set_flag('reboot_required', value)

    def set_fill_existing_users(self, value):
        self.set_flag('fill_existing_users', value)

    def set_fill_user_template(self, value):
        self.set_flag('fill_user_template', value)

    def set_boot_volume_required(self, value):
        self.set_flag('boot_volume_required', value)

    def set_allow_uninstalled(self, value):
        self.set_flag('allow_uninstalled', value)

    def set_required_processor(self, processor):
        if processor not in CPU_TYPES:
            raise InvalidDataError("Processor must be one of: None, x86, ppc")
        self._set('required_processor', processor)

    def set_priority(self, priority):
        self._set('priority', validate_priority(priority, MIN_PRIORITY,
                                                MAX_PRIORITY))

    def set_os_requirements(self, requirements):
        """Set OS requirements from a list or comma separated string.

        '>=10.12' style entries are expanded to the versions they allow.

        """
        self._set('os_requirements', os_requirements_list(requirements))

    def os_ok(self, os_version):
        """Return whether this package may install on os_version."""
        return os_ok(self.os_requirements, os_version)

    def set_switch_with_package(self, package):
        """Install another package, by name or id, when this one is
        reported as available. None means don't.

        """
        if package in (None, '', DO_NOT_INSTALL):
            self._set('switch_with_package', DO_NOT_INSTALL)
            return
        pkg_id = Package.valid_id(self.jss, package)
        if pkg_id is None:
            raise NoSuchItemError("No package matching '%s'" % package)
        # List data has no filenames.
        other = Package.fetch(self.jss, pkg_id)
        self._set('switch_with_package', other.filename)

    # Master distribution point ############################################

    def _master(self, rw_pw):
        master = DistributionPoint.master_distribution_point(self.jss)
        master.mount(rw_pw, 'rw')
        return master

    def upload_master_file(self, local_file, rw_pw=None, unmount=True):
        """Copy local_file to the master distribution point's Packages
        folder, and use its name as this package's filename.

        """
        if not os.path.exists(local_file):
            raise NoSuchItemError("No file at %s" % local_file)
        master = self._master(rw_pw)
        try:
            master.copy_pkg(local_file)
        finally:
            if unmount:
                master.unmount()
        self.set_filename(os.path.basename(os.path.normpath(local_file)))
        if self.in_jss:
            self.update()
        return self.filename

    def update_master_filename(self, new_filename, rw_pw=None,
                               unmount=True):
        """Rename the file on the master distribution point and in the
        JSS record.

        """
        if not new_filename or new_filename == self.filename:
            return False
        master = self._master(rw_pw)
        try:
            folder = os.path.join(master.mount_point, PACKAGES_FOLDER)
            old_path = os.path.join(folder, self.filename)
            if not os.path.exists(old_path):
                raise NoSuchItemError("%s is not on the master distribution "
                                      "point" % self.filename)
            os.rename(old_path, os.path.join(folder, new_filename))
        finally:
            if unmount:
                master.unmount()
        self.set_filename(new_filename)
        if self.in_jss:
            self.update()
        return True

    def delete_master_file(self, rw_pw=None, unmount=True):
        """Remove the file from the master distribution point.

        Returns False if it wasn't there.

        """
        master = self._master(rw_pw)
        try:
            path = os.path.join(master.mount_point, PACKAGES_FOLDER,
                                self.filename)
            if os.path.isdir(path):
                shutil.rmtree(path)
            elif os.path.exists(path):
                os.remove(path)
            else:
                return False
            logger.info("Deleted %s from the master distribution point",
                        self.filename)
            return True
        finally:
            if unmount:
                master.unmount()

    def delete(self, delete_file=False, rw_pw=None, unmount=True):
        """Delete the JSS record, and optionally its file."""
        if delete_file:
            self.delete_master_file(rw_pw, unmount)
        super(Package, self).delete()

    # Saving ###############################################################

    def rest_element(self):
        root = super(Package, self).rest_element()
        self.add_category_to_xml(root)
        add_text(root, 'filename', self.filename)
        add_text(root, 'info', self.info)
        add_text(root, 'notes', self.notes)
        add_text(root, 'priority', self.priority)
        for field in BOOL_FIELDS:
            add_text(root, field, bool_text(getattr(self, field)))
        add_text(root, 'os_requirements', ', '.join(self.os_requirements))
        add_text(root, 'required_processor',
                 CPU_TYPES[self.required_processor])
        add_text(root, 'switch_with_package', self.switch_with_package)
        add_text(root, 'reinstall_option', self.reinstall_option)
        return root

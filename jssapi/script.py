#!/usr/bin/env python
"""script.py

Scripts run by policies.
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

import base64
import os
from xml.etree import ElementTree

from .distribution_point import SCRIPTS_FOLDER, DistributionPoint
from .exceptions import InvalidDataError, MissingDataError
from .jssobject import JSSObject
from .mixins import Categorizable
from .tools import add_text, os_requirements_list


PRIORITIES = ('Before', 'After', 'At Reboot')
DEFAULT_PRIORITY = 'After'
PARAMETERS = range(4, 12)


def parameter_key(number):
    """Return the data key of script parameter number (4 to 11)."""
    try:
        number = int(number)
    except (TypeError, ValueError):
        number = None
    if number not in PARAMETERS:
        raise InvalidDataError("Script parameters are numbered 4 to 11")
    return 'parameter%s' % number


class Script(Categorizable, JSSObject):
    """A script.

    script_contents holds the code, if the JSS stores it in its
    database. Setting it also sets the base64 script_contents_encoded
    the JSS expects.

    """
    _url = 'scripts'
    container = 'scripts'
    list_type = 'script'
    category_style = 'old'

    def new(self, name, **kwargs):
        self.filename = kwargs.get('filename', name)
        if 'script_contents' in kwargs:
            self.set_script_contents(kwargs['script_contents'])

    def _load(self):
        super(Script, self)._load()
        self.filename = self.data.get('filename')
        self.info = self.data.get('info')
        self.notes = self.data.get('notes')
        self.priority = self.data.get('priority') or DEFAULT_PRIORITY
        self.os_requirements = os_requirements_list(
            self.data.get('os_requirements'))
        params = self.data.get('parameters') or {}
        self.parameters = {parameter_key(num): params.get(parameter_key(num))
                           for num in PARAMETERS}
        self.script_contents = self.data.get('script_contents')
        self.script_contents_encoded = self.data.get(
            'script_contents_encoded')
        if self.script_contents and not self.script_contents_encoded:
            self.script_contents_encoded = self._encode(self.script_contents)

    @staticmethod
    def _encode(code):
        return base64.b64encode(code.encode('utf-8')).decode('ascii')

    def _set(self, attr, value):
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    def set_filename(self, filename):
        if not filename or not str(filename).strip():
            raise InvalidDataError("filename can't be empty")
        self._set('filename', str(filename).strip())

    def set_info(self, info):
        self._set('info', info)

    def set_notes(self, notes):
        self._set('notes', notes)

    def set_priority(self, priority):
        """Set when the script runs: 'Before', 'After' or 'At Reboot'.

        Empty values reset it to 'After'.

        """
        if priority in (None, ''):
            priority = DEFAULT_PRIORITY
        if priority not in PRIORITIES:
            raise InvalidDataError("priority must be one of: %s" %
                                   ', '.join(PRIORITIES))
        self._set('priority', priority)

    def set_os_requirements(self, requirements):
        self._set('os_requirements', os_requirements_list(requirements))

    def set_parameter(self, number, label):
        """Label parameter number (4 to 11). None clears it."""
        key = parameter_key(number)
        if self.parameters[key] == label:
            return
        self.parameters[key] = label
        self.should_update()

    def set_parameters(self, labels):
        """Replace the parameter labels with a {number: label} dict."""
        if not isinstance(labels, dict):
            raise InvalidDataError("Parameters must be a dict of "
                                   "{number: label}")
        new_params = {parameter_key(num): None for num in PARAMETERS}
        for number, label in labels.items():
            new_params[parameter_key(number)] = label
        self._set('parameters', new_params)

    def set_script_contents(self, code):
        """Set the code from a string starting with '#!', or from the
        file at a path starting with '/'.

        """
        if not isinstance(code, str):
            raise InvalidDataError("Script contents must be a string")
        if code.startswith('/'):
            with open(code) as handle:
                code = handle.read()
        elif not code.startswith('#!'):
            raise InvalidDataError("Script contents must start with '/' for "
                                   "a path, or '#!' for code.")
        if code == self.script_contents:
            return
        self.script_contents = code
        self.script_contents_encoded = self._encode(code)
        self.should_update()

    @property
    def code(self):
        return self.script_contents

    # Master distribution point ############################################

    def upload_master_file(self, rw_pw=None, unmount=True):
        """Write script_contents to the master distribution point's
        Scripts folder, under this script's filename.

        """
        if not self.script_contents:
            raise MissingDataError("No code specified. Use "
                                   "set_script_contents() first.")
        master = DistributionPoint.master_distribution_point(self.jss)
        master.mount(rw_pw, 'rw')
        try:
            path = os.path.join(master.mount_point, SCRIPTS_FOLDER,
                                self.filename)
            with open(path, 'w') as handle:
                handle.write(self.script_contents)
        finally:
            if unmount:
                master.unmount()
        return path

    def delete_master_file(self, rw_pw=None, unmount=True):
        """Remove this script's file from the master distribution point.

        Returns False if it wasn't there.

        """
        master = DistributionPoint.master_distribution_point(self.jss)
        master.mount(rw_pw, 'rw')
        try:
            path = os.path.join(master.mount_point, SCRIPTS_FOLDER,
                                self.filename)
            if not os.path.exists(path):
                return False
            os.remove(path)
            return True
        finally:
            if unmount:
                master.unmount()

    def rest_element(self):
        root = super(Script, self).rest_element()
        self.add_category_to_xml(root)
        add_text(root, 'filename', self.filename)
        add_text(root, 'info', self.info)
        add_text(root, 'notes', self.notes)
        add_text(root, 'os_requirements', ', '.join(self.os_requirements))
        add_text(root, 'priority', self.priority)
        params = ElementTree.SubElement(root, 'parameters')
        for num in PARAMETERS:
            key = parameter_key(num)
            add_text(params, key, self.parameters[key])
        if self.script_contents_encoded:
            add_text(root, 'script_contents_encoded',
                     self.script_contents_encoded)
        return root

#!/usr/bin/env python
"""extension_attribute.py

Extension attribute definitions for computers, mobile devices and users.

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

import re
from xml.etree import ElementTree

from .exceptions import InvalidDataError, MissingDataError
from .jssobject import JSSObject
from .tools import add_text, as_list


DATA_TYPE_STRING = 'String'
DATA_TYPE_INTEGER = 'Integer'
DATA_TYPE_DATE = 'Date'
DATA_TYPES = (DATA_TYPE_STRING, DATA_TYPE_DATE, DATA_TYPE_INTEGER)

INPUT_TYPE_FIELD = 'Text Field'
INPUT_TYPE_POPUP = 'Pop-up Menu'
INPUT_TYPE_SCRIPT = 'script'
INPUT_TYPE_LDAP = 'LDAP Attribute Mapping'
INPUT_TYPES = (INPUT_TYPE_FIELD, INPUT_TYPE_POPUP, INPUT_TYPE_SCRIPT,
               INPUT_TYPE_LDAP)

INVENTORY_DISPLAY_CHOICES = ('General', 'Operating System', 'Hardware',
                             'User and Location', 'Purchasing',
                             'Extension Attributes')
DEFAULT_INVENTORY_DISPLAY = 'Extension Attributes'

PLATFORMS = ('Mac', 'Windows')
WINDOWS_SCRIPTING_LANGUAGES = ('VBScript', 'Batch File', 'PowerShell')
RECON_DISPLAY_CHOICES = ('Computer', 'User and Location', 'Purchasing',
                         'Extension Attributes')

DATE_VALUE = re.compile(r'^\d{4}(-\d\d){2} (\d\d:){2}\d\d$')


class ExtensionAttribute(JSSObject):
    """Abstract base for extension attribute definitions.

    Subclasses limit the input types they allow with input_types.

    """
    input_types = (INPUT_TYPE_FIELD, INPUT_TYPE_POPUP, INPUT_TYPE_LDAP)
    inventory_display_choices = INVENTORY_DISPLAY_CHOICES

    def new(self, name, **kwargs):
        if 'data_type' in kwargs:
            self.set_data_type(kwargs['data_type'])
        if 'popup_choices' in kwargs:
            self.set_popup_choices(kwargs['popup_choices'])

    def _load(self):
        super(ExtensionAttribute, self)._load()
        self.description = self.data.get('description')
        self.data_type = self.data.get('data_type') or DATA_TYPE_STRING
        self.inventory_display = (self.data.get('inventory_display') or
                                  DEFAULT_INVENTORY_DISPLAY)
        input_type = self.data.get('input_type') or {}
        self.input_type = input_type.get('type') or INPUT_TYPE_FIELD
        self.popup_choices = [str(choice) for choice in as_list(
            input_type.get('popup_choices'), 'choice')]

    @property
    def from_text_field(self):
        return self.input_type == INPUT_TYPE_FIELD

    @property
    def from_popup_menu(self):
        return self.input_type == INPUT_TYPE_POPUP

    @property
    def from_ldap(self):
        return self.input_type == INPUT_TYPE_LDAP

    @property
    def from_script(self):
        return self.input_type == INPUT_TYPE_SCRIPT

    def _set(self, attr, value):
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        self.should_update()

    def set_description(self, description):
        self._set('description', description)

    def set_data_type(self, data_type):
        if data_type not in DATA_TYPES:
            raise InvalidDataError("data_type must be one of: %s" %
                                   ', '.join(DATA_TYPES))
        self._set('data_type', data_type)

    def set_inventory_display(self, display):
        if display not in self.inventory_display_choices:
            raise InvalidDataError("inventory_display must be one of: %s" %
                                   ', '.join(self.inventory_display_choices))
        self._set('inventory_display', display)

    def set_input_type(self, input_type):
        if input_type not in self.input_types:
            raise InvalidDataError("input_type must be one of: %s" %
                                   ', '.join(self.input_types))
        if input_type != INPUT_TYPE_POPUP:
            self.popup_choices = []
        self._set('input_type', input_type)

    def set_popup_choices(self, choices):
        """Set the menu choices, which also makes this a popup menu.

        Choices must suit the data type; dates are 'YYYY-MM-DD hh:mm:ss'.

        """
        if not isinstance(choices, (list, tuple)):
            raise InvalidDataError("popup_choices must be a list")
        checked = []
        for choice in choices:
            choice = str(choice).strip()
            if self.data_type == DATA_TYPE_DATE and not DATE_VALUE.match(
                    choice):
                raise InvalidDataError("data_type is Date, but '%s' is not "
                                       "formatted 'YYYY-MM-DD hh:mm:ss'" %
                                       choice)
            if self.data_type == DATA_TYPE_INTEGER and not re.match(
                    r'^\d+$', choice):
                raise InvalidDataError("data_type is Integer, but '%s' is "
                                       "not one" % choice)
            checked.append(choice)
        self._set('input_type', INPUT_TYPE_POPUP)
        self._set('popup_choices', checked)

    def _check_popup(self):
        if self.from_popup_menu and not self.popup_choices:
            raise MissingDataError("No popup_choices set for Pop-up Menu "
                                   "input_type.")

    def create(self):
        self._check_popup()
        return super(ExtensionAttribute, self).create()

    def update(self):
        self._check_popup()
        return super(ExtensionAttribute, self).update()

    def input_type_element(self):
        input_type = ElementTree.Element('input_type')
        add_text(input_type, 'type', self.input_type)
        if self.from_popup_menu:
            choices = ElementTree.SubElement(input_type, 'popup_choices')
            for choice in self.popup_choices:
                add_text(choices, 'choice', choice)
        return input_type

    def rest_element(self):
        root = super(ExtensionAttribute, self).rest_element()
        add_text(root, 'description', self.description)
        add_text(root, 'data_type', self.data_type)
        add_text(root, 'inventory_display', self.inventory_display)
        root.append(self.input_type_element())
        return root


class ComputerExtensionAttribute(ExtensionAttribute):
    """Computer EAs may also come from a script run at inventory."""
    _url = 'computerextensionattributes'
    container = 'computer_extension_attributes'
    list_type = 'computer_extension_attribute'
    input_types = (INPUT_TYPE_FIELD, INPUT_TYPE_POPUP, INPUT_TYPE_SCRIPT)

    def _load(self):
        super(ComputerExtensionAttribute, self)._load()
        input_type = self.data.get('input_type') or {}
        self.script = input_type.get('script')
        self.platform = input_type.get('platform')
        self.scripting_language = input_type.get('scripting_language')
        self.recon_display = self.data.get('recon_display')

    def _clear_script(self):
        self.script = None
        self.platform = None
        self.scripting_language = None

    def set_input_type(self, input_type):
        super(ComputerExtensionAttribute, self).set_input_type(input_type)
        if input_type != INPUT_TYPE_SCRIPT:
            self._clear_script()

    def set_popup_choices(self, choices):
        super(ComputerExtensionAttribute, self).set_popup_choices(choices)
        self._clear_script()

    def set_script(self, script, platform='Mac', scripting_language=None):
        """Make this a script EA. Windows scripts need a language."""
        if platform not in PLATFORMS:
            raise InvalidDataError("platform must be one of: %s" %
                                   ', '.join(PLATFORMS))
        if platform == 'Windows':
            if scripting_language not in WINDOWS_SCRIPTING_LANGUAGES:
                raise InvalidDataError(
                    "Scripting language must be one of: %s" %
                    ', '.join(WINDOWS_SCRIPTING_LANGUAGES))
        else:
            scripting_language = None
        if not script or not str(script).strip():
            raise InvalidDataError("The script can't be empty")
        self.popup_choices = []
        self._set('input_type', INPUT_TYPE_SCRIPT)
        self._set('script', script)
        self._set('platform', platform)
        self._set('scripting_language', scripting_language)

    def set_recon_display(self, display):
        if display not in RECON_DISPLAY_CHOICES:
            raise InvalidDataError("recon_display must be one of: %s" %
                                   ', '.join(RECON_DISPLAY_CHOICES))
        self._set('recon_display', display)

    def input_type_element(self):
        input_type = super(ComputerExtensionAttribute,
                           self).input_type_element()
        if self.from_script:
            add_text(input_type, 'script', self.script)
            add_text(input_type, 'platform', self.platform)
            if self.scripting_language:
                add_text(input_type, 'scripting_language',
                         self.scripting_language)
        return input_type

    def rest_element(self):
        root = super(ComputerExtensionAttribute, self).rest_element()
        if self.recon_display:
            add_text(root, 'recon_display', self.recon_display)
        return root


class MobileDeviceExtensionAttribute(ExtensionAttribute):
    _url = 'mobiledeviceextensionattributes'
    container = 'mobile_device_extension_attributes'
    list_type = 'mobile_device_extension_attribute'
    inventory_display_choices = tuple(
        choice for choice in INVENTORY_DISPLAY_CHOICES
        if choice != 'Operating System')


class UserExtensionAttribute(ExtensionAttribute):
    _url = 'userextensionattributes'
    container = 'user_extension_attributes'
    list_type = 'user_extension_attribute'
    input_types = (INPUT_TYPE_FIELD, INPUT_TYPE_POPUP)

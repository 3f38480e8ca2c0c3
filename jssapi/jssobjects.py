#!/usr/bin/env python
"""jssobjects.py

Classes representing the simpler JSS object types.
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

from .exceptions import (InvalidDataError, MissingDataError, NoSuchItemError,
                         UnsupportedError)
from .jssobject import JSSObject
from .mixins import Locatable, Purchasable, Sitable
from .scope import Scopable
from .tools import (add_text, as_list, bool_text, datetime_to_epoch,
                    epoch_to_datetime, parse_datetime, to_bool,
                    validate_bool, validate_priority)


class Account(JSSObject):
    """JSS user accounts. Read only.

    The API lists accounts and account groups together, so only the
    users are listed here.

    """
    _url = 'accounts'
    container = 'accounts'
    list_type = 'account'
    id_url = 'userid'
    can_put = False
    can_post = False
    can_delete = False
    search_types = {'name': 'name', 'username': 'name'}

    @classmethod
    def _fetch_list(cls, jss):
        data = jss.get(cls._url).get(cls.container) or {}
        return as_list(data.get('users'), 'user')

    @classmethod
    def all_groups(cls, jss):
        """Return the list data of account groups."""
        data = jss.get(cls._url).get(cls.container) or {}
        return as_list(data.get('groups'), 'group')

    def _load(self):
        super(Account, self)._load()
        self.full_name = self.data.get('full_name')
        self.email = self.data.get('email')
        self.access_level = self.data.get('access_level')
        self.privilege_set = self.data.get('privilege_set')
        self.privileges = self.data.get('privileges') or {}
        self.enabled = self.data.get('enabled')


class Building(JSSObject):
    _url = 'buildings'
    container = 'buildings'
    list_type = 'building'


class Department(JSSObject):
    _url = 'departments'
    container = 'departments'
    list_type = 'department'


class Site(JSSObject):
    _url = 'sites'
    container = 'sites'
    list_type = 'site'


class Category(JSSObject):
    """Categories group items in the JSS and in Self Service."""
    _url = 'categories'
    container = 'categories'
    list_type = 'category'
    MIN_PRIORITY = 1
    MAX_PRIORITY = 20
    DEFAULT_PRIORITY = 5

    def _load(self):
        super(Category, self)._load()
        priority = self.data.get('priority')
        self.priority = (int(priority) if priority not in (None, '')
                         else self.DEFAULT_PRIORITY)

    def new(self, name, **kwargs):
        if 'priority' in kwargs:
            self.set_priority(kwargs['priority'])

    def set_priority(self, priority):
        priority = validate_priority(priority, self.MIN_PRIORITY,
                                     self.MAX_PRIORITY)
        if priority == self.priority:
            return
        self.priority = priority
        self.should_update()

    def rest_element(self):
        root = super(Category, self).rest_element()
        add_text(root, 'priority', self.priority)
        return root


class PeripheralType(JSSObject):
    """A kind of peripheral, with up to 20 text or menu fields."""
    _url = 'peripheraltypes'
    container = 'peripheral_types'
    list_type = 'peripheral_type'
    FIELD_TYPES = ('text', 'menu')
    MAX_FIELDS = 20

    def _load(self):
        super(PeripheralType, self)._load()
        fields = sorted(as_list(self.data.get('fields'), 'field'),
                        key=lambda f: int(f.get('order') or 0))
        self.fields = []
        for field in fields:
            self.fields.append({
                'name': field.get('name'),
                'type': field.get('type') or 'text',
                'choices': list(as_list(field.get('choices'), 'choice'))})
        self._order_fields()

    def _order_fields(self):
        for index, field in enumerate(self.fields):
            field['order'] = index + 1

    def _field_ok(self, field):
        if not isinstance(field, dict):
            raise InvalidDataError("Fields must be dicts with 'name', 'type'"
                                   " and possibly 'choices'")
        if not field.get('name'):
            raise InvalidDataError("Fields require names")
        if field.get('type') not in self.FIELD_TYPES:
            raise InvalidDataError("Field type must be one of: %s" %
                                   ', '.join(self.FIELD_TYPES))
        if field['type'] == 'menu':
            choices = field.get('choices')
            if not isinstance(choices, (list, tuple)) or not all(
                    isinstance(c, str) for c in choices):
                raise InvalidDataError("Choices for menu fields must be a "
                                       "list of strings")
            field['choices'] = list(choices)
        else:
            field['choices'] = []
        return True

    def set_fields(self, fields):
        fields = list(fields)
        if len(fields) > self.MAX_FIELDS:
            raise InvalidDataError("A peripheral type can have a maximum of "
                                   "%s fields" % self.MAX_FIELDS)
        for field in fields:
            self._field_ok(field)
        self.fields = fields
        self._order_fields()
        self.should_update()

    def append_field(self, field):
        self._field_ok(field)
        self.fields.append(field)
        self._order_fields()
        self.should_update()

    def insert_field(self, order, field):
        """Insert field at order, which counts from 1."""
        self._field_ok(field)
        self.fields.insert(order - 1, field)
        self._order_fields()
        self.should_update()

    def delete_field(self, order):
        if not 1 <= order <= len(self.fields):
            raise NoSuchItemError("No field with order %s" % order)
        if len(self.fields) == 1:
            raise MissingDataError("Fields can't be empty")
        del self.fields[order - 1]
        self._order_fields()
        self.should_update()

    def rest_element(self):
        root = super(PeripheralType, self).rest_element()
        fields = ElementTree.SubElement(root, 'fields')
        for field in self.fields:
            field_element = ElementTree.SubElement(fields, 'field')
            add_text(field_element, 'order', field['order'])
            add_text(field_element, 'name', field['name'])
            add_text(field_element, 'type', field['type'])
            choices = ElementTree.SubElement(field_element, 'choices')
            for choice in field.get('choices') or []:
                add_text(choices, 'choice', choice)
        return root


class Peripheral(Locatable, Purchasable, Sitable, JSSObject):
    """A peripheral attached to a computer.

    Peripherals have no names. Make a new one with its type in place of
    the name: Peripheral(j, 'Printer').

    """
    _url = 'peripherals'
    container = 'peripherals'
    list_type = 'peripheral'
    main_subset = 'general'
    search_types = {}
    upload_types = {'attachment': 'peripherals'}

    def _validate_new_name(self, name):
        if name not in PeripheralType.all_names(self.jss, refresh=True):
            raise NoSuchItemError("No peripheral type '%s' in the JSS" % name)

    def new(self, name, **kwargs):
        self.type = name
        self._name = None

    def _load(self):
        super(Peripheral, self)._load()
        general = self.main_data
        self.type = general.get('type')
        self.bar_code_1 = general.get('bar_code_1')
        self.bar_code_2 = general.get('bar_code_2')
        self.computer_id = self._parse_id(general.get('computer_id'))
        self.fields = {f.get('name'): f.get('value')
                       for f in as_list(general.get('fields'), 'field')}
        self._field_defs = None

    @property
    def name(self):
        return None

    @name.setter
    def name(self, new_name):
        raise UnsupportedError("Peripherals don't have names.")

    def field_definitions(self):
        if self._field_defs is None:
            self._field_defs = PeripheralType.fetch(self.jss, self.type).fields
        return self._field_defs

    def set_field(self, field, value):
        """Set a field defined by the peripheral's type."""
        definitions = {f['name']: f for f in self.field_definitions()}
        if field not in definitions:
            raise InvalidDataError(
                "Peripherals of type '%s' don't have a field '%s', they only "
                "have: %s" % (self.type, field, ', '.join(definitions)))
        definition = definitions[field]
        if definition['type'] == 'menu' and value not in \
                definition['choices']:
            raise InvalidDataError("The value for field '%s' must be one of:"
                                   " %s" % (field,
                                            ', '.join(definition['choices'])))
        self.fields[field] = value
        self.should_update()

    def set_bar_code_1(self, value):
        self.bar_code_1 = value
        self.should_update()

    def set_bar_code_2(self, value):
        self.bar_code_2 = value
        self.should_update()

    def associate(self, computer):
        """Attach to a computer, by id or name."""
        from .computer import Computer
        computer_id = Computer.valid_id(self.jss, computer)
        if computer_id is None:
            raise NoSuchItemError("No computer in the JSS matching %s" %
                                  computer)
        self.computer_id = computer_id
        self.should_update()

    def disassociate(self):
        self.computer_id = None
        self.should_update()

    def rest_element(self):
        root = ElementTree.Element(self.list_type)
        general = ElementTree.SubElement(root, 'general')
        add_text(general, 'type', self.type)
        add_text(general, 'bar_code_1', self.bar_code_1)
        add_text(general, 'bar_code_2', self.bar_code_2)
        add_text(general, 'computer_id', self.computer_id)
        fields = ElementTree.SubElement(general, 'fields')
        for name, value in self.fields.items():
            field = ElementTree.SubElement(fields, 'field')
            add_text(field, 'name', name)
            add_text(field, 'value', value)
        self.add_site_to_xml(root)
        root.append(self.location_xml())
        if self.has_purchasing:
            root.append(self.purchasing_xml())
        return root


class RestrictedSoftware(Scopable, Sitable, JSSObject):
    """Software that is not allowed to run on scoped computers."""
    _url = 'restrictedsoftware'
    container = 'restricted_software'
    list_type = 'restricted_software'
    main_subset = 'general'
    flags = ('match_exact_process_name', 'send_notification', 'kill_process',
             'delete_executable')

    def _load(self):
        super(RestrictedSoftware, self)._load()
        general = self.main_data
        self.process_name = general.get('process_name')
        self.display_message = general.get('display_message')
        for flag in self.flags:
            setattr(self, flag, to_bool(general.get(flag)))

    def set_process_name(self, value):
        self.process_name = str(value)
        self.should_update()

    def set_display_message(self, value):
        self.display_message = str(value)
        self.should_update()

    def set_flag(self, flag, value):
        """Set one of match_exact_process_name, send_notification,
        kill_process or delete_executable.

        """
        if flag not in self.flags:
            raise InvalidDataError("flag must be one of: %s" %
                                   ', '.join(self.flags))
        validate_bool(value, flag)
        setattr(self, flag, value)
        self.should_update()

    def create(self):
        if not self.process_name:
            raise MissingDataError("process_name must be set before "
                                   "creating")
        return super(RestrictedSoftware, self).create()

    def update(self):
        if not self.process_name:
            raise MissingDataError("process_name must be set before "
                                   "updating")
        return super(RestrictedSoftware, self).update()

    def rest_element(self):
        root = super(RestrictedSoftware, self).rest_element()
        general = root.find('general')
        add_text(general, 'process_name', self.process_name)
        for flag in self.flags:
            add_text(general, flag, bool_text(getattr(self, flag)))
        add_text(general, 'display_message', self.display_message or '')
        self.add_site_to_xml(root)
        root.append(self.scope.scope_xml())
        return root


class DockItem(JSSObject):
    _url = 'dockitems'
    container = 'dock_items'
    list_type = 'dock_item'
    DOCK_ITEM_TYPES = ('App', 'File', 'Folder')

    def _load(self):
        super(DockItem, self)._load()
        self.type = self.data.get('type') or 'App'
        self.path = self.data.get('path')

    def set_type(self, value):
        if value not in self.DOCK_ITEM_TYPES:
            raise InvalidDataError("Type must be one of: %s" %
                                   ', '.join(self.DOCK_ITEM_TYPES))
        self.type = value
        self.should_update()

    def set_path(self, value):
        if not isinstance(value, str):
            raise InvalidDataError("Path must be a string")
        self.path = value
        self.should_update()

    def rest_element(self):
        root = super(DockItem, self).rest_element()
        add_text(root, 'type', self.type)
        add_text(root, 'path', self.path or '')
        return root


class Printer(JSSObject):
    """CUPS printers that policies map onto computers."""
    _url = 'printers'
    container = 'printers'
    list_type = 'printer'
    TEXT_FIELDS = ('uri', 'CUPS_name', 'location', 'model', 'info', 'notes',
                   'ppd', 'ppd_path', 'os_requirements')
    BOOL_FIELDS = ('shared', 'make_default', 'use_generic')

    def new(self, name, **kwargs):
        for key in self.TEXT_FIELDS:
            if kwargs.get(key) is not None:
                self.set_field(key, kwargs[key])
        for key in self.BOOL_FIELDS:
            if key in kwargs:
                self.set_field(key, kwargs[key])

    def _load(self):
        super(Printer, self)._load()
        for key in self.TEXT_FIELDS:
            setattr(self, key, self.data.get(key))
        for key in self.BOOL_FIELDS:
            setattr(self, key, to_bool(self.data.get(key)))

    def set_field(self, key, value):
        if key in self.BOOL_FIELDS:
            validate_bool(value, key)
        elif key in self.TEXT_FIELDS:
            if not isinstance(value, str):
                raise InvalidDataError("%s must be a string" % key)
        else:
            raise InvalidDataError("Printers have no field '%s'" % key)
        if getattr(self, key) == value:
            return
        setattr(self, key, value)
        self.should_update()

    def rest_element(self):
        if not self.uri or not self.CUPS_name:
            raise MissingDataError("Printers need a uri and a CUPS_name")
        root = super(Printer, self).rest_element()
        for key in self.TEXT_FIELDS:
            add_text(root, key, getattr(self, key) or '')
        for key in self.BOOL_FIELDS:
            add_text(root, key, bool_text(getattr(self, key)))
        return root


class NetbootServer(JSSObject):
    _url = 'netbootservers'
    container = 'netboot_servers'
    list_type = 'netboot_server'
    PROTOCOLS = ('nfs', 'http')

    def _load(self):
        super(NetbootServer, self)._load()
        self.ip_address = self.data.get('ip_address')
        self.boot_args = self.data.get('boot_args')
        self.boot_file = self.data.get('boot_file')
        self.boot_device = self.data.get('boot_device')
        self.image = self.data.get('image')
        self.protocol = self.data.get('protocol') or 'nfs'
        self.default_image = to_bool(self.data.get('default_image'))
        self.target_platform = self.data.get('target_platform')

    def set_ip_address(self, value):
        self.ip_address = value
        self.should_update()

    def set_protocol(self, value):
        if value not in self.PROTOCOLS:
            raise InvalidDataError("protocol must be one of: %s" %
                                   ', '.join(self.PROTOCOLS))
        self.protocol = value
        self.should_update()

    def set_default_image(self, value):
        validate_bool(value, 'default_image')
        self.default_image = value
        self.should_update()

    def rest_element(self):
        root = super(NetbootServer, self).rest_element()
        for field in ('ip_address', 'boot_args', 'boot_file', 'boot_device',
                      'image', 'protocol', 'target_platform'):
            add_text(root, field, getattr(self, field))
        add_text(root, 'default_image', bool_text(self.default_image))
        return root


class ComputerInvitation(JSSObject):
    """Invitations to enroll computers. They can't be changed once made."""
    _url = 'computerinvitations'
    container = 'computer_invitations'
    list_type = 'computer_invitation'
    can_put = False
    search_types = {'name': 'name', 'invitation': 'invitation'}
    INVITATION_TYPES = ('DEFAULT', 'USER_INITIATED_EMAIL',
                        'USER_INITIATED_URL')

    def _load(self):
        super(ComputerInvitation, self)._load()
        self.invitation = self.data.get('invitation')
        self.invitation_type = self.data.get('invitation_type') or 'DEFAULT'
        self.expiration_date = epoch_to_datetime(
            self.data.get('expiration_date_epoch'))
        self.ssh_username = self.data.get('ssh_username')
        self.ssh_password = None
        self.multiple_users_allowed = to_bool(
            self.data.get('multiple_users_allowed'))
        self.times_used = self.data.get('times_used')

    def new(self, name, **kwargs):
        invitation_type = kwargs.get('invitation_type', 'DEFAULT')
        if invitation_type not in self.INVITATION_TYPES:
            raise InvalidDataError("invitation_type must be one of: %s" %
                                   ', '.join(self.INVITATION_TYPES))
        self.invitation_type = invitation_type
        if kwargs.get('expiration_date'):
            self.expiration_date = parse_datetime(kwargs['expiration_date'])
        self.ssh_username = kwargs.get('ssh_username')
        self.ssh_password = kwargs.get('ssh_password')
        self.multiple_users_allowed = validate_bool(
            kwargs.get('multiple_users_allowed', False),
            'multiple_users_allowed')

    def rest_element(self):
        root = super(ComputerInvitation, self).rest_element()
        add_text(root, 'invitation_type', self.invitation_type)
        add_text(root, 'expiration_date_epoch',
                 datetime_to_epoch(self.expiration_date)
                 if self.expiration_date else None)
        add_text(root, 'ssh_username', self.ssh_username)
        add_text(root, 'ssh_password', self.ssh_password)
        add_text(root, 'multiple_users_allowed',
                 bool_text(self.multiple_users_allowed))
        return root


class DiskEncryptionConfiguration(JSSObject):
    """FileVault configurations. These can't be created by the API."""
    _url = 'diskencryptionconfigurations'
    container = 'disk_encryption_configurations'
    list_type = 'disk_encryption_configuration'
    can_post = False
    upload_types = {'recovery_key': 'diskencryptionconfigurations'}
    KEY_TYPES = {'individual': 'Individual',
                 'institutional': 'Institutional',
                 'individual_and_institutional':
                     'Individual and Institutional'}
    ENABLED_USERS_TYPES = {'management': 'Management Account',
                           'current': 'Current or Next User'}

    def _load(self):
        super(DiskEncryptionConfiguration, self)._load()
        self.key_type = self.data.get('key_type')
        self.file_vault_enabled_users = self.data.get(
            'file_vault_enabled_users')
        self.institutional_recovery_key = self.data.get(
            'institutional_recovery_key')

    def set_file_vault_enabled_users(self, value):
        if value not in self.ENABLED_USERS_TYPES:
            raise InvalidDataError("file_vault_enabled_users must be one of:"
                                   " %s" %
                                   ', '.join(sorted(self.ENABLED_USERS_TYPES)))
        self.file_vault_enabled_users = self.ENABLED_USERS_TYPES[value]
        self.should_update()

    def rest_element(self):
        if self.key_type == self.KEY_TYPES['individual_and_institutional']:
            raise UnsupportedError("Key type 'Individual and Institutional' "
                                   "can't be saved through the API.")
        root = super(DiskEncryptionConfiguration, self).rest_element()
        add_text(root, 'key_type', self.key_type)
        add_text(root, 'file_vault_enabled_users',
                 self.file_vault_enabled_users)
        return root


class ComputerReport(JSSObject):
    """Saved computer reports. Read only."""
    _url = 'computerreports'
    container = 'computer_reports'
    list_type = 'computer_reports'
    can_put = False
    can_post = False
    can_delete = False

    @property
    def rows(self):
        """Return a list of dicts, one per computer in the report."""
        return [dict(row) for row in as_list(
            self.data.get('computer') or self.data.get('computers'),
            'computer')]


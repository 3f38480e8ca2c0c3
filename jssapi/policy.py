#!/usr/bin/env python
"""policy.py

Policies: what computers run, when, and with which packages and scripts.
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

from .exceptions import InvalidDataError, MissingDataError, NoSuchItemError
from .jssobject import JSSObject
from .mixins import Categorizable, Sitable
from .scope import Scopable
from .self_service import SelfServable
from .tools import (add_list, add_text, as_list, bool_text, datetime_to_epoch,
                    epoch_to_datetime, parse_datetime, to_bool, validate_bool,
                    validate_integer)


logger = logging.getLogger(__name__)

FREQUENCIES = {'ongoing': 'Ongoing',
               'once_per_computer': 'Once per computer',
               'once_per_user': 'Once per user',
               'once_per_user_per_computer': 'Once per user per computer',
               'daily': 'Once every day',
               'weekly': 'Once every week',
               'monthly': 'Once every month'}

RETRY_EVENTS = {'none': 'none',
                'trigger': 'trigger',
                'checkin': 'check-in'}

RESTART_WHEN = {
    'if_pkg_requires': 'Restart if a package or update requires it',
    'now': 'Restart immediately',
    'delayed': 'Restart',
    'dont': 'Do not restart'}

RESTART_DISKS = {'current': 'Current Startup Disk',
                 'selected': 'Currently Selected Startup Disk (No Bless)',
                 'netboot': 'NetBoot',
                 'os_installer': 'inPlaceOSUpgradeDirectory'}

STARTUP_DISK_VOLUME = 'Specify Local Startup Disk'

MGMT_ACCOUNT_ACTIONS = {'no_change': 'doNotChange',
                        'change_pw': 'specified',
                        'generate_pw': 'random',
                        'enable_fv2': 'fileVaultEnable',
                        'disable_fv2': 'fileVaultDisable',
                        'reset_random': 'resetRandom',
                        'reset_pw': 'reset'}

DISK_ENCRYPTION_ACTIONS = {'apply': 'apply',
                           'remediate': 'remediate',
                           'none': 'none'}

PRINTER_ACTIONS = {'map': 'install', 'unmap': 'uninstall'}

DOCK_ITEM_ACTIONS = {'add_start': 'Add To Beginning',
                     'add_end': 'Add To End',
                     'remove': 'Remove'}

PACKAGE_ACTIONS = {'install': 'Install',
                   'remove': 'Uninstall',
                   'cache': 'Cache',
                   'install_cache': 'Install Cached'}

SCRIPT_PRIORITIES = {'pre': 'Before',
                     'before': 'Before',
                     'post': 'After',
                     'after': 'After',
                     'reboot': 'At Reboot'}
SCRIPT_PARAMETERS = range(4, 12)

TRIGGER_EVENTS = {'startup': 'trigger_startup',
                  'login': 'trigger_login',
                  'logout': 'trigger_logout',
                  'checkin': 'trigger_checkin',
                  'network_state': 'trigger_network_state_changed',
                  'enrollment': 'trigger_enrollment_complete',
                  'custom': 'trigger_other'}

MAINTENANCE_TASKS = ('recon', 'reset_name', 'install_all_cached_packages',
                     'heal', 'prebindings', 'permissions', 'byhost',
                     'system_cache', 'user_cache', 'verify')

FILES_PROCESSES_FIELDS = ('search_by_path', 'delete_file', 'locate_file',
                          'update_locate_database', 'spotlight_search',
                          'search_for_process', 'kill_process',
                          'run_command')

LOG_FLUSH_RSRC = 'logflush'
LOG_FLUSH_INTERVAL_INTEGERS = {0: 'Zero', 1: 'One', 2: 'Two', 3: 'Three',
                               6: 'Six'}
LOG_FLUSH_INTERVAL_PERIODS = {'day': 'Days', 'days': 'Days',
                              'week': 'Weeks', 'weeks': 'Weeks',
                              'month': 'Months', 'months': 'Months',
                              'year': 'Years', 'years': 'Years'}


def _choice(value, choices, field):
    """Return the JSS string for value, a key or value of choices."""
    if value in choices:
        return choices[value]
    if value in choices.values():
        return value
    raise InvalidDataError("%s must be one of: %s" %
                           (field, ', '.join(sorted(choices))))


def _list_position(items, position):
    if position in ('end', -1, None):
        return len(items)
    if position == 'start':
        return 0
    try:
        return int(position)
    except (TypeError, ValueError):
        raise InvalidDataError("position must be 'start', 'end' or an "
                               "integer")


class Policy(Scopable, SelfServable, Categorizable, Sitable, JSSObject):
    """A policy, run by computers in scope when triggered.

    Packages and scripts are kept as lists of dicts, in the order they
    run. The maintenance, files and processes, and trigger settings are
    kept as dicts keyed by their JSS element names.

    """
    _url = 'policies'
    container = 'policies'
    list_type = 'policy'
    main_subset = 'general'
    upload_types = {'icon': 'policies'}
    scope_target_key = 'computers'
    self_service_config = {
        'in_self_service_data_path': ('self_service', 'use_for_self_service'),
        'in_self_service': True,
        'not_in_self_service': False,
        'targets': ('macos',),
        'payload': 'policy',
        'can_display_in_categories': True,
        'can_feature_in_categories': True}

    def new(self, name, **kwargs):
        """Set up a new policy.

        kwargs:
            enabled:    Bool, defaults to True.
            frequency:  A FREQUENCIES key or value.
            category:   A category name or id.

        """
        self.enabled = validate_bool(kwargs.get('enabled', True), 'enabled')
        if 'frequency' in kwargs:
            self.frequency = _choice(kwargs['frequency'], FREQUENCIES,
                                     'frequency')
        self.maintenance['recon'] = True
        if kwargs.get('category'):
            self.set_category(kwargs['category'])

    def _load(self):
        super(Policy, self)._load()
        general = self.main_data
        self.enabled = to_bool(general.get('enabled'))
        self.frequency = general.get('frequency') or FREQUENCIES[
            'once_per_computer']
        self.retry_event = general.get('retry_event') or 'none'
        self.retry_attempts = general.get('retry_attempts', -1)
        self.notify_failed_retries = to_bool(
            general.get('notify_on_each_failed_retry'))
        self.target_drive = general.get('target_drive') or '/'
        self.offline = to_bool(general.get('offline'))
        self.trigger_events = {}
        for key in TRIGGER_EVENTS.values():
            if key == 'trigger_other':
                self.trigger_events[key] = general.get(key) or ''
            else:
                self.trigger_events[key] = to_bool(general.get(key))

        limits = general.get('date_time_limitations') or {}
        self.server_side_limitations = {
            'activation': epoch_to_datetime(
                limits.get('activation_date_epoch')),
            'expiration': epoch_to_datetime(
                limits.get('expiration_date_epoch'))}

        maintenance = self.data.get('maintenance') or {}
        self.maintenance = {task: to_bool(maintenance.get(task))
                            for task in MAINTENANCE_TASKS}
        files_processes = self.data.get('files_processes') or {}
        self.files_processes = {field: files_processes.get(field)
                                for field in FILES_PROCESSES_FIELDS}

        self.packages = [dict(pkg) for pkg in as_list(
            (self.data.get('package_configuration') or {}).get('packages'),
            'package')]
        self.scripts = [dict(script) for script in as_list(
            self.data.get('scripts'), 'script')]

        account_maintenance = self.data.get('account_maintenance') or {}
        self.directory_bindings = [dict(binding) for binding in as_list(
            account_maintenance.get('directory_bindings'), 'binding')]
        self.management_account = dict(account_maintenance.get(
            'management_account') or {'action': MGMT_ACCOUNT_ACTIONS[
                'no_change']})
        interaction = self.data.get('user_interaction') or {}
        self.user_message_start = interaction.get('message_start') or ''
        self.user_message_end = interaction.get('message_finish') or ''
        self.reboot_options = dict(self.data.get('reboot') or {})
        for key in ('user_logged_in', 'no_user_logged_in'):
            self.reboot_options.setdefault(key, RESTART_WHEN['dont'])
        self.dock_items = [dict(item) for item in as_list(
            self.data.get('dock_items'), 'dock_item')]
        # The printers element also holds size and leave_existing_default.
        self.printers = [dict(printer) for printer in as_list(
            self.data.get('printers'), 'printer')
            if isinstance(printer, dict) and printer.get('id')]
        self.disk_encryption = dict(self.data.get('disk_encryption') or {
            'action': DISK_ENCRYPTION_ACTIONS['none']})

    # General ##############################################################

    def set_enabled(self, value):
        validate_bool(value, 'enabled')
        if value == self.enabled:
            return
        self.enabled = value
        self.should_update()

    def enable(self):
        self.set_enabled(True)

    def disable(self):
        self.set_enabled(False)

    def set_frequency(self, frequency):
        """Set the frequency to a FREQUENCIES key or value."""
        frequency = _choice(frequency, FREQUENCIES, 'frequency')
        if frequency == self.frequency:
            return
        self.frequency = frequency
        self.should_update()

    def set_retry_event(self, event, attempts=None):
        """Set when a failed once-per-computer policy is retried."""
        event = _choice(event, RETRY_EVENTS, 'retry event')
        if event != 'none' and self.frequency != FREQUENCIES[
                'once_per_computer']:
            raise InvalidDataError("Retries are only available for policies "
                                   "run once per computer.")
        if attempts is None:
            attempts = -1 if event == 'none' else 1
        self.retry_event = event
        self.retry_attempts = attempts
        self.should_update()

    def set_notify_failed_retries(self, value):
        """Set whether each failed retry notifies administrators."""
        validate_bool(value, 'notify_failed_retries')
        if self.frequency != FREQUENCIES['once_per_computer']:
            raise InvalidDataError("Retries are only available for policies "
                                   "run once per computer.")
        if value == self.notify_failed_retries:
            return
        self.notify_failed_retries = value
        self.should_update()

    def set_target_drive(self, path):
        if not str(path).startswith('/'):
            raise InvalidDataError("Path to target drive must be absolute")
        self.target_drive = str(path)
        self.should_update()

    def set_offline(self, value):
        validate_bool(value, 'offline')
        self.offline = value
        self.should_update()

    def set_trigger_event(self, event, value):
        """Turn a trigger event on or off.

        event is a TRIGGER_EVENTS key. The 'custom' event takes the
        name of the custom trigger; the others take a bool.

        """
        if event not in TRIGGER_EVENTS:
            raise InvalidDataError("Trigger type must be one of %s" %
                                   ', '.join(sorted(TRIGGER_EVENTS)))
        if event == 'custom':
            if not isinstance(value, str):
                raise InvalidDataError("Custom triggers must be strings")
        else:
            validate_bool(value, 'trigger event')
        self.trigger_events[TRIGGER_EVENTS[event]] = value
        self.should_update()

    def set_server_side_activation(self, value):
        """Set the date the policy becomes active, or None."""
        self.server_side_limitations['activation'] = parse_datetime(value)
        self.should_update()

    def set_server_side_expiration(self, value):
        """Set the date the policy expires, or None."""
        self.server_side_limitations['expiration'] = parse_datetime(value)
        self.should_update()

    def set_recon(self, state=True):
        validate_bool(state, 'recon')
        self.set_maintenance('recon', state)

    def set_maintenance(self, task, state):
        if task not in MAINTENANCE_TASKS:
            raise InvalidDataError("Maintenance task must be one of %s" %
                                   ', '.join(MAINTENANCE_TASKS))
        validate_bool(state, task)
        if self.maintenance[task] == state:
            return
        self.maintenance[task] = state
        self.should_update()

    # Files and processes ##################################################

    def _set_files_processes(self, **values):
        self.files_processes.update(values)
        self.should_update()

    @property
    def run_command(self):
        return self.files_processes.get('run_command')

    def set_run_command(self, command):
        if not isinstance(command, str):
            raise InvalidDataError("Command to run must be a string")
        self._set_files_processes(run_command=command)

    def set_update_locate_database(self, value):
        self._set_files_processes(update_locate_database=bool(value))

    def set_search_for_process(self, process, kill=False):
        self._set_files_processes(search_for_process=str(process),
                                  kill_process=bool(kill))

    def set_search_by_path(self, path, delete=False):
        self._set_files_processes(search_by_path=str(path),
                                  delete_file=bool(delete))

    def set_spotlight_search(self, term):
        if not isinstance(term, str):
            raise InvalidDataError("Spotlight search term must be a string")
        self._set_files_processes(spotlight_search=term)

    def set_locate_file(self, term):
        if not isinstance(term, str):
            raise InvalidDataError("Term to locate must be a string")
        self._set_files_processes(locate_file=term)

    # Packages #############################################################

    @property
    def package_ids(self):
        return [int(pkg['id']) for pkg in self.packages]

    @property
    def package_names(self):
        return [pkg.get('name') for pkg in self.packages]

    def add_package(self, pkg, position='end', action='install', feu=False,
                    fut=False, update_autorun=False):
        """Add a package by name, id or Package object.

        Returns False if it was already in the policy.

        """
        from .package import Package
        if isinstance(pkg, JSSObject):
            pkg = pkg.id
        pkg_id = Package.valid_id(self.jss, pkg)
        if pkg_id is None:
            raise NoSuchItemError("No package matches '%s'" % pkg)
        if pkg_id in self.package_ids:
            return False
        action = _choice(action, PACKAGE_ACTIONS, 'action')
        for flag, value in (('feu', feu), ('fut', fut),
                            ('update_autorun', update_autorun)):
            validate_bool(value, flag)
        self.packages.insert(_list_position(self.packages, position), {
            'id': pkg_id,
            'name': Package.map_all_ids_to(self.jss, 'name')[pkg_id],
            'action': action,
            'feu': feu,
            'fut': fut,
            'update_autorun': update_autorun})
        self.should_update()
        return True

    def remove_package(self, pkg):
        """Remove a package by name or id. Returns whether it was there."""
        return self._remove_item(self.packages, pkg)

    def _remove_item(self, items, ident):
        if isinstance(ident, JSSObject):
            ident = ident.id
        wanted = str(ident).lower()
        remaining = [item for item in items
                     if wanted not in (str(item.get('id')),
                                       str(item.get('name')).lower())]
        if len(remaining) == len(items):
            return False
        items[:] = remaining
        self.should_update()
        return True

    # Scripts ##############################################################

    @property
    def script_ids(self):
        return [int(script['id']) for script in self.scripts]

    @property
    def script_names(self):
        return [script.get('name') for script in self.scripts]

    def add_script(self, script, position='end', priority='after',
                   **parameters):
        """Add a script by name, id or Script object.

        Parameters are given as parameter4=... through parameter11=...
        Returns False if it was already in the policy.

        """
        from .script import Script
        if isinstance(script, JSSObject):
            script = script.id
        script_id = Script.valid_id(self.jss, script)
        if script_id is None:
            raise NoSuchItemError("No script matches '%s'" % script)
        if script_id in self.script_ids:
            return False
        priority = _choice(priority, SCRIPT_PRIORITIES, 'priority')
        script_data = {
            'id': script_id,
            'name': Script.map_all_ids_to(self.jss, 'name')[script_id],
            'priority': priority}
        for key, value in parameters.items():
            script_data[self._parameter_key(key)] = value
        self.scripts.insert(_list_position(self.scripts, position),
                            script_data)
        self.should_update()
        return True

    def remove_script(self, script):
        return self._remove_item(self.scripts, script)

    @staticmethod
    def _parameter_key(param):
        """Return 'parameterN' for N, 'N' or 'parameterN'."""
        number = str(param).replace('parameter', '')
        if not number.isdigit() or int(number) not in SCRIPT_PARAMETERS:
            raise InvalidDataError("Script parameters are numbered 4 to 11,"
                                   " not %s" % param)
        return 'parameter%s' % number

    def set_script_parameter(self, script, param, value):
        """Set a parameter (4 to 11) passed to a script in this policy."""
        key = self._parameter_key(param)
        if isinstance(script, JSSObject):
            script = script.id
        wanted = str(script).lower()
        for script_data in self.scripts:
            if wanted in (str(script_data.get('id')),
                          str(script_data.get('name')).lower()):
                script_data[key] = value
                self.should_update()
                return
        raise NoSuchItemError("Script '%s' is not in this policy" % script)

    # Reboot and user interaction ##########################################

    def set_user_logged_in(self, option):
        """Set what happens at reboot with a user logged in.

        option is a RESTART_WHEN key or value.

        """
        self._set_reboot_option(
            'user_logged_in', _choice(option, RESTART_WHEN, 'user_logged_in'))

    def set_no_user_logged_in(self, option):
        self._set_reboot_option(
            'no_user_logged_in',
            _choice(option, RESTART_WHEN, 'no_user_logged_in'))

    def do_not_reboot(self):
        self.set_user_logged_in('dont')
        self.set_no_user_logged_in('dont')

    def set_reboot_message(self, message):
        if not isinstance(message, str):
            raise InvalidDataError("Reboot message must be a string")
        self._set_reboot_option('message', message)

    def set_minutes_until_reboot(self, minutes):
        minutes = validate_integer(minutes, 'minutes_until_reboot')
        if minutes < 0:
            raise InvalidDataError("minutes_until_reboot can't be negative")
        self._set_reboot_option('minutes_until_reboot', minutes)

    def set_file_vault_2_reboot(self, value):
        validate_bool(value, 'file_vault_2_reboot')
        self._set_reboot_option('file_vault_2_reboot', value)

    def set_startup_disk(self, disk):
        """Set the disk to restart to.

        disk is a RESTART_DISKS key or value, or the name of a local
        volume.

        """
        if not isinstance(disk, str) or not disk:
            raise InvalidDataError("Startup disk must be a string")
        if disk in RESTART_DISKS or disk in RESTART_DISKS.values():
            self._set_reboot_option('startup_disk',
                                    _choice(disk, RESTART_DISKS,
                                            'startup disk'))
            self.reboot_options.pop('specify_startup', None)
        else:
            self._set_reboot_option('startup_disk', STARTUP_DISK_VOLUME)
            self._set_reboot_option('specify_startup', disk)

    def _set_reboot_option(self, key, value):
        if self.reboot_options.get(key) == value:
            return
        self.reboot_options[key] = value
        self.should_update()

    def set_user_message_start(self, message):
        if not isinstance(message, str):
            raise InvalidDataError("User message must be a string")
        if message != self.user_message_start:
            self.user_message_start = message
            self.should_update()

    def set_user_message_end(self, message):
        if not isinstance(message, str):
            raise InvalidDataError("User message must be a string")
        if message != self.user_message_end:
            self.user_message_end = message
            self.should_update()

    # Account maintenance ##################################################

    @property
    def directory_binding_ids(self):
        return [int(binding['id']) for binding in self.directory_bindings]

    def add_directory_binding(self, binding, position='end'):
        """Add a directory binding by name, id or DirectoryBinding.

        Returns False if it was already in the policy.

        """
        from .directory_binding import DirectoryBinding
        binding_id, name = self._resolve(DirectoryBinding, binding,
                                         'directory binding')
        if binding_id in self.directory_binding_ids:
            return False
        self.directory_bindings.insert(
            _list_position(self.directory_bindings, position),
            {'id': binding_id, 'name': name})
        self.should_update()
        return True

    def remove_directory_binding(self, binding):
        return self._remove_item(self.directory_bindings, binding)

    def set_management_account(self, action, password=None,
                               password_length=None):
        """Set what the policy does to the management account.

        action is a MGMT_ACCOUNT_ACTIONS key. 'change_pw' and 'reset_pw'
        need a password; 'generate_pw' and 'reset_random' need a
        password_length.

        """
        if action not in MGMT_ACCOUNT_ACTIONS:
            raise InvalidDataError("Action must be one of: %s" %
                                   ', '.join(sorted(MGMT_ACCOUNT_ACTIONS)))
        account = {'action': MGMT_ACCOUNT_ACTIONS[action]}
        if action in ('change_pw', 'reset_pw'):
            if password is None:
                raise MissingDataError("A password must be provided when "
                                       "changing the management password")
            account['managed_password'] = password
        elif action in ('generate_pw', 'reset_random'):
            if password_length is None:
                raise MissingDataError("password_length must be provided "
                                       "when setting a random password")
            account['managed_password_length'] = validate_integer(
                password_length, 'password_length')
        self.management_account = account
        self.should_update()

    # Printers and dock items ##############################################

    @property
    def printer_ids(self):
        return [int(printer['id']) for printer in self.printers]

    def add_printer(self, printer, action='map', make_default=False,
                    position='end'):
        """Map or unmap a printer by name, id or Printer object.

        Returns False if it was already in the policy.

        """
        from .jssobjects import Printer
        action = _choice(action, PRINTER_ACTIONS, 'printer action')
        validate_bool(make_default, 'make_default')
        printer_id, name = self._resolve(Printer, printer, 'printer')
        if printer_id in self.printer_ids:
            return False
        self.printers.insert(_list_position(self.printers, position), {
            'id': printer_id,
            'name': name,
            'action': action,
            'make_default': make_default})
        self.should_update()
        return True

    def remove_printer(self, printer):
        return self._remove_item(self.printers, printer)

    @property
    def dock_item_ids(self):
        return [int(item['id']) for item in self.dock_items]

    def add_dock_item(self, dock_item, action='add_end'):
        """Add, or remove from the dock, a DockItem by name or id.

        action is a DOCK_ITEM_ACTIONS key or value. Returns False if the
        item was already in the policy.

        """
        from .jssobjects import DockItem
        action = _choice(action, DOCK_ITEM_ACTIONS, 'dock item action')
        item_id, name = self._resolve(DockItem, dock_item, 'dock item')
        if item_id in self.dock_item_ids:
            return False
        self.dock_items.append({'id': item_id, 'name': name,
                                'action': action})
        self.should_update()
        return True

    def remove_dock_item(self, dock_item):
        return self._remove_item(self.dock_items, dock_item)

    def _resolve(self, klass, ident, label):
        """Return (id, name) of the klass object named by ident."""
        if isinstance(ident, JSSObject):
            ident = ident.id
        item_id = klass.valid_id(self.jss, ident)
        if item_id is None:
            raise NoSuchItemError("No %s matches '%s'" % (label, ident))
        return item_id, klass.map_all_ids_to(self.jss, 'name')[item_id]

    # Disk encryption ######################################################

    def apply_encryption_configuration(self, configuration):
        """Apply a DiskEncryptionConfiguration by name or id."""
        from .jssobjects import DiskEncryptionConfiguration
        config_id = self._resolve(DiskEncryptionConfiguration,
                                  configuration,
                                  'disk encryption configuration')[0]
        self.disk_encryption = {
            'action': DISK_ENCRYPTION_ACTIONS['apply'],
            'disk_encryption_configuration_id': config_id,
            'auth_restart': False}
        self.should_update()

    def reissue_key(self):
        """Issue a new individual recovery key."""
        if self.disk_encryption.get('action') == DISK_ENCRYPTION_ACTIONS[
                'remediate']:
            return
        self.disk_encryption = {
            'action': DISK_ENCRYPTION_ACTIONS['remediate'],
            'remediate_key_type': 'Individual'}
        self.should_update()

    def remove_encryption_configuration(self):
        self.disk_encryption = {'action': DISK_ENCRYPTION_ACTIONS['none']}
        self.should_update()

    # Scope ################################################################

    def add_object_to_scope(self, obj):
        """Add a Computer, ComputerGroup, Building or Department."""
        self.scope.add_target(self._scope_key(obj), obj.id)

    def add_object_to_exclusions(self, obj):
        self.scope.add_exclusion(self._scope_key(obj), obj.id)

    @staticmethod
    def _scope_key(obj):
        from .scope import scoping_classes
        for key, klass in scoping_classes().items():
            if type(obj) is klass:
                return key
        raise TypeError("Can't scope to a %s" % type(obj).__name__)

    def clear_scope(self):
        """Remove every target, limitation and exclusion."""
        self.scope.include_all(clear=True)
        self.scope.all_targets = False

    # Logs #################################################################

    def flush_logs(self, older_than=0, period='days'):
        """Delete this policy's logs older than the interval given.

        older_than is one of 0, 1, 2, 3 or 6 and period one of day,
        week, month or year (singular or plural).

        """
        if not self.in_jss:
            raise NoSuchItemError("Policy doesn't exist in the JSS. Use "
                                  "create() first.")
        if older_than not in LOG_FLUSH_INTERVAL_INTEGERS:
            raise InvalidDataError("older_than must be one of: %s" % ', '.join(
                str(i) for i in sorted(LOG_FLUSH_INTERVAL_INTEGERS)))
        if period not in LOG_FLUSH_INTERVAL_PERIODS:
            raise InvalidDataError("period must be one of: %s" % ', '.join(
                sorted(LOG_FLUSH_INTERVAL_PERIODS)))
        interval = '%s+%s' % (LOG_FLUSH_INTERVAL_INTEGERS[older_than],
                              LOG_FLUSH_INTERVAL_PERIODS[period])
        logger.debug("Flushing logs of policy %s older than %s", self.id,
                     interval)
        self.jss.delete('%s/policy/id/%s/interval/%s' % (LOG_FLUSH_RSRC,
                                                         self.id, interval))

    # Saving ###############################################################

    def rest_element(self):
        root = super(Policy, self).rest_element()
        general = root.find('general')
        add_text(general, 'enabled', bool_text(self.enabled))
        add_text(general, 'frequency', self.frequency)
        add_text(general, 'retry_event', self.retry_event)
        add_text(general, 'retry_attempts', self.retry_attempts)
        add_text(general, 'notify_on_each_failed_retry',
                 bool_text(self.notify_failed_retries))
        add_text(general, 'target_drive', self.target_drive)
        add_text(general, 'offline', bool_text(self.offline))
        for key in sorted(self.trigger_events):
            value = self.trigger_events[key]
            add_text(general, key, value if key == 'trigger_other'
                     else bool_text(value))
        limits = ElementTree.SubElement(general, 'date_time_limitations')
        for key in ('activation', 'expiration'):
            value = self.server_side_limitations.get(key)
            add_text(limits, '%s_date_epoch' % key,
                     datetime_to_epoch(value) if value else None)
        self.add_category_to_xml(root)
        self.add_site_to_xml(root)

        root.append(self.scope.scope_xml())
        self.add_self_service_xml(root)

        pkg_config = ElementTree.SubElement(root, 'package_configuration')
        packages = ElementTree.SubElement(pkg_config, 'packages')
        for pkg in self.packages:
            pkg_element = ElementTree.SubElement(packages, 'package')
            for key in ('id', 'name', 'action', 'fut', 'feu',
                        'update_autorun'):
                if key in pkg:
                    add_text(pkg_element, key, pkg[key])

        scripts = ElementTree.SubElement(root, 'scripts')
        for script in self.scripts:
            script_element = ElementTree.SubElement(scripts, 'script')
            for key in ['id', 'name', 'priority'] + [
                    'parameter%s' % i for i in SCRIPT_PARAMETERS]:
                if script.get(key) is not None:
                    add_text(script_element, key, script[key])

        maintenance = ElementTree.SubElement(root, 'maintenance')
        for task in MAINTENANCE_TASKS:
            add_text(maintenance, task, bool_text(self.maintenance[task]))

        files_processes = ElementTree.SubElement(root, 'files_processes')
        for field in FILES_PROCESSES_FIELDS:
            if self.files_processes.get(field) is not None:
                add_text(files_processes, field,
                         self.files_processes[field])

        reboot = ElementTree.SubElement(root, 'reboot')
        for key in sorted(self.reboot_options):
            add_text(reboot, key, self.reboot_options[key])
        interaction = ElementTree.SubElement(root, 'user_interaction')
        add_text(interaction, 'message_start', self.user_message_start)
        add_text(interaction, 'message_finish', self.user_message_end)

        account_maintenance = ElementTree.SubElement(root,
                                                     'account_maintenance')
        management = ElementTree.SubElement(account_maintenance,
                                            'management_account')
        for key in ('action', 'managed_password', 'managed_password_length'):
            if self.management_account.get(key) is not None:
                add_text(management, key, self.management_account[key])
        add_list(account_maintenance, 'directory_bindings', 'binding',
                 self.directory_bindings)

        add_list(root, 'printers', 'printer', self.printers,
                 keys=('id', 'name', 'action', 'make_default'))
        add_list(root, 'dock_items', 'dock_item', self.dock_items,
                 keys=('id', 'name', 'action'))
        disk_encryption = ElementTree.SubElement(root, 'disk_encryption')
        for key in ('action', 'disk_encryption_configuration_id',
                    'auth_restart', 'remediate_key_type'):
            if self.disk_encryption.get(key) is not None:
                add_text(disk_encryption, key, self.disk_encryption[key])
        return root

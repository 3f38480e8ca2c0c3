#!/usr/bin/env python
"""mdm.py

Send MDM commands to computers, mobile devices, and their groups.
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
import logging
import os
from xml.etree import ElementTree

from .exceptions import (InvalidDataError, MissingDataError, NoSuchItemError,
                         UnmanagedError, UnsupportedError)
from .tools import XML_HEADER, add_text


logger = logging.getLogger(__name__)

COMPUTER_TARGETS = ('computers', 'computergroups')
DEVICE_TARGETS = ('mobiledevices', 'mobiledevicegroups')
GROUP_TARGETS = ('computergroups', 'mobiledevicegroups')

COMPUTER_RSRC = 'computercommands'
DEVICE_RSRC = 'mobiledevicecommands'

BLANK_PUSH = 'BlankPush'
DEVICE_LOCK = 'DeviceLock'
ERASE_DEVICE = 'EraseDevice'
UNMANAGE_DEVICE = 'UnmanageDevice'
DELETE_USER = 'DeleteUser'
UNLOCK_USER_ACCOUNT = 'UnlockUserAccount'
ENABLE_REMOTE_DESKTOP = 'EnableRemoteDesktop'
DISABLE_REMOTE_DESKTOP = 'DisableRemoteDesktop'
SETTINGS = 'Settings'
CLEAR_PASSCODE = 'ClearPasscode'
UPDATE_INVENTORY = 'UpdateInventory'
CLEAR_RESTRICTIONS_PASSWORD = 'ClearRestrictionsPassword'
ENABLE_DATA_ROAMING = 'SettingsEnableDataRoaming'
DISABLE_DATA_ROAMING = 'SettingsDisableDataRoaming'
ENABLE_VOICE_ROAMING = 'SettingsEnableVoiceRoaming'
DISABLE_VOICE_ROAMING = 'SettingsDisableVoiceRoaming'
PASSCODE_LOCK_GRACE_PERIOD = 'PasscodeLockGracePeriod'
WALLPAPER = 'Wallpaper'
DEVICE_NAME = 'DeviceName'
SHUT_DOWN_DEVICE = 'ShutDownDevice'
RESTART_DEVICE = 'RestartDevice'
ENABLE_LOST_MODE = 'EnableLostMode'
DISABLE_LOST_MODE = 'DisableLostMode'
DEVICE_LOCATION = 'DeviceLocation'
PLAY_LOST_MODE_SOUND = 'PlayLostModeSound'
ENABLE_APP_ANALYTICS = 'SettingsEnableAppAnalytics'
DISABLE_APP_ANALYTICS = 'SettingsDisableAppAnalytics'
ENABLE_DIAGNOSTIC_SUBMISSION = 'SettingsEnableDiagnosticSubmission'
DISABLE_DIAGNOSTIC_SUBMISSION = 'SettingsDisableDiagnosticSubmission'

COMPUTER_COMMANDS = (
    BLANK_PUSH, DEVICE_LOCK, ERASE_DEVICE, UNMANAGE_DEVICE, DELETE_USER,
    UNLOCK_USER_ACCOUNT, ENABLE_REMOTE_DESKTOP, DISABLE_REMOTE_DESKTOP)

ALL_DEVICE_COMMANDS = (
    BLANK_PUSH, DEVICE_LOCK, ERASE_DEVICE, UNMANAGE_DEVICE, SETTINGS,
    CLEAR_PASSCODE, UPDATE_INVENTORY, ENABLE_DATA_ROAMING,
    DISABLE_DATA_ROAMING, ENABLE_VOICE_ROAMING, DISABLE_VOICE_ROAMING,
    PASSCODE_LOCK_GRACE_PERIOD)

# Only supervised devices accept these.
SUPERVISED_DEVICE_COMMANDS = (
    WALLPAPER, DEVICE_NAME, SHUT_DOWN_DEVICE, RESTART_DEVICE,
    CLEAR_RESTRICTIONS_PASSWORD, ENABLE_LOST_MODE, DISABLE_LOST_MODE,
    DEVICE_LOCATION, PLAY_LOST_MODE_SOUND, ENABLE_APP_ANALYTICS,
    DISABLE_APP_ANALYTICS, ENABLE_DIAGNOSTIC_SUBMISSION,
    DISABLE_DIAGNOSTIC_SUBMISSION)

DEVICE_COMMANDS = ALL_DEVICE_COMMANDS + SUPERVISED_DEVICE_COMMANDS

# Names accepted by send_mdm_command, mapped to the API's command names.
COMMANDS = {
    'blank_push': BLANK_PUSH,
    'send_blank_push': BLANK_PUSH,
    'noop': BLANK_PUSH,
    'device_lock': DEVICE_LOCK,
    'lock_device': DEVICE_LOCK,
    'lock': DEVICE_LOCK,
    'erase_device': ERASE_DEVICE,
    'wipe_device': ERASE_DEVICE,
    'wipe_computer': ERASE_DEVICE,
    'wipe': ERASE_DEVICE,
    'erase': ERASE_DEVICE,
    'unmanage_device': UNMANAGE_DEVICE,
    'remove_mdm_profile': UNMANAGE_DEVICE,
    'unlock_user_account': UNLOCK_USER_ACCOUNT,
    'delete_user': DELETE_USER,
    'enable_remote_desktop': ENABLE_REMOTE_DESKTOP,
    'disable_remote_desktop': DISABLE_REMOTE_DESKTOP,
    'settings': SETTINGS,
    'update_inventory': UPDATE_INVENTORY,
    'recon': UPDATE_INVENTORY,
    'clear_passcode': CLEAR_PASSCODE,
    'clear_restrictions_password': CLEAR_RESTRICTIONS_PASSWORD,
    'enable_data_roaming': ENABLE_DATA_ROAMING,
    'disable_data_roaming': DISABLE_DATA_ROAMING,
    'enable_voice_roaming': ENABLE_VOICE_ROAMING,
    'disable_voice_roaming': DISABLE_VOICE_ROAMING,
    'device_name': DEVICE_NAME,
    'wallpaper': WALLPAPER,
    'set_wallpaper': WALLPAPER,
    'passcode_lock_grace_period': PASSCODE_LOCK_GRACE_PERIOD,
    'shut_down_device': SHUT_DOWN_DEVICE,
    'shutdown_device': SHUT_DOWN_DEVICE,
    'shut_down': SHUT_DOWN_DEVICE,
    'shutdown': SHUT_DOWN_DEVICE,
    'restart_device': RESTART_DEVICE,
    'restart': RESTART_DEVICE,
    'enable_app_analytics': ENABLE_APP_ANALYTICS,
    'disable_app_analytics': DISABLE_APP_ANALYTICS,
    'enable_diagnostic_submission': ENABLE_DIAGNOSTIC_SUBMISSION,
    'disable_diagnostic_submission': DISABLE_DIAGNOSTIC_SUBMISSION,
    'enable_lost_mode': ENABLE_LOST_MODE,
    'disable_lost_mode': DISABLE_LOST_MODE,
    'device_location': DEVICE_LOCATION,
    'play_lost_mode_sound': PLAY_LOST_MODE_SOUND,
}

WALLPAPER_LOCATIONS = {
    'lock_screen': 1,
    'home_screen': 2,
    'lock_and_home_screen': 3,
}

FLUSHABLE_STATUSES = {
    'pending': 'Pending',
    'failed': 'Failed',
    'pending_failed': 'Pending+Failed',
}

BLANK_PUSH_RESULT = 'Command sent'


def _command_target(target_class):
    target = getattr(target_class, 'mdm_command_target', None)
    if target not in COMPUTER_TARGETS + DEVICE_TARGETS:
        raise InvalidDataError("%s can't receive MDM commands." %
                               target_class.__name__)
    return target


def validate_command(target_class, command):
    """Return the API name of command, if target_class can receive it."""
    if command not in COMMANDS:
        raise NoSuchItemError("Unknown command '%s'" % command)
    command = COMMANDS[command]
    if _command_target(target_class) in COMPUTER_TARGETS:
        if command not in COMPUTER_COMMANDS:
            raise UnsupportedError("'%s' cannot be sent to computers or "
                                   "computer groups" % command)
    elif command not in DEVICE_COMMANDS:
        raise UnsupportedError("'%s' cannot be sent to mobile devices or "
                               "mobile device groups" % command)
    return command


def targets_to_ids(jss, target_class, targets, expand_groups=True,
                   unmanaged_ok=False):
    """Resolve targets to ids, replacing groups with their members.

    Raises NoSuchItemError for unknown targets and UnmanagedError for
    devices that aren't managed.

    """
    if not isinstance(targets, (list, tuple)):
        targets = [targets]
    is_group = _command_target(target_class) in GROUP_TARGETS
    ids = []
    for ident in targets:
        target_id = target_class.valid_id(jss, ident, refresh=True)
        if target_id is None:
            raise NoSuchItemError("No %s matches identifier: %s" %
                                  (target_class.__name__, ident))
        if is_group and expand_groups:
            ids.extend(target_class.fetch(jss, target_id).member_ids)
        else:
            ids.append(target_id)

    if unmanaged_ok or (is_group and not expand_groups):
        return ids
    device_class = target_class.member_class if is_group else target_class
    managed = device_class.map_all_ids_to(jss, 'managed')
    for target_id in ids:
        if str(managed.get(target_id)).lower() != 'true':
            raise UnmanagedError("%s with id %s is not managed. Cannot send "
                                 "command." % (device_class.__name__,
                                               target_id))
    return ids


def mdm_command_xml(target_class, command, opts, target_ids):
    """Return the XML body for command with opts, sent to target_ids."""
    if not target_ids:
        raise MissingDataError("Targets cannot be empty")
    if _command_target(target_class) in COMPUTER_TARGETS:
        root = ElementTree.Element('computer_command')
        list_tag, item_tag = 'computers', 'computer'
    else:
        root = ElementTree.Element('mobile_device_command')
        list_tag, item_tag = 'mobile_devices', 'mobile_device'
    general = ElementTree.SubElement(root, 'general')
    add_text(general, 'command', command)
    for key, value in (opts or {}).items():
        add_text(general, key, value)
    target_list = ElementTree.SubElement(root, list_tag)
    for target_id in target_ids:
        add_text(ElementTree.SubElement(target_list, item_tag), 'id',
                 target_id)
    return XML_HEADER + ElementTree.tostring(root, encoding='unicode')


def _parse_result(target_class, command, target_ids, response):
    if command == BLANK_PUSH:
        return {target_id: BLANK_PUSH_RESULT for target_id in target_ids}
    root = ElementTree.fromstring(response.encode('utf-8'))
    result = {}
    if _command_target(target_class) in COMPUTER_TARGETS:
        for cmd in root:
            computer_id = cmd.findtext('computer_id')
            if computer_id:
                result[int(computer_id)] = cmd.findtext('command_uuid')
    else:
        for device in root.iterfind('mobile_devices/mobile_device'):
            result[int(device.findtext('id'))] = device.findtext('status')
    return result


def send_mdm_command(jss, target_class, targets, command, opts=None):
    """Send an MDM command to one or more targets.

    jss:            JSS connection.
    target_class:   Computer, ComputerGroup, MobileDevice, or
                    MobileDeviceGroup.
    targets:        An identifier, or a list of them, for target_class.
    command:        A key of COMMANDS.
    opts:           Dict of extra elements for the command.

    Returns a dict of {target id: result}. Computers give a command
    uuid, mobile devices a status.

    """
    command = validate_command(target_class, command)
    target_ids = targets_to_ids(jss, target_class, targets)
    rsrc = '%s/command/%s' % (
        COMPUTER_RSRC if _command_target(target_class) in COMPUTER_TARGETS
        else DEVICE_RSRC, command)
    logger.debug("Sending %s to %s %s.", command, target_class.__name__,
                 target_ids)
    response = jss.post(rsrc, mdm_command_xml(target_class, command, opts,
                                              target_ids))
    return _parse_result(target_class, command, target_ids, response)


def _is_computer(target_class):
    return _command_target(target_class) in COMPUTER_TARGETS


def blank_push(jss, target_class, targets):
    return send_mdm_command(jss, target_class, targets, 'blank_push')


def device_lock(jss, target_class, targets, passcode='', message=None):
    """Lock targets. Computers need a 6 character passcode."""
    if _is_computer(target_class):
        if len(str(passcode or '')) != 6:
            raise InvalidDataError("Locking computers requires a 6-character "
                                   "String passcode")
        opts = {'passcode': passcode}
    else:
        opts = {}
        if message:
            opts['lock_message'] = message
    return send_mdm_command(jss, target_class, targets, 'device_lock', opts)


def erase_device(jss, target_class, targets, passcode='',
                 preserve_data_plan=False):
    """Erase targets. Computers need a 6 character passcode."""
    if _is_computer(target_class):
        if len(str(passcode or '')) != 6:
            raise InvalidDataError("Erasing computers requires a 6-character "
                                   "String passcode")
        opts = {'passcode': passcode}
    else:
        opts = {}
        if preserve_data_plan:
            opts['preserve_data_plan'] = 'true'
    return send_mdm_command(jss, target_class, targets, 'erase_device', opts)


def unmanage_device(jss, target_class, targets):
    return send_mdm_command(jss, target_class, targets, 'unmanage_device')


def unlock_user_account(jss, target_class, targets, user):
    return send_mdm_command(jss, target_class, targets, 'unlock_user_account',
                            {'user_name': user})


def delete_user(jss, target_class, targets, user):
    return send_mdm_command(jss, target_class, targets, 'delete_user',
                            {'user_name': user})


def device_name(jss, target_class, targets, name):
    return send_mdm_command(jss, target_class, targets, 'device_name',
                            {'device_name': name})


def passcode_lock_grace_period(jss, target_class, targets, secs):
    return send_mdm_command(jss, target_class, targets,
                            'passcode_lock_grace_period',
                            {'passcode_lock_grace_period': secs})


def wallpaper(jss, target_class, targets, wallpaper_setting,
              wallpaper_content=None, wallpaper_id=None):
    """Set the wallpaper of supervised devices.

    wallpaper_setting:  A key of WALLPAPER_LOCATIONS.
    wallpaper_content:  Path to a local .png or .jpg.
    wallpaper_id:       Id of an icon already in the JSS, used if there
                        is no wallpaper_content.

    """
    if wallpaper_setting not in WALLPAPER_LOCATIONS:
        raise InvalidDataError("wallpaper_setting must be one of: %s" %
                               ', '.join(sorted(WALLPAPER_LOCATIONS)))
    opts = {'wallpaper_setting': WALLPAPER_LOCATIONS[wallpaper_setting]}
    if wallpaper_content:
        if not os.path.isfile(wallpaper_content):
            raise NoSuchItemError("Not a file: %s" % wallpaper_content)
        with open(wallpaper_content, 'rb') as handle:
            opts['wallpaper_content'] = base64.b64encode(
                handle.read()).decode('ascii')
    elif wallpaper_id:
        opts['wallpaper_id'] = wallpaper_id
    else:
        raise MissingDataError("Either wallpaper_id or wallpaper_content "
                               "must be provided")
    return send_mdm_command(jss, target_class, targets, 'wallpaper', opts)


def enable_lost_mode(jss, target_class, targets, message=None, phone=None,
                     footnote=None, play_sound=False,
                     enforce_lost_mode=True):
    """Put supervised devices in lost mode. A message or phone number is
    required.

    """
    if not (message or phone):
        raise MissingDataError("Either message or phone must be provided")
    opts = {'always_enforce_lost_mode': enforce_lost_mode}
    if message:
        opts['lost_mode_message'] = message
    if phone:
        opts['lost_mode_phone'] = phone
    if footnote:
        opts['lost_mode_footnote'] = footnote
    if play_sound:
        opts['lost_mode_with_sound'] = 'true'
    return send_mdm_command(jss, target_class, targets, 'enable_lost_mode',
                            opts)


def flush_mdm_commands(jss, target_class, targets, status):
    """Delete pending and/or failed commands for targets.

    status is a key of FLUSHABLE_STATUSES.

    """
    if status not in FLUSHABLE_STATUSES:
        raise InvalidDataError("Status must be one of: %s" %
                               ', '.join(sorted(FLUSHABLE_STATUSES)))
    target_ids = targets_to_ids(jss, target_class, targets,
                                expand_groups=False, unmanaged_ok=True)
    rsrc = 'commandflush/%s/id/%s/status/%s' % (
        _command_target(target_class), ','.join(map(str, target_ids)),
        FLUSHABLE_STATUSES[status])
    logger.debug("Flushing %s commands: %s", status, rsrc)
    return jss.delete(rsrc)


class MDMCommandable(object):
    """Mixin sending MDM commands to this object.

    Classes set mdm_command_target to one of COMPUTER_TARGETS or
    DEVICE_TARGETS. Group classes also set member_class.

    """
    mdm_command_target = None

    def send_mdm_command(self, command, opts=None):
        return send_mdm_command(self.jss, self.__class__, self.id, command,
                                opts)

    def blank_push(self):
        return blank_push(self.jss, self.__class__, self.id)

    def device_lock(self, passcode='', message=None):
        return device_lock(self.jss, self.__class__, self.id, passcode,
                           message)

    def erase_device(self, passcode='', preserve_data_plan=False):
        return erase_device(self.jss, self.__class__, self.id, passcode,
                            preserve_data_plan)

    def unmanage_device(self):
        return unmanage_device(self.jss, self.__class__, self.id)

    def unlock_user_account(self, user):
        return unlock_user_account(self.jss, self.__class__, self.id, user)

    def delete_user(self, user):
        return delete_user(self.jss, self.__class__, self.id, user)

    def update_inventory(self):
        return self.send_mdm_command('update_inventory')

    def clear_passcode(self):
        return self.send_mdm_command('clear_passcode')

    def restart_device(self):
        return self.send_mdm_command('restart_device')

    def shut_down_device(self):
        return self.send_mdm_command('shut_down_device')

    def set_wallpaper(self, wallpaper_setting, wallpaper_content=None,
                      wallpaper_id=None):
        return wallpaper(self.jss, self.__class__, self.id, wallpaper_setting,
                         wallpaper_content, wallpaper_id)

    def enable_lost_mode(self, message=None, phone=None, footnote=None,
                         play_sound=False, enforce_lost_mode=True):
        return enable_lost_mode(self.jss, self.__class__, self.id, message,
                                phone, footnote, play_sound,
                                enforce_lost_mode)

    def disable_lost_mode(self):
        return self.send_mdm_command('disable_lost_mode')

    def flush_mdm_commands(self, status):
        return flush_mdm_commands(self.jss, self.__class__, self.id, status)

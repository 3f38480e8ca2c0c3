#!/usr/bin/env python
"""management_history.py

Management history records of computers and mobile devices.
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

from collections import namedtuple

from .exceptions import InvalidDataError, NoSuchItemError, UnsupportedError
from .tools import as_list, epoch_to_datetime


HIST_COMPUTER_RSRC = 'computerhistory'
HIST_DEVICE_RSRC = 'mobiledevicehistory'
HIST_COMPUTER_KEY = 'computer_history'
HIST_DEVICE_KEY = 'mobile_device_history'

HIST_COMPUTER_SUBSETS = ('computer_usage_logs', 'audits', 'policy_logs',
                         'casper_remote_logs', 'screen_sharing_logs',
                         'casper_imaging_logs', 'commands', 'user_location',
                         'mac_app_store_applications')
HIST_DEVICE_SUBSETS = ('management_commands', 'user_location', 'audits',
                       'applications', 'ebooks')

COMPLETED = 'completed'
PENDING = 'pending'
FAILED = 'failed'
INSTALLED = 'installed'
HIST_MDM_STATUSES = (COMPLETED, PENDING, FAILED)
HIST_APP_STATUSES = (INSTALLED, PENDING, FAILED)

# The JSS groups installed apps and books by where they came from.
APP_SOURCES = {'in_house_from_mobile_device_app_catalog': 'in_house',
               'app_store_from_mobile_device_app_catalog': 'app_store'}
EBOOK_SOURCES = {'inhouse': 'in_house', 'ibookstore': 'ibookstore'}

RAW_STATUSES = {'Installed': INSTALLED,
                'Managed': INSTALLED,
                'Unmanaged': INSTALLED,
                'Pending': PENDING,
                'Failed': FAILED}


def _event_class(name, fields):
    """Return a namedtuple class that is built from JSS history data."""
    base = namedtuple(name, fields)

    @classmethod
    def from_data(cls, data):
        return cls(**{field: data.get(field) for field in cls._fields})

    base.from_data = from_data
    return base


class AuditEvent(_event_class('AuditEvent',
                              ('event', 'username', 'date_time_epoch'))):
    @property
    def date_time(self):
        return epoch_to_datetime(self.date_time_epoch)


class UserLocationChange(_event_class(
        'UserLocationChange',
        ('date_time_epoch', 'username', 'full_name', 'email_address',
         'phone_number', 'department', 'building', 'room', 'position'))):
    @property
    def date_time(self):
        return epoch_to_datetime(self.date_time_epoch)


class MDMCommand(_event_class(
        'MDMCommand',
        ('name', 'username', 'status', 'error', 'issued_epoch',
         'failed_epoch', 'completed_epoch', 'last_push_epoch'))):
    """One MDM command sent to a device.

    status is 'completed', 'pending', or 'failed'.

    """
    @classmethod
    def from_data(cls, data):
        data = dict(data)
        for key in ('issued', 'failed', 'completed'):
            if not data.get('%s_epoch' % key):
                data['%s_epoch' % key] = data.get(
                    'date_time_%s_epoch' % key)
        return super(MDMCommand, cls).from_data(data)

    @property
    def issued(self):
        return epoch_to_datetime(self.issued_epoch)

    @property
    def failed(self):
        return epoch_to_datetime(self.failed_epoch)

    @property
    def completed(self):
        return epoch_to_datetime(self.completed_epoch)

    @property
    def last_push(self):
        return epoch_to_datetime(self.last_push_epoch)


class MacAppStoreApp(_event_class(
        'MacAppStoreApp',
        ('name', 'version', 'status', 'size_mb', 'deployed_epoch',
         'last_update_epoch'))):
    @property
    def deployed(self):
        return epoch_to_datetime(self.deployed_epoch)

    @property
    def last_update(self):
        return epoch_to_datetime(self.last_update_epoch)


class MobileDeviceApp(_event_class(
        'MobileDeviceApp',
        ('name', 'version', 'short_version', 'management_status', 'source',
         'bundle_size', 'dynamic_size'))):
    @property
    def status(self):
        return RAW_STATUSES.get(self.management_status, 'unknown')

    @property
    def managed(self):
        return self.management_status == 'Managed'

    @staticmethod
    def _size_to_kb(raw_size):
        if not raw_size:
            return None
        value, unit = str(raw_size).split(' ', 1)
        multiplier = {'kb': 1, 'mb': 1024, 'gb': 1024 * 1024}.get(
            unit.strip().lower())
        if multiplier is None:
            return None
        return int(float(value)) * multiplier

    @property
    def bundle_size_kb(self):
        return self._size_to_kb(self.bundle_size)

    @property
    def dynamic_size_kb(self):
        return self._size_to_kb(self.dynamic_size)


class EBook(_event_class(
        'EBook',
        ('title', 'author', 'version', 'kind', 'management_status',
         'source'))):
    @property
    def name(self):
        return self.title

    @property
    def status(self):
        return RAW_STATUSES.get(self.management_status, 'unknown')

    @property
    def managed(self):
        return self.management_status == 'Managed'


class CasperImagingLog(_event_class('CasperImagingLog',
                                    ('status', 'date_time_epoch'))):
    @property
    def date_time(self):
        return epoch_to_datetime(self.date_time_epoch)


class CasperRemoteLog(_event_class('CasperRemoteLog',
                                   ('status', 'date_time_epoch'))):
    @property
    def date_time(self):
        return epoch_to_datetime(self.date_time_epoch)


class ComputerUsageLog(_event_class('ComputerUsageLog',
                                    ('event', 'username',
                                     'date_time_epoch'))):
    @property
    def date_time(self):
        return epoch_to_datetime(self.date_time_epoch)


class ScreenSharingLog(_event_class('ScreenSharingLog',
                                    ('status', 'details',
                                     'date_time_epoch'))):
    @property
    def date_time(self):
        return epoch_to_datetime(self.date_time_epoch)


class PolicyLog(_event_class('PolicyLog',
                             ('policy_id', 'policy_name', 'username',
                              'date_completed_epoch', 'status'))):
    @classmethod
    def from_data(cls, data):
        data = dict(data)
        data['status'] = str(data.get('status') or '').lower() or None
        return super(PolicyLog, cls).from_data(data)

    @property
    def date_completed(self):
        return epoch_to_datetime(self.date_completed_epoch)


def _is_computer(device_class):
    return device_class.history_rsrc == HIST_COMPUTER_RSRC


def _require(device_class, computer, what):
    if _is_computer(device_class) != computer:
        raise UnsupportedError("Only %s have %s" % (
            'computers' if computer else 'mobile devices', what))


def _statuses(status, allowed):
    if status is None:
        return allowed
    if status not in allowed:
        raise InvalidDataError("status must be one of: %s" %
                               ', '.join(allowed))
    return (status,)


def management_history(jss, device_class, ident, subset=None):
    """Return the raw management history data of a device.

    device_class is Computer or MobileDevice. With subset, return only
    that part of the history.

    """
    device_id = device_class.valid_id(jss, ident)
    if device_id is None:
        raise NoSuchItemError("No %s matches identifier: %s" %
                              (device_class.__name__, ident))
    rsrc = '%s/id/%s' % (device_class.history_rsrc, device_id)
    if subset is None:
        return jss.get(rsrc)[device_class.history_key]
    if subset not in device_class.history_subsets:
        raise InvalidDataError("Subset must be one of: %s" %
                               ', '.join(device_class.history_subsets))
    data = jss.get('%s/subset/%s' % (rsrc, subset))
    return data[device_class.history_key].get(subset)


def audit_history(jss, device_class, ident):
    return [AuditEvent.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'audits'), 'audit')]


def user_location_history(jss, device_class, ident):
    return [UserLocationChange.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'user_location'),
        'location')]


def mdm_command_history(jss, device_class, ident, status=None):
    """Return MDMCommands, optionally only those with status."""
    subset = 'commands' if _is_computer(device_class) else \
        'management_commands'
    history = management_history(jss, device_class, ident, subset) or {}
    result = []
    for a_status in _statuses(status, HIST_MDM_STATUSES):
        for cmd in as_list(history.get(a_status), 'command'):
            cmd = dict(cmd)
            if a_status == FAILED and not cmd.get('error'):
                cmd['error'] = cmd.get('status')
            cmd['status'] = a_status
            result.append(MDMCommand.from_data(cmd))
    return result


def completed_mdm_commands(jss, device_class, ident):
    return mdm_command_history(jss, device_class, ident, COMPLETED)


def pending_mdm_commands(jss, device_class, ident):
    return mdm_command_history(jss, device_class, ident, PENDING)


def failed_mdm_commands(jss, device_class, ident):
    return mdm_command_history(jss, device_class, ident, FAILED)


def last_mdm_contact(jss, device_class, ident):
    """Return the datetime of the last completed or failed command."""
    epochs = []
    for cmd in mdm_command_history(jss, device_class, ident):
        if cmd.status == COMPLETED and cmd.completed_epoch:
            epochs.append(int(cmd.completed_epoch))
        elif cmd.status == FAILED and cmd.failed_epoch:
            epochs.append(int(cmd.failed_epoch))
    return epoch_to_datetime(max(epochs)) if epochs else None


def _installed_by_source(installed, sources, item_key):
    """Flatten the installed items, grouped by source, into one list."""
    items = []
    if not isinstance(installed, dict):
        return [dict(item) for item in as_list(installed, item_key)]
    for raw_source, from_source in installed.items():
        for item in as_list(from_source, item_key):
            item = dict(item)
            item['source'] = sources.get(raw_source, 'other')
            items.append(item)
    return items


def app_store_app_history(jss, device_class, ident, status=None):
    """Return the app store apps of a device, optionally by status."""
    if _is_computer(device_class):
        history = management_history(jss, device_class, ident,
                                     'mac_app_store_applications') or {}
        result = []
        for a_status in _statuses(status, HIST_APP_STATUSES):
            for app in as_list(history.get(a_status), 'app'):
                app = dict(app)
                app['status'] = a_status
                result.append(MacAppStoreApp.from_data(app))
        return result

    history = management_history(jss, device_class, ident,
                                 'applications') or {}
    result = []
    for a_status in _statuses(status, HIST_APP_STATUSES):
        if a_status == INSTALLED:
            apps = _installed_by_source(history.get(a_status), APP_SOURCES,
                                        'app')
        else:
            apps = [dict(app) for app in as_list(history.get(a_status),
                                                 'app')]
        result.extend(MobileDeviceApp.from_data(app) for app in apps)
    return result


def ebook_history(jss, device_class, ident, status=None):
    _require(device_class, False, 'ebooks')
    history = management_history(jss, device_class, ident, 'ebooks') or {}
    result = []
    for a_status in _statuses(status, HIST_APP_STATUSES):
        if a_status == INSTALLED:
            books = _installed_by_source(history.get(a_status),
                                         EBOOK_SOURCES, 'ebook')
        else:
            books = [dict(book) for book in as_list(history.get(a_status),
                                                    'ebook')]
        result.extend(EBook.from_data(book) for book in books)
    return result


def casper_imaging_logs(jss, device_class, ident):
    _require(device_class, True, 'casper imaging logs')
    return [CasperImagingLog.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'casper_imaging_logs'),
        'log')]


def casper_remote_logs(jss, device_class, ident):
    _require(device_class, True, 'casper remote logs')
    return [CasperRemoteLog.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'casper_remote_logs'),
        'log')]


def usage_logs(jss, device_class, ident):
    _require(device_class, True, 'usage logs')
    return [ComputerUsageLog.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'computer_usage_logs'),
        'usage_log')]


def screen_sharing_logs(jss, device_class, ident):
    _require(device_class, True, 'screen sharing logs')
    return [ScreenSharingLog.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'screen_sharing_logs'),
        'log')]


def policy_logs(jss, device_class, ident):
    _require(device_class, True, 'policy logs')
    return [PolicyLog.from_data(event) for event in as_list(
        management_history(jss, device_class, ident, 'policy_logs'),
        'policy_log')]


def completed_policies(jss, device_class, ident):
    return [log for log in policy_logs(jss, device_class, ident)
            if log.status == COMPLETED]


def failed_policies(jss, device_class, ident):
    return [log for log in policy_logs(jss, device_class, ident)
            if log.status == FAILED]


class ManagementHistory(object):
    """Mixin giving devices access to their management history.

    Classes set history_rsrc, history_key and history_subsets.

    """
    history_rsrc = None
    history_key = None
    history_subsets = ()

    def management_history(self, subset=None):
        return management_history(self.jss, self.__class__, self.id, subset)

    def audit_history(self):
        return audit_history(self.jss, self.__class__, self.id)

    def user_location_history(self):
        return user_location_history(self.jss, self.__class__, self.id)

    def mdm_command_history(self, status=None):
        return mdm_command_history(self.jss, self.__class__, self.id, status)

    def completed_mdm_commands(self):
        return completed_mdm_commands(self.jss, self.__class__, self.id)

    def pending_mdm_commands(self):
        return pending_mdm_commands(self.jss, self.__class__, self.id)

    def failed_mdm_commands(self):
        return failed_mdm_commands(self.jss, self.__class__, self.id)

    def last_mdm_contact(self):
        return last_mdm_contact(self.jss, self.__class__, self.id)

    def app_store_app_history(self, status=None):
        return app_store_app_history(self.jss, self.__class__, self.id,
                                     status)

    def ebook_history(self, status=None):
        return ebook_history(self.jss, self.__class__, self.id, status)

    def casper_imaging_logs(self):
        return casper_imaging_logs(self.jss, self.__class__, self.id)

    def casper_remote_logs(self):
        return casper_remote_logs(self.jss, self.__class__, self.id)

    def usage_logs(self):
        return usage_logs(self.jss, self.__class__, self.id)

    def screen_sharing_logs(self):
        return screen_sharing_logs(self.jss, self.__class__, self.id)

    def policy_logs(self):
        return policy_logs(self.jss, self.__class__, self.id)

    def completed_policies(self):
        return completed_policies(self.jss, self.__class__, self.id)

    def failed_policies(self):
        return failed_policies(self.jss, self.__class__, self.id)

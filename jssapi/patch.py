#!/usr/bin/env python
"""patch.py

Patch management: sources of patch definitions, the software titles
configured from them, and the policies that install their versions.

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
from urllib.parse import urlparse
from xml.etree import ElementTree

from .exceptions import (InvalidDataError, MissingDataError, NoSuchItemError,
                         UnsupportedError)
from .jssobject import JSSObject
from .mixins import Categorizable, Sitable
from .scope import Scopable
from .self_service import (PATCHPOL_AUTO, PATCHPOL_SELF_SERVICE,
                           SelfServable)
from .tools import (add_text, as_list, bool_text, epoch_to_datetime,
                    parse_datetime, to_bool, validate_bool, validate_integer)


logger = logging.getLogger(__name__)

AVAILABLE_TITLES_RSRC = 'patchavailabletitles/sourceid'
REPORTS_RSRC = 'patchreports/patchsoftwaretitleid'
LATEST_VERSION_ID = 'Latest'
UNKNOWN_VERSION_ID = 'Unknown'

DEFAULT_SSL_PORT = 443
DEFAULT_NO_SSL_PORT = 80

NO_DEADLINE = None
DEFAULT_DEADLINE = 7
DEFAULT_GRACE_PERIOD = 15
DEFAULT_GRACE_PERIOD_SUBJECT = 'Important'
DEFAULT_GRACE_PERIOD_MESSAGE = (
    '$APP_NAMES will quit in $DELAY_MINUTES minutes so that '
    '$SOFTWARE_TITLE can be updated. Save anything you are working on and '
    'quit the app(s).')


# Sources ##################################################################

class PatchSource(JSSObject):
    """Abstract base for internal and external patch sources."""

    @classmethod
    def source_classes(cls):
        return (PatchInternalSource, PatchExternalSource)

    @classmethod
    def valid_patch_source_id(cls, jss, ident, refresh=False):
        """Return the id of an internal or external source, or None."""
        for klass in cls.source_classes():
            source_id = klass.valid_id(jss, ident, refresh)
            if source_id is not None:
                return source_id
        return None

    @classmethod
    def available_titles(cls, jss, source):
        """Return the titles a source offers, as dicts with name_id,
        current_version, publisher, last_modified and app_name.

        """
        source_id = cls.valid_patch_source_id(jss, source)
        if source_id is None:
            raise NoSuchItemError("No Patch Source found matching: %s" %
                                  source)
        try:
            data = jss.get('%s/%s' % (AVAILABLE_TITLES_RSRC, source_id))
        except NoSuchItemError:
            return []
        titles = (data.get('patch_available_titles') or {}).get(
            'available_titles')
        titles = [dict(title) for title in as_list(titles, 'available_title')]
        for title in titles:
            title['last_modified'] = parse_datetime(title.get('last_modified'))
        return titles

    @classmethod
    def available_name_ids(cls, jss, source):
        return [title.get('name_id')
                for title in cls.available_titles(jss, source)]

    def _load(self):
        super(PatchSource, self)._load()
        self.enabled = to_bool(self.data.get('enabled'))
        endpoint = self.data.get('endpoint')
        if endpoint:
            url = urlparse(endpoint)
            self.host_name = url.hostname
            self.ssl_enabled = url.scheme == 'https'
            self.port = url.port or (DEFAULT_SSL_PORT if self.ssl_enabled
                                     else DEFAULT_NO_SSL_PORT)
        else:
            self.host_name = self.data.get('host_name')
            self.ssl_enabled = to_bool(self.data.get('ssl_enabled', True))
            port = self.data.get('port')
            self.port = int(port) if port else (
                DEFAULT_SSL_PORT if self.ssl_enabled else DEFAULT_NO_SSL_PORT)

    @property
    def endpoint(self):
        return '%s://%s:%s/' % ('https' if self.ssl_enabled else 'http',
                                self.host_name, self.port)

    def offered_titles(self):
        return self.available_titles(self.jss, self.id)

    def offered_name_ids(self):
        return self.available_name_ids(self.jss, self.id)


class PatchInternalSource(PatchSource):
    """Jamf's own patch definitions. Read only."""
    _url = 'patchinternalsources'
    container = 'patch_internal_sources'
    list_type = 'patch_internal_source'
    can_post = False
    can_put = False
    can_delete = False


class PatchExternalSource(PatchSource):
    """A third party patch definition server."""
    _url = 'patchexternalsources'
    container = 'patch_external_sources'
    list_type = 'patch_external_source'

    def new(self, name, **kwargs):
        self.enabled = False
        self.host_name = kwargs.get('host_name')
        self.ssl_enabled = validate_bool(kwargs.get('ssl_enabled', True),
                                         'ssl_enabled')
        self.port = kwargs.get('port') or (
            DEFAULT_SSL_PORT if self.ssl_enabled else DEFAULT_NO_SSL_PORT)

    def _validate_host_port(self, action):
        if not self.host_name or not self.port:
            raise UnsupportedError("Cannot %s without first setting a "
                                   "host_name and port" % action)

    def enable(self):
        if self.enabled:
            return
        self._validate_host_port('enable a patch source')
        self.enabled = True
        self.should_update()

    def disable(self):
        if not self.enabled:
            return
        self.enabled = False
        self.should_update()

    def set_host_name(self, host_name):
        if host_name == self.host_name:
            return
        if not isinstance(host_name, str) or not host_name.strip():
            raise InvalidDataError("host names must be non-empty strings")
        self.host_name = host_name.strip()
        self.should_update()

    def set_port(self, port):
        port = validate_integer(port, 'port')
        if port == self.port:
            return
        self.port = port
        self.should_update()

    def use_ssl(self):
        if self.ssl_enabled:
            return
        self.ssl_enabled = True
        self.should_update()

    def no_ssl(self):
        if not self.ssl_enabled:
            return
        self.ssl_enabled = False
        self.should_update()

    def create(self):
        self._validate_host_port('create a patch source')
        return super(PatchExternalSource, self).create()

    def update(self):
        self._validate_host_port('update a patch source')
        return super(PatchExternalSource, self).update()

    def rest_element(self):
        root = super(PatchExternalSource, self).rest_element()
        add_text(root, 'enabled', bool_text(self.enabled))
        add_text(root, 'ssl_enabled', bool_text(self.ssl_enabled))
        add_text(root, 'host_name', self.host_name)
        add_text(root, 'port', self.port)
        return root


# Titles ###################################################################

class PatchTitleVersion(object):
    """One version of a patch title, and the package installing it."""

    def __init__(self, title, data):
        self.title = title
        self.version = str(data.get('software_version'))
        self.size = data.get('size')
        self.computers = as_list(data.get('computers'), 'computer')
        package = data.get('package') or {}
        package_id = JSSObject._parse_id(package.get('id'))
        self.package_id = package_id if package_id and package_id > 0 \
            else None
        self.package_name = package.get('name') if self.package_id else None

    def __repr__(self):
        return "<PatchTitleVersion %s package=%r>" % (self.version,
                                                      self.package_name)

    @property
    def package_assigned(self):
        return self.package_id is not None

    @property
    def computer_ids(self):
        return [int(comp['id']) for comp in self.computers]

    @property
    def computer_names(self):
        return [comp.get('name') for comp in self.computers]

    @property
    def computer_serial_numbers(self):
        return [comp.get('serial_number') for comp in self.computers]

    def set_package(self, package):
        """Assign a package, by name or id, to install this version.

        None removes the assignment.

        """
        from .package import Package
        if self.version == UNKNOWN_VERSION_ID:
            raise UnsupportedError("Packages can't be assigned to the "
                                   "Unknown version.")
        if package is None:
            package_id = None
        else:
            package_id = Package.valid_id(self.title.jss, package,
                                          refresh=True)
            if package_id is None:
                raise NoSuchItemError("No Package matches '%s'" % package)
        if package_id == self.package_id:
            return
        self.package_id = package_id
        self.package_name = (Package.map_all_ids_to(self.title.jss, 'name')
                             [package_id] if package_id else None)
        self.title.changed_pkg_for_version(self.version)


class PatchTitle(Categorizable, Sitable, JSSObject):
    """A patch software title configured from a patch source."""
    _url = 'patchsoftwaretitles'
    container = 'patch_software_titles'
    list_type = 'patch_software_title'
    site_subset = None
    search_types = {'name': 'name', 'name_id': 'name_id'}

    @classmethod
    def all_name_ids(cls, jss, refresh=False):
        return [item.get('name_id') for item in cls.all(jss, refresh)]

    @classmethod
    def all_source_ids(cls, jss, refresh=False):
        return sorted({int(item['source_id']) for item in cls.all(jss, refresh)
                       if item.get('source_id') is not None})

    @classmethod
    def all_for_source(cls, jss, source_id, refresh=False):
        return [item for item in cls.all(jss, refresh)
                if str(item.get('source_id')) == str(source_id)]

    @classmethod
    def patch_report(cls, jss, title, version='all'):
        """Return {'total_computers', 'total_versions', 'versions'} for
        a title, where versions maps each version to its computers.

        version is 'all', 'latest', 'unknown', or a version string.

        """
        title_id = cls.valid_id(jss, title)
        if title_id is None:
            raise NoSuchItemError("No PatchTitle matches '%s'" % title)
        rsrc = '%s/%s' % (REPORTS_RSRC, title_id)
        if version == 'latest':
            rsrc += '/version/%s' % LATEST_VERSION_ID
        elif version == 'unknown':
            rsrc += '/version/%s' % UNKNOWN_VERSION_ID
        elif version != 'all':
            rsrc += '/version/%s' % version
        raw = jss.get(rsrc).get('patch_report') or {}
        return {
            'total_computers': int(raw.get('total_computers') or 0),
            'total_versions': int(raw.get('total_versions') or 0),
            'versions': {
                str(item.get('software_version')):
                    as_list(item.get('computers'), 'computer')
                for item in as_list(raw.get('versions'), 'version')}}

    def new(self, name, **kwargs):
        if 'source' in kwargs:
            self.set_source_id(kwargs['source'])
        if 'name_id' in kwargs:
            self.set_name_id(kwargs['name_id'])

    def _load(self):
        super(PatchTitle, self)._load()
        self.name_id = self.data.get('name_id')
        self.source_id = self._parse_id(self.data.get('source_id'))
        notifications = self.data.get('notifications') or {}
        self.web_notification = to_bool(
            notifications.get('web_notification'))
        self.email_notification = to_bool(
            notifications.get('email_notification'))
        self.versions = {}
        for data in as_list(self.data.get('versions'), 'version'):
            version = PatchTitleVersion(self, data)
            self.versions[version.version] = version
        self.changed_pkgs = []

    @property
    def versions_with_packages(self):
        return {key: version for key, version in self.versions.items()
                if version.package_assigned}

    def changed_pkg_for_version(self, version):
        if version not in self.changed_pkgs:
            self.changed_pkgs.append(version)
        self.should_update()

    def set_web_notification(self, value):
        validate_bool(value, 'web_notification')
        if value == self.web_notification:
            return
        self.web_notification = value
        self.should_update()

    def set_email_notification(self, value):
        validate_bool(value, 'email_notification')
        if value == self.email_notification:
            return
        self.email_notification = value
        self.should_update()

    def set_source_id(self, source):
        source_id = PatchSource.valid_patch_source_id(self.jss, source)
        if source_id is None:
            raise NoSuchItemError("No Patch Sources match '%s'" % source)
        if source_id == self.source_id:
            return
        self.source_id = source_id
        self.should_update()

    def set_name_id(self, name_id):
        if name_id == self.name_id:
            return
        if self.source_id is None:
            raise MissingDataError("source_id must be set before setting "
                                   "name_id")
        if name_id not in PatchSource.available_name_ids(self.jss,
                                                         self.source_id):
            raise NoSuchItemError("source_id %s doesn't offer name_id '%s'"
                                  % (self.source_id, name_id))
        self.name_id = name_id
        self.should_update()

    def _validate_for_saving(self):
        if self.source_id is None or not self.name_id:
            raise MissingDataError("PatchTitles must have valid source_id "
                                   "and name_id")

    def create(self):
        self._validate_for_saving()
        result = super(PatchTitle, self).create()
        self.versions = self.fetch(self.jss, self.id).versions
        for version in self.versions.values():
            version.title = self
        self.changed_pkgs = []
        return result

    def update(self):
        self._validate_for_saving()
        result = super(PatchTitle, self).update()
        self.changed_pkgs = []
        return result

    def report(self, version='all'):
        return self.patch_report(self.jss, self.id, version)

    def rest_element(self):
        root = super(PatchTitle, self).rest_element()
        add_text(root, 'name_id', self.name_id)
        add_text(root, 'source_id', self.source_id)
        notifications = ElementTree.SubElement(root, 'notifications')
        add_text(notifications, 'web_notification',
                 bool_text(self.web_notification))
        add_text(notifications, 'email_notification',
                 bool_text(self.email_notification))
        if self.changed_pkgs:
            versions = ElementTree.SubElement(root, 'versions')
            for key in self.changed_pkgs:
                version = ElementTree.SubElement(versions, 'version')
                add_text(version, 'software_version', key)
                package = ElementTree.SubElement(version, 'package')
                if self.versions[key].package_id:
                    add_text(package, 'id', self.versions[key].package_id)
        self.add_category_to_xml(root)
        self.add_site_to_xml(root)
        return root


# Policies #################################################################

class PatchPolicy(Scopable, SelfServable, JSSObject):
    """A policy installing one version of a patch title.

    Patch policies are created under their title, and target a version
    that has a package assigned.

    """
    _url = 'patchpolicies'
    container = 'patch_policies'
    list_type = 'patch_policy'
    main_subset = 'general'
    title_rsrc = 'patchpolicies/softwaretitleconfig/id'
    self_service_config = {
        'in_self_service_data_path': ('general', 'distribution_method'),
        'in_self_service': PATCHPOL_SELF_SERVICE,
        'not_in_self_service': PATCHPOL_AUTO,
        'self_service_subset': 'user_interaction',
        'targets': ('macos',),
        'payload': 'patchpolicy',
        'can_display_in_categories': False,
        'can_feature_in_categories': False}

    @classmethod
    def all_for_title(cls, jss, title):
        title_id = PatchTitle.valid_id(jss, title)
        if title_id is None:
            raise NoSuchItemError("No PatchTitle matching '%s'" % title)
        data = jss.get('%s/%s' % (cls.title_rsrc, title_id))
        return as_list(data.get('patch policies') or
                       data.get('patch_policies'), 'patch_policy')

    def new(self, name, **kwargs):
        """Make a new patch policy. patch_title is required."""
        title = kwargs.get('patch_title')
        if title is None:
            raise MissingDataError("patch_title is required")
        if isinstance(title, PatchTitle):
            self._patch_title = title
            title = title.id
        self.patch_title_id = PatchTitle.valid_id(self.jss, title)
        if self.patch_title_id is None:
            raise NoSuchItemError("No Patch Title matches '%s'" % title)
        if kwargs.get('target_version') is not None:
            self.set_target_version(kwargs['target_version'])

    def _load(self):
        super(PatchPolicy, self)._load()
        general = self.main_data
        self._patch_title = None
        self.patch_title_id = self._parse_id(
            self.data.get('software_title_configuration_id'))
        self.enabled = to_bool(general.get('enabled'))
        self.target_version = general.get('target_version')
        self.allow_downgrade = to_bool(general.get('allow_downgrade'))
        self.patch_unknown = to_bool(general.get('patch_unknown'))
        self._load_version_info(general)

        interaction = self.data.get('user_interaction') or {}
        deadlines = interaction.get('deadlines') or {}
        if to_bool(deadlines.get('deadline_enabled')):
            self.deadline = int(deadlines.get('deadline_period') or
                                DEFAULT_DEADLINE)
        else:
            self.deadline = NO_DEADLINE
        grace = interaction.get('grace_period') or {}
        duration = grace.get('grace_period_duration')
        self.grace_period = (int(duration) if duration not in (None, '')
                             else DEFAULT_GRACE_PERIOD)
        self.grace_period_subject = (grace.get('notification_center_subject')
                                     or DEFAULT_GRACE_PERIOD_SUBJECT)
        self.grace_period_message = (grace.get('message') or
                                     DEFAULT_GRACE_PERIOD_MESSAGE)
        self._refetch_for_new_version = False

    def _load_version_info(self, general):
        self.release_date = epoch_to_datetime(general.get('release_date'))
        self.incremental_update = to_bool(general.get('incremental_update'))
        self.reboot = to_bool(general.get('reboot'))
        self.minimum_os = general.get('minimum_os')
        self.kill_apps = as_list(general.get('kill_apps'), 'kill_app')

    def patch_title(self, refresh=False):
        if refresh or self._patch_title is None:
            self._patch_title = PatchTitle.fetch(self.jss,
                                                 self.patch_title_id)
        return self._patch_title

    def _validate_target_version(self, version):
        if not version:
            raise MissingDataError("target_version can't be empty")
        title = self.patch_title(refresh=True)
        if version not in title.versions:
            raise NoSuchItemError("Version '%s' does not exist for title: %s"
                                  % (version, title.name))
        if version not in title.versions_with_packages:
            raise UnsupportedError("Version '%s' cannot be used in Patch "
                                   "Policies until a package is assigned to "
                                   "it." % version)
        return version

    def set_target_version(self, version):
        if version == self.target_version:
            return
        self.target_version = self._validate_target_version(version)
        self._refetch_for_new_version = True
        self.should_update()

    def enable(self):
        if self.enabled:
            return
        self.enabled = True
        self.should_update()

    def disable(self):
        if not self.enabled:
            return
        self.enabled = False
        self.should_update()

    def set_allow_downgrade(self, value):
        validate_bool(value, 'allow_downgrade')
        if value == self.allow_downgrade:
            return
        self.allow_downgrade = value
        self.should_update()

    def set_patch_unknown(self, value):
        validate_bool(value, 'patch_unknown')
        if value == self.patch_unknown:
            return
        self.patch_unknown = value
        self.should_update()

    def set_deadline(self, days):
        """Set the install deadline in days. None or 0 removes it."""
        if days is not NO_DEADLINE:
            days = validate_integer(days, 'deadline')
            if days <= 0:
                days = NO_DEADLINE
        if days == self.deadline:
            return
        self.deadline = days
        self.should_update()

    def set_grace_period(self, minutes):
        minutes = max(validate_integer(minutes, 'grace_period'), 0)
        if minutes == self.grace_period:
            return
        self.grace_period = minutes
        self.should_update()

    def set_grace_period_subject(self, subject):
        subject = str(subject)
        if subject == self.grace_period_subject:
            return
        self.grace_period_subject = subject
        self.should_update()

    def set_grace_period_message(self, message):
        if message == self.grace_period_message:
            return
        self.grace_period_message = message
        self.should_update()

    def get_post_url(self):
        return '%s/%s' % (self.title_rsrc, self.patch_title_id)

    def _refetch_version_info(self):
        fresh = self.fetch(self.jss, self.id)
        self._load_version_info(fresh.main_data)

    def create(self):
        self._validate_target_version(self.target_version)
        result = super(PatchPolicy, self).create()
        self._refetch_version_info()
        return result

    def update(self):
        self._validate_target_version(self.target_version)
        result = super(PatchPolicy, self).update()
        if result is not None and self._refetch_for_new_version:
            self._refetch_version_info()
            self._refetch_for_new_version = False
        return result

    def rest_element(self):
        root = super(PatchPolicy, self).rest_element()
        general = root.find('general')
        add_text(general, 'target_version', self.target_version)
        add_text(general, 'enabled', bool_text(self.enabled))
        add_text(general, 'allow_downgrade', bool_text(self.allow_downgrade))
        add_text(general, 'patch_unknown', bool_text(self.patch_unknown))
        root.append(self.scope.scope_xml())
        self.add_self_service_xml(root)

        interaction = root.find('user_interaction')
        deadlines = ElementTree.SubElement(interaction, 'deadlines')
        if self.deadline is NO_DEADLINE:
            add_text(deadlines, 'deadline_enabled', 'false')
        else:
            add_text(deadlines, 'deadline_enabled', 'true')
            add_text(deadlines, 'deadline_period', self.deadline)
        grace = ElementTree.SubElement(interaction, 'grace_period')
        add_text(grace, 'grace_period_duration', self.grace_period)
        add_text(grace, 'notification_center_subject',
                 self.grace_period_subject)
        add_text(grace, 'message', self.grace_period_message)
        return root

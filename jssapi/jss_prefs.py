#!/usr/bin/env python
"""jss_prefs.py

Preferences file handling for python-jssapi.
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
import plistlib

from .exceptions import JSSPrefsMissingFileError, JSSPrefsMissingKeyError


logger = logging.getLogger(__name__)

DEFAULT_PREFS_FILE = (
    '~/Library/Preferences/com.github.sheagcraig.python-jss.plist')
DEFAULT_TIMEOUT = 60


class JSSPrefs(object):
    """Uses the OS X preferences system to store credentials and JSS URL."""
    def __init__(self, preferences_file=None):
        """Create a preferences object.

        preferences_file: Alternate location to look for preferences.

        Preference file should include the following keys:
            jss_url:        Full path, including port, to JSS,
                            e.g. 'https://mycasper.donkey.com:8443'
                            (JSS() handles the appending of /JSSResource)
            jss_user:       API username to use.
            jss_pass:       API password.

        Optional keys:
            verify:         Boolean, whether to verify SSL certificates.
                            Defaults to True.
            timeout:        Seconds to wait for a response. Defaults to 60.
            repos:          Array of dicts with 'name' and 'password' keys
                            for distribution point file shares.

        """
        if preferences_file is None:
            preferences_file = DEFAULT_PREFS_FILE
        preferences_file = os.path.expanduser(preferences_file)
        if not os.path.exists(preferences_file):
            raise JSSPrefsMissingFileError("Preferences file not found!")

        # plistlib reads both xml and binary plists.
        with open(preferences_file, 'rb') as handle:
            prefs = plistlib.load(handle)
        logger.debug("Read preferences from %s", preferences_file)

        try:
            self.user = prefs['jss_user']
            self.password = prefs['jss_pass']
            self.url = prefs['jss_url']
        except KeyError:
            raise JSSPrefsMissingKeyError("Please provide all required"
                                          " preferences!")
        self.verify = prefs.get('verify', True)
        self.timeout = prefs.get('timeout', DEFAULT_TIMEOUT)
        self.repos = prefs.get('repos', [])
        self.preferences_file = preferences_file

    def repo_password(self, name):
        """Return the password for the distribution point called name."""
        for repo in self.repos:
            if repo.get('name') == name:
                return repo.get('password')
        return None

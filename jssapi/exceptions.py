#!/usr/bin/env python
"""exceptions.py

Exceptions raised by python-jssapi.
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


class JSSError(Exception):
    """Base class for everything raised by this package."""
    status_code = None


class JSSPrefsMissingFileError(JSSError):
    pass


class JSSPrefsMissingKeyError(JSSError):
    pass


class InvalidConnectionError(JSSError):
    """The JSS object has no usable connection."""
    pass


class MissingDataError(JSSError):
    pass


class InvalidDataError(JSSError):
    pass


class NoSuchItemError(JSSError):
    pass


class AlreadyExistsError(JSSError):
    pass


class AmbiguousError(JSSError):
    """A lookup value matched more than one object."""
    pass


class UnsupportedError(JSSError):
    """The operation is not available for this object or class."""
    pass


class UnmanagedError(JSSError):
    """An MDM command was aimed at a device that isn't managed."""
    pass


class FileServiceError(JSSError):
    """Mounting or unmounting a file share failed."""
    pass


class JSSTimeoutError(JSSError):
    pass


class APIRequestError(JSSError):
    """The JSS answered a request with an error status."""
    pass


class BadRequestError(APIRequestError):
    pass


class AuthenticationError(APIRequestError):
    pass


class AuthorizationError(APIRequestError):
    pass


class ConflictError(APIRequestError):
    """HTTP 409. The message holds the JSS's explanation."""
    pass

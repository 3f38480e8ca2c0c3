#!/usr/bin/env python
"""file_upload.py

Attach files, icons and app binaries to JSS objects.
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

from .exceptions import InvalidDataError


logger = logging.getLogger(__name__)


class FileUpload(object):
    """FileUploads are a special case in the API. They allow you to add
    file resources to a number of objects on the JSS.

    To use, instantiate a new FileUpload object, then use the save() method to
    upload.

    Once the upload has been posted you may only interact with it through the
    web interface. You cannot list/get it or delete it through the API.

    """
    _url = 'fileuploads'
    resource_types = ['computers', 'mobiledevices', 'enrollmentprofiles',
                      'peripherals', 'policies', 'ebooks',
                      'mobiledeviceapplications',
                      'mobiledeviceapplicationsicon',
                      'mobiledeviceapplicationsipa',
                      'diskencryptionconfigurations', 'printers']
    id_types = ['id', 'name']

    def __init__(self, j, resource_type, id_type, _id, resource):
        """Prepare a new FileUpload.

        j:                  A JSS object to POST the upload to.
        resource_type:      String, one of FileUpload.resource_types.
        id_type:            'id' or 'name'.
        _id                 Int or String referencing the identity value of
                            the resource to add the FileUpload to.
        resource            String path to the file to upload.

        """
        self.jss = j

        # Do some basic error checking on parameters.
        if resource_type not in self.resource_types:
            raise InvalidDataError("resource_type must be one of: %s" %
                                   self.resource_types)
        if id_type not in self.id_types:
            raise InvalidDataError("id_type must be one of: %s" %
                                   self.id_types)
        if not os.path.isfile(resource):
            raise InvalidDataError("No file found at %s" % resource)

        self.resource_type = resource_type
        self.id_type = id_type
        self._id = str(_id)
        self.resource = resource

    @property
    def upload_url(self):
        return '/'.join([self._url, self.resource_type, self.id_type,
                         self._id])

    def save(self):
        """POST the file to the JSS."""
        logger.debug("Uploading %s to %s", self.resource, self.upload_url)
        return self.jss.upload(self.upload_url, self.resource)

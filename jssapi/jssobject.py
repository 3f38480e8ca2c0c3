#!/usr/bin/env python
"""jssobject.py

Base classes for representing JSS API objects.
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

import copy
import logging
import re
from xml.etree import ElementTree

from .exceptions import (
    AlreadyExistsError, AmbiguousError, InvalidDataError, MissingDataError,
    NoSuchItemError, UnsupportedError)
from .file_upload import FileUpload
from .tools import XML_HEADER, add_text, as_list, to_bool


logger = logging.getLogger(__name__)


class JSSObject(object):
    """Base class for representing all available JSS API objects.

    Subclasses describe their REST resource with class attributes:
        _url:           Resource base, e.g. 'computers'.
        list_url:       Resource for list operations, if not _url.
        container:      Key holding the list in list responses.
        list_type:      Key holding the object in GET responses, and the
                        root element of its XML.
        id_url:         Path segment preceding the id in object urls.
        search_types:   Maps lookup keys usable in fetch() ('name',
                        'serial_number=...') to keys of the list data.
        main_subset:    Key of the subset holding id and name, if the
                        object nests them (usually 'general').
        upload_types:   Maps upload() types to FileUpload resource types.

    Objects are either retrieved from the JSS (in_jss is True) or created
    locally with a name and later saved with create(). Setters mark the
    object with need_to_update, and update() PUTs the whole object.

    """
    _url = None
    list_url = None
    container = None
    list_type = None
    can_list = True
    can_get = True
    can_put = True
    can_post = True
    can_delete = True
    can_match = False
    id_url = 'id'
    default_search = 'name'
    search_types = {'name': 'name'}
    main_subset = None
    upload_types = {}

    def __init__(self, jss, data, **kwargs):
        """Initialize a new JSSObject

        jss:    JSS object.
        data:   A dict of data from the JSS, or a string name to make a
                new object that doesn't exist on the JSS yet. Extra
                keyword arguments are passed to new().

        """
        self.jss = jss
        self.need_to_update = False
        if isinstance(data, str):
            self._validate_new_name(data)
            self.in_jss = False
            self.data = {}
            self._id = None
            self._name = data
            self._load()
            self.new(data, **kwargs)
        elif isinstance(data, dict):
            # GET responses wrap the object in its type key.
            if self.list_type in data and isinstance(data[self.list_type],
                                                     dict):
                data = data[self.list_type]
            self.in_jss = True
            self.data = data
            self._id = self._parse_id(self.main_data.get('id'))
            self._name = self.main_data.get('name')
            self._load()
        else:
            raise TypeError("JSSObjects data argument must be a dict of JSS"
                            " data, or a string for the name.")

    def new(self, name, **kwargs):
        """Hook for subclasses to set up a newly made object."""
        pass

    def _load(self):
        """Parse self.data into attributes.

        Subclasses and mixins extend this, calling super() first.

        """
        pass

    @staticmethod
    def _parse_id(value):
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @property
    def main_data(self):
        """The subset of data holding id and name."""
        if self.main_subset:
            return self.data.setdefault(self.main_subset, {})
        return self.data

    def _validate_new_name(self, name):
        if not self.can_post:
            raise UnsupportedError("%s objects can't be created." %
                                   self.__class__.__name__)
        if not name or not str(name).strip():
            raise MissingDataError("A name is required to make a new %s." %
                                   self.__class__.__name__)
        if self.valid_id(self.jss, name, key='name') is not None:
            raise AlreadyExistsError("A %s named '%s' already exists." %
                                     (self.__class__.__name__, name))

    # List operations ######################################################

    @classmethod
    def _fetch_list(cls, jss):
        """GET the list resource and return its items."""
        data = jss.get(cls.list_url or cls._url)
        return as_list(data.get(cls.container))

    @classmethod
    def all(cls, jss, refresh=False):
        """Return the list data for this class, cached per JSS."""
        if refresh:
            jss.flushcache(cls)
        if cls not in jss.object_list_cache:
            jss.object_list_cache[cls] = cls._fetch_list(jss)
        return jss.object_list_cache[cls]

    @classmethod
    def all_ids(cls, jss, refresh=False):
        return [int(item['id']) for item in cls.all(jss, refresh)]

    @classmethod
    def all_names(cls, jss, refresh=False):
        return [item.get('name') for item in cls.all(jss, refresh)]

    @classmethod
    def map_all_ids_to(cls, jss, key, refresh=False):
        """Return a dict of {id: value of key} for every listed object."""
        return {int(item['id']): item.get(key)
                for item in cls.all(jss, refresh)}

    @classmethod
    def all_objects(cls, jss, refresh=False):
        """Fetch the full object for every listed id. This can be slow."""
        return [cls.fetch(jss, obj_id)
                for obj_id in cls.all_ids(jss, refresh)]

    @classmethod
    def valid_id(cls, jss, ident, refresh=False, key=None):
        """Return the id of the object matching ident, or None.

        ident may be an id or a value of any of the class's search
        types. Text comparison ignores case. Matching more than one
        object raises AmbiguousError.

        """
        if ident is None or ident == '':
            return None
        items = cls.all(jss, refresh)

        if key is None or key == 'id':
            # Test for a string representation of an integer
            try:
                as_int = int(ident)
            except (ValueError, TypeError):
                as_int = None
            if as_int is not None and not isinstance(ident, bool):
                if as_int in [int(item['id']) for item in items]:
                    return as_int
            if key == 'id':
                return None

        keys = [key] if key else sorted(set(cls.search_types.values()))
        wanted = str(ident).lower()
        matches = set()
        for item in items:
            for search_key in keys:
                value = item.get(search_key)
                if value is not None and str(value).lower() == wanted:
                    matches.add(int(item['id']))
        if len(matches) > 1:
            raise AmbiguousError("'%s' matches more than one %s: %s" % (
                ident, cls.__name__, sorted(matches)))
        return matches.pop() if matches else None

    @classmethod
    def exist(cls, jss, ident, refresh=False):
        return cls.valid_id(jss, ident, refresh) is not None

    @classmethod
    def get_url(cls, obj_id):
        """Return the URL for a get request for obj_id."""
        return '%s/%s/%s' % (cls._url, cls.id_url, obj_id)

    @classmethod
    def get_post_url(cls):
        """Return the post URL for this object class."""
        # The JSS expects a post to ID 0 to create an object
        return cls.get_url(0)

    @classmethod
    def fetch(cls, jss, ident):
        """Retrieve one object by id, name, or 'key=value'."""
        if not cls.can_get:
            raise UnsupportedError("%s objects can't be retrieved." %
                                   cls.__name__)
        key = None
        if isinstance(ident, str) and '=' in ident:
            search, ident = ident.split('=', 1)
            if search == 'id':
                key = 'id'
            elif search in cls.search_types:
                key = cls.search_types[search]
            else:
                raise UnsupportedError("This object cannot be queried by %s."
                                       % search)
        obj_id = cls.valid_id(jss, ident, key=key)
        if obj_id is None:
            raise NoSuchItemError("No %s found matching '%s'." %
                                  (cls.__name__, ident))
        return cls(jss, jss.get(cls.get_url(obj_id)))

    @classmethod
    def match(cls, jss, term):
        """Return list data for objects matching term across many fields.

        Only available for classes with can_match. '*' is a wildcard.

        """
        if not cls.can_match:
            raise UnsupportedError("%s objects can't be matched." %
                                   cls.__name__)
        if not term or not str(term).strip():
            raise InvalidDataError("Match term may not be empty.")
        data = jss.get('%s/match/%s' % (cls._url, term))
        return as_list(data.get(cls.container))

    # Shared properties ####################################################

    @property
    def id(self):
        """Return object ID or None."""
        return self._id

    @property
    def name(self):
        """Return object name or None."""
        return self._name

    @name.setter
    def name(self, new_name):
        if new_name == self._name:
            return
        if not self.can_put and self.in_jss:
            raise UnsupportedError("%s objects can't be updated." %
                                   self.__class__.__name__)
        if not new_name or not str(new_name).strip():
            raise InvalidDataError("Names may not be empty.")
        existing = self.valid_id(self.jss, new_name, key='name')
        if existing is not None and existing != self.id:
            raise AlreadyExistsError("A %s named '%s' already exists." %
                                     (self.__class__.__name__, new_name))
        self._name = new_name
        self.need_to_update = True

    def should_update(self):
        """Flag this object for saving. Called by parts like Scope."""
        self.need_to_update = True

    def __repr__(self):
        return "<%s id=%s name=%r%s>" % (
            self.__class__.__name__, self.id, self.name,
            '' if self.in_jss else ' (not in JSS)')

    def as_list_data(self):
        """Return a dict with id and name for adding to lists."""
        return {'id': self.id, 'name': self.name}

    # Saving ###############################################################

    def get_object_url(self):
        """Return the API resource for this object."""
        return self.get_url(self.id)

    def rest_element(self):
        """Return an Element holding this object's data for PUT/POST.

        Subclasses extend the element returned by super().

        """
        root = ElementTree.Element(self.list_type)
        if self.main_subset:
            parent = ElementTree.SubElement(root, self.main_subset)
        else:
            parent = root
        add_text(parent, 'name', self.name)
        return root

    def rest_xml(self):
        """Return the XML string sent to the JSS."""
        return XML_HEADER + ElementTree.tostring(self.rest_element(),
                                                 encoding='unicode')

    def create(self):
        """POST this new object to the JSS, and return its new id."""
        if not self.can_post:
            raise UnsupportedError("%s objects can't be created." %
                                   self.__class__.__name__)
        if self.in_jss:
            raise AlreadyExistsError("This %s already exists. Use update() to"
                                     " save changes." %
                                     self.__class__.__name__)
        response = self.jss.post(self.get_post_url(), self.rest_xml())
        # Get the ID of the new object.
        result = re.search(r'<id>(\d+)</id>', response)
        if result is None:
            raise InvalidDataError("No id in response to POST: %s" % response)
        self._id = int(result.group(1))
        self.in_jss = True
        self.need_to_update = False
        self.jss.flushcache(self.__class__)
        logger.debug("Created %s %s (%s).", self.__class__.__name__,
                     self.id, self.name)
        return self.id

    def update(self):
        """PUT local changes to the JSS. Returns None if there were none."""
        if not self.can_put:
            raise UnsupportedError("%s objects can't be updated." %
                                   self.__class__.__name__)
        if not self.need_to_update:
            return None
        if not self.in_jss:
            raise NoSuchItemError("This %s isn't in the JSS yet. Use "
                                  "create()." % self.__class__.__name__)
        self.jss.put(self.get_object_url(), self.rest_xml())
        self.need_to_update = False
        self.jss.flushcache(self.__class__)
        logger.debug("Updated %s %s (%s).", self.__class__.__name__,
                     self.id, self.name)
        return self.id

    def save(self):
        """Update existing objects or create new object on the JSS.

        Data validation is up to the setters.

        """
        if self.in_jss:
            return self.update()
        return self.create()

    def delete(self):
        """Delete this object from the JSS."""
        if not self.can_delete:
            raise UnsupportedError("%s objects can't be deleted." %
                                   self.__class__.__name__)
        if not self.in_jss:
            return
        self.jss.delete(self.get_object_url())
        self.in_jss = False
        self.need_to_update = False
        self.jss.flushcache(self.__class__)
        logger.debug("Deleted %s %s (%s).", self.__class__.__name__,
                     self.id, self.name)

    def clone(self, new_name):
        """Return an unsaved copy of this object named new_name."""
        self._validate_new_name(new_name)
        # Share the connection rather than copying it.
        new_obj = copy.deepcopy(self, {id(self.jss): self.jss})
        new_obj._id = None
        new_obj._name = new_name
        new_obj.in_jss = False
        new_obj.need_to_update = False
        new_obj.main_data.pop('id', None)
        return new_obj

    def upload(self, upload_type, local_file):
        """Upload local_file to this object, e.g. an icon or attachment."""
        if upload_type not in self.upload_types:
            raise InvalidDataError("upload_type must be one of: %s" %
                                   ', '.join(sorted(self.upload_types)))
        if not self.in_jss:
            raise NoSuchItemError("Create this %s in the JSS before uploading"
                                  " to it." % self.__class__.__name__)
        uploader = FileUpload(self.jss, self.upload_types[upload_type], 'id',
                              self.id, local_file)
        return uploader.save()

    # Display ##############################################################

    def _indent(self, elem, level=0, more_sibs=False):
        """Indent an xml element object to prepare for pretty printing."""
        i = "\n"
        pad = '    '
        if level:
            i += (level - 1) * pad
        num_kids = len(elem)
        if num_kids:
            if not elem.text or not elem.text.strip():
                elem.text = i + pad
                if level:
                    elem.text += pad
            count = 0
            for kid in elem:
                self._indent(kid, level+1, count < num_kids - 1)
                count += 1
            if not elem.tail or not elem.tail.strip():
                elem.tail = i
                if more_sibs:
                    elem.tail += pad
        else:
            if level and (not elem.tail or not elem.tail.strip()):
                elem.tail = i
                if more_sibs:
                    elem.tail += pad

    def pretty_xml(self):
        """Return the object's XML, indented for reading."""
        element = self.rest_element()
        self._indent(element)
        return ElementTree.tostring(element, encoding='unicode')


class JSSDeviceObject(JSSObject):
    """Provides convenient accessors for properties of devices.

    This is helpful since Computers and MobileDevices allow us to query
    based on these properties.

    """
    main_subset = 'general'
    can_match = True

    def _load(self):
        super(JSSDeviceObject, self)._load()
        general = self.main_data
        self.udid = general.get('udid')
        self.serial_number = general.get('serial_number')
        self.asset_tag = general.get('asset_tag')
        self.managed = to_bool(general.get('remote_management', {}).get(
            'managed', general.get('managed')))

    def set_asset_tag(self, value):
        value = value.strip() if value else value
        if value == self.asset_tag:
            return
        self.asset_tag = value
        self.should_update()


class JSSListData(dict):
    """Holds information retrieved as part of a list operation."""
    def __init__(self, obj_class, d):
        self.obj_class = obj_class
        super(JSSListData, self).__init__(d)

    @property
    def id(self):
        return int(self['id'])

    @property
    def name(self):
        return self.get('name')


class JSSObjectList(list):
    """A list style collection of JSSObjects.

    List operations retrieve only minimal information for most object types.
    Further, we may want to know all Computer(s) to get their ID's, but that
    does not mean we want to do a full object search for each one. Thus,
    methods are provided to both retrieve individual members' full
    information, and to retrieve the full information for the entire list.

    """
    def __init__(self, factory, obj_class, objects):
        self.factory = factory
        self.obj_class = obj_class
        super(JSSObjectList, self).__init__(objects)

    def __repr__(self):
        """Make our data human readable."""
        delimeter = 50 * '-' + '\n'
        output_string = delimeter
        for index, obj in enumerate(self):
            output_string += "List index: \t%s\n" % index
            for k, v in obj.items():
                output_string += "%s:\t\t%s\n" % (k, v)
            output_string += delimeter
        return output_string

    def sort(self):
        """Sort list elements by ID."""
        super(JSSObjectList, self).sort(key=lambda k: k.id)

    def sort_by_name(self):
        """Sort list elements by name."""
        super(JSSObjectList, self).sort(key=lambda k: k.name or '')

    def retrieve(self, index):
        """Return a JSSObject for the JSSListData element at index."""
        return self.factory.get_object(self.obj_class, self[index].id)

    def retrieve_by_id(self, id_):
        """Return a JSSObject for the JSSListData element with ID id_."""
        for item in self:
            if item.id == int(id_):
                return self.factory.get_object(self.obj_class, item.id)
        raise NoSuchItemError("No %s with id %s in this list." %
                              (self.obj_class.__name__, id_))

    def retrieve_all(self):
        """Return a list of all JSSListData elements as full JSSObjects.

        Note: This can take a long time given a large number of objects, and
        depending on the size of each object.

        """
        return [self.factory.get_object(self.obj_class, item.id)
                for item in self]

#!/usr/bin/env python
"""tools.py

Helper functions for converting between JSS data and python values.
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

import datetime
import re
from xml.etree import ElementTree

from .exceptions import InvalidDataError


XML_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'

# The JSS sends timestamps as milliseconds since the epoch.
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

DATE_FORMATS = ('%Y-%m-%dT%H:%M:%S.%f%z', '%Y-%m-%dT%H:%M:%S%z',
                '%Y-%m-%d %H:%M:%S', '%Y/%m/%d at %I:%M %p',
                '%Y-%m-%d')


def to_bool(value):
    """Return a python bool for the various ways the JSS says yes."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('true', 'yes', '1')


def bool_text(value):
    """Return the JSS string representation of a boolean."""
    if bool(value) is True:
        return 'true'
    else:
        return 'false'


def validate_bool(value, field='value'):
    """Return value if it is a real bool, else raise InvalidDataError."""
    if not isinstance(value, bool):
        raise InvalidDataError("%s must be True or False." % field)
    return value


def validate_integer(value, field='value'):
    """Coerce value to int or raise InvalidDataError."""
    if isinstance(value, bool):
        raise InvalidDataError("%s must be an integer." % field)
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        raise InvalidDataError("%s must be an integer, not '%s'." %
                               (field, value))


def epoch_to_datetime(epoch):
    """Convert a JSS millisecond epoch to an aware datetime.

    Zero, empty, and missing values give None.

    """
    try:
        epoch = int(epoch)
    except (ValueError, TypeError):
        return None
    if epoch == 0:
        return None
    return EPOCH + datetime.timedelta(milliseconds=epoch)


def datetime_to_epoch(value):
    """Convert a datetime (or date) to a JSS millisecond epoch."""
    if value is None:
        return 0
    if isinstance(value, datetime.date) and not isinstance(
            value, datetime.datetime):
        value = datetime.datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return int((value - EPOCH).total_seconds() * 1000)


def parse_datetime(value):
    """Parse one of the timestamp strings the JSS uses, or return None."""
    if not value:
        return None
    if isinstance(value, datetime.datetime):
        return value
    value = str(value).strip()
    # utc strings arrive with a bare Z.
    value = re.sub(r'Z$', '+0000', value)
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise InvalidDataError("Can't parse '%s' as a date." % value)


def name_of(data):
    """Return the name from a JSS {id, name} dict, or the value itself."""
    if isinstance(data, dict):
        return data.get('name')
    return data


def as_list(data, key=None):
    """Normalize JSS list-ish data to a list.

    Single-item lists sometimes arrive as a bare dict, wrapped in their
    singular key.

    """
    if not data:
        return []
    if isinstance(data, dict):
        if key is not None and key in data:
            return as_list(data[key])
        return [data]
    return list(data)


def add_text(parent, tag, text=None):
    """SubElement tag under parent with text converted to str.

    None leaves the element empty.

    """
    element = ElementTree.SubElement(parent, tag)
    if isinstance(text, bool):
        element.text = bool_text(text)
    elif text is not None:
        element.text = str(text)
    return element


def add_list(parent, list_tag, item_tag, items, keys=('id', 'name')):
    """Append a list of {id, name} style dicts as a list element."""
    list_element = ElementTree.SubElement(parent, list_tag)
    for item in items:
        item_element = ElementTree.SubElement(list_element, item_tag)
        for key in keys:
            if item.get(key) is not None:
                add_text(item_element, key, item[key])
    return list_element


def singularize(key):
    """Return the singular element name for a plural list key."""
    if key.endswith('ies'):
        return key[:-3] + 'y'
    if key.endswith('es') and key[:-2].endswith(('ss', 'sh', 'ch')):
        return key[:-2]
    if key.endswith('s'):
        return key[:-1]
    return key


def validate_priority(value, low, high, field='priority'):
    """Return value as an int between low and high inclusive."""
    value = validate_integer(value, field)
    if not low <= value <= high:
        raise InvalidDataError("%s must be between %s and %s (inclusive)" %
                               (field, low, high))
    return value


def expand_min_os(min_os):
    """Expand '>=10.12.4' to a list of the OS versions it allows.

    Maintenance releases are listed up to 15 and minor releases up to
    10.19.x.

    """
    parts = min_os.replace('>=', '').strip().split('.')
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else '0'
    maint = parts[2] if len(parts) > 2 else 'x'
    if maint in ('x', '0'):
        versions = ['%s.%s.x' % (major, minor)]
    else:
        versions = ['%s.%s.%s' % (major, minor, m)
                    for m in range(int(maint), 16)]
    versions.extend('%s.%s.x' % (major, v) for v in range(int(minor) + 1, 20))
    return versions


def os_requirements_list(value):
    """Normalize an os_requirements value to a list of versions.

    Accepts a comma separated string or a list. Items starting with
    '>=' are expanded with expand_min_os.

    """
    if not value:
        return []
    if isinstance(value, str):
        value = [item.strip() for item in value.split(',')]
    elif not isinstance(value, (list, tuple)):
        raise InvalidDataError("os_requirements must be a string or a list "
                               "of strings")
    result = []
    for item in value:
        item = str(item).strip()
        if not item:
            continue
        expanded = expand_min_os(item) if item.startswith('>=') else [item]
        result.extend(v for v in expanded if v not in result)
    return result


def os_ok(requirements, os_version):
    """Return whether os_version meets a list of os_requirements.

    An empty list, or 'None', allows every version. '10.9.x' allows
    any 10.9 release, and '10.9' allows 10.9 and 10.9.0.

    """
    if not requirements or str(requirements).lower() == 'none':
        return True
    for req in os_requirements_list(requirements):
        if req.endswith('.x'):
            pattern = r'^%s(\.\d+)?$' % re.escape(req[:-2])
        elif re.match(r'^\d+\.\d+$', req):
            pattern = r'^%s(\.0)?$' % re.escape(req)
        else:
            pattern = r'^%s$' % re.escape(req)
        if re.match(pattern, str(os_version)):
            return True
    return False

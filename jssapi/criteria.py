#!/usr/bin/env python
"""criteria.py

Search criteria for smart groups and advanced searches.
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

import re
from xml.etree import ElementTree

from .exceptions import InvalidDataError, MissingDataError, NoSuchItemError
from .tools import add_text, as_list, bool_text, to_bool


SEARCH_TYPES = (
    'is',
    'is not',
    'like',
    'not like',
    'has',
    'does not have',
    'more than',
    'less than',
    'before (yyyy-mm-dd)',
    'after (yyyy-mm-dd)',
    'more than x days ago',
    'less than x days ago',
    'in more than x days',
    'in less than x days',
    'member of',
    'not member of',
    'current',
    'not current',
)
INTEGER_SEARCH_TYPES = ('more than', 'less than', 'more than x days ago',
                        'less than x days ago', 'in more than x days',
                        'in less than x days')
DATE_SEARCH_TYPES = ('before (yyyy-mm-dd)', 'after (yyyy-mm-dd)')
AND_OR = ('and', 'or')


class Criterion(object):
    """One line of a smart group or advanced search."""
    def __init__(self, name, search_type, value, and_or='and', priority=0,
                 opening_paren=False, closing_paren=False):
        self.name = name
        self.priority = priority
        self.opening_paren = opening_paren
        self.closing_paren = closing_paren
        self._and_or = None
        self._search_type = None
        self._value = None
        self.and_or = and_or
        self.search_type = search_type
        self.value = value

    @classmethod
    def from_data(cls, data):
        """Make a Criterion from JSS criterion data."""
        return cls(name=data.get('name'),
                   search_type=data.get('search_type'),
                   value=data.get('value', '') or '',
                   and_or=data.get('and_or') or 'and',
                   priority=int(data.get('priority') or 0),
                   opening_paren=to_bool(data.get('opening_paren')),
                   closing_paren=to_bool(data.get('closing_paren')))

    @property
    def and_or(self):
        return self._and_or

    @and_or.setter
    def and_or(self, value):
        value = str(value).lower()
        if value not in AND_OR:
            raise InvalidDataError("and_or must be 'and' or 'or'.")
        self._and_or = value

    @property
    def search_type(self):
        return self._search_type

    @search_type.setter
    def search_type(self, value):
        if value not in SEARCH_TYPES:
            raise InvalidDataError("Invalid search_type '%s'." % value)
        self._search_type = value
        if self._value is not None:
            self._validate_value(self._value)

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        self._validate_value(value)
        self._value = value

    def _validate_value(self, value):
        if self._search_type in INTEGER_SEARCH_TYPES:
            if not re.match(r'^\d+$', str(value)):
                raise InvalidDataError("Value must be an integer for search "
                                       "type '%s'" % self._search_type)
        elif self._search_type in DATE_SEARCH_TYPES:
            if not re.match(r'^\d{4}-\d\d-\d\d$', str(value)):
                raise InvalidDataError("Value must be a date in the format "
                                       "yyyy-mm-dd for search type '%s'" %
                                       self._search_type)

    @property
    def signature(self):
        return (self.and_or, self.name, self.search_type, str(self.value))

    def __eq__(self, other):
        if not isinstance(other, Criterion):
            return NotImplemented
        return self.signature == other.signature

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self.signature)

    def __repr__(self):
        return "<Criterion %s: %s %s %s '%s'>" % ((self.priority,) +
                                                   self.signature)

    def rest_element(self):
        element = ElementTree.Element('criterion')
        add_text(element, 'name', self.name)
        add_text(element, 'priority', self.priority)
        add_text(element, 'and_or', self.and_or)
        add_text(element, 'search_type', self.search_type)
        add_text(element, 'value', self.value)
        add_text(element, 'opening_paren', bool_text(self.opening_paren))
        add_text(element, 'closing_paren', bool_text(self.closing_paren))
        return element


class Criteria(object):
    """An ordered list of Criterion. Priorities follow list order."""
    def __init__(self, criteria=None, container=None):
        self.container = container
        self.criteria = []
        if criteria:
            self.set_criteria(criteria)

    def __len__(self):
        return len(self.criteria)

    def __iter__(self):
        return iter(self.criteria)

    def __getitem__(self, index):
        return self.criteria[index]

    def __repr__(self):
        return "<Criteria %r>" % self.criteria

    def _changed(self):
        if self.container is not None:
            self.container.should_update()

    def criterion_ok(self, criterion):
        """Raise InvalidDataError unless criterion can be added."""
        if not isinstance(criterion, Criterion):
            raise InvalidDataError("A Criterion instance is required.")
        if any(c == criterion and c is not criterion for c in self.criteria):
            raise InvalidDataError("Duplicate criterion: %s" %
                                   ', '.join(criterion.signature))
        for attr in ('and_or', 'name', 'search_type', 'value'):
            if getattr(criterion, attr) is None:
                raise InvalidDataError("Missing %s for criterion: %s" %
                                       (attr, ', '.join(map(
                                           str, criterion.signature))))
        return True

    def set_criteria(self, new_criteria):
        """Replace all criteria."""
        new_criteria = list(new_criteria)
        self.criteria = []
        for criterion in new_criteria:
            self.criterion_ok(criterion)
            self.criteria.append(criterion)
        self.set_priorities()
        self._changed()

    def append(self, criterion):
        self.criterion_ok(criterion)
        criterion.priority = len(self.criteria)
        self.criteria.append(criterion)
        self._changed()

    def prepend(self, criterion):
        self.criterion_ok(criterion)
        self.criteria.insert(0, criterion)
        self.set_priorities()
        self._changed()

    def insert(self, priority, criterion):
        self.criterion_ok(criterion)
        self.criteria.insert(priority, criterion)
        self.set_priorities()
        self._changed()

    def delete(self, priority):
        """Remove the criterion at priority. The last one can't go."""
        if priority < len(self.criteria):
            if len(self.criteria) == 1:
                raise MissingDataError("Criteria can't be empty")
            del self.criteria[priority]
            self.set_priorities()
            self._changed()

    def set_criterion(self, priority, criterion):
        """Replace the criterion at priority."""
        if not 0 <= priority < len(self.criteria):
            raise NoSuchItemError("No current criterion with priority '%s'"
                                  % priority)
        self.criterion_ok(criterion)
        self.criteria[priority] = criterion
        self.set_priorities()
        self._changed()

    def set_priorities(self):
        for index, criterion in enumerate(self.criteria):
            criterion.priority = index

    def rest_element(self):
        element = ElementTree.Element('criteria')
        for criterion in self.criteria:
            element.append(criterion.rest_element())
        return element


class Criteriable(object):
    """Mixin for objects with a criteria subset."""

    def _load(self):
        super(Criteriable, self)._load()
        raw = as_list(self.data.get('criteria'), 'criterion')
        self._criteria = Criteria(
            [Criterion.from_data(c) for c in raw if isinstance(c, dict)])
        self._criteria.container = self

    @property
    def criteria(self):
        return self._criteria

    @criteria.setter
    def criteria(self, new_criteria):
        if new_criteria is None:
            new_criteria = Criteria()
        if not isinstance(new_criteria, Criteria):
            raise InvalidDataError("A Criteria instance is required.")
        new_criteria.container = self
        self._criteria = new_criteria
        self.should_update()

    def add_criterion(self, name, priority, and_or, search_type, value):
        """Add a search criterion, placed by priority."""
        criterion = Criterion(name, search_type, value, and_or=and_or,
                              priority=priority)
        self._criteria.insert(priority, criterion)

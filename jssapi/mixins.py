#!/usr/bin/env python
"""mixins.py

Mixins for groups of data shared by many JSS object types.
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

from .exceptions import (InvalidDataError, NoSuchItemError,
                         UnsupportedError)
from .tools import (add_text, as_list, bool_text, datetime_to_epoch,
                    epoch_to_datetime, parse_datetime, to_bool, validate_bool)


NO_CATEGORY_NAME = 'No category assigned'
NO_CATEGORY_ID = -1
NON_CATEGORIES = (None, '', 0, NO_CATEGORY_NAME, NO_CATEGORY_ID)

NO_SITE_NAME = 'None'
NO_SITE_ID = -1
NON_SITES = (None, '', 0, NO_SITE_NAME, NO_SITE_ID)

INVALID_DATE = '-- INVALIDLY FORMATTED DATE --'


def _subelement(root, path):
    """Return the element at path under root, creating it if needed."""
    element = root.find(path)
    if element is None:
        element = ElementTree.SubElement(root, path)
    return element


class Categorizable(object):
    """Mixin for objects with a category.

    Classes with category_style 'old' (Packages and Scripts) keep the
    category name as a top level string. The others keep an {id, name}
    dict in their main subset.

    """
    category_style = 'new'

    def _load(self):
        super(Categorizable, self)._load()
        if self.category_style == 'old':
            name = self.data.get('category')
            cat_id = None
        else:
            category = self.main_data.get('category') or {}
            name = category.get('name')
            cat_id = category.get('id')
        if name is not None and str(name).lower() == NO_CATEGORY_NAME.lower():
            name = None
        if cat_id == NO_CATEGORY_ID:
            cat_id = None
        self.category_name = name or None
        self.category_id = self._parse_id(cat_id)

    @property
    def category(self):
        return self.category_name

    @category.setter
    def category(self, new_category):
        self.set_category(new_category)

    @property
    def category_assigned(self):
        return self.category_name is not None

    def category_object(self):
        """Return the assigned Category, or None."""
        from .jssobjects import Category
        if not self.category_assigned:
            return None
        return Category.fetch(self.jss, self.category_id or
                              self.category_name)

    def set_category(self, new_category):
        """Assign a category by name or id. Non-categories unset it."""
        from .jssobjects import Category
        if new_category in NON_CATEGORIES:
            self.unset_category()
            return
        if isinstance(new_category, Category):
            new_category = new_category.id
        new_id = Category.valid_id(self.jss, new_category, refresh=True)
        if new_id is None:
            raise NoSuchItemError("Category '%s' is not known to the JSS" %
                                  new_category)
        new_name = Category.map_all_ids_to(self.jss, 'name')[new_id]
        if new_name == self.category_name:
            return
        self.category_name = new_name
        self.category_id = new_id
        self.should_update()

    def unset_category(self):
        if self.category_name is None:
            return
        self.category_name = None
        self.category_id = None
        self.should_update()

    def add_category_to_xml(self, root):
        if self.category_style == 'old':
            add_text(root, 'category', self.category_name or '')
        else:
            parent = _subelement(root, self.main_subset) \
                if self.main_subset else root
            category = ElementTree.SubElement(parent, 'category')
            add_text(category, 'name', self.category_name or '')


class Sitable(object):
    """Mixin for objects assigned to a site.

    site_subset names the data subset holding the site, or None if it is
    at the top level.

    """
    site_subset = 'general'

    def _load(self):
        super(Sitable, self)._load()
        if self.site_subset:
            site = (self.data.get(self.site_subset) or {}).get('site')
        else:
            site = self.data.get('site')
        site = site or {}
        name = site.get('name')
        site_id = self._parse_id(site.get('id'))
        if name == NO_SITE_NAME or site_id == NO_SITE_ID:
            name = site_id = None
        self._site_name = name
        self._site_id = site_id

    @property
    def site_name(self):
        return self._site_name or NO_SITE_NAME

    @property
    def site_id(self):
        return self._site_id if self._site_id is not None else NO_SITE_ID

    @property
    def site(self):
        return self.site_name

    @site.setter
    def site(self, new_site):
        self.set_site(new_site)

    @property
    def site_assigned(self):
        return self._site_name is not None

    def site_object(self):
        from .jssobjects import Site
        if not self.site_assigned:
            return None
        return Site.fetch(self.jss, self._site_id or self._site_name)

    def set_site(self, new_site):
        """Assign a site by name or id. Non-sites unset it."""
        from .jssobjects import Site
        if new_site in NON_SITES:
            self.unset_site()
            return
        new_id = Site.valid_id(self.jss, new_site)
        if new_id is None:
            raise NoSuchItemError("Site '%s' is not known to the JSS" %
                                  new_site)
        new_name = Site.map_all_ids_to(self.jss, 'name')[new_id]
        if new_name == self._site_name:
            return
        self._site_name = new_name
        self._site_id = new_id
        self.should_update()

    def unset_site(self):
        if self._site_name is None:
            return
        self._site_name = None
        self._site_id = None
        self.should_update()

    def add_site_to_xml(self, root):
        parent = _subelement(root, self.site_subset) if self.site_subset \
            else root
        site = ElementTree.SubElement(parent, 'site')
        add_text(site, 'name', self.site_name)


class Locatable(object):
    """Mixin for devices with location (user and building) data."""
    location_fields = ('building', 'department', 'email_address', 'phone',
                       'position', 'real_name', 'room', 'username')

    def _load(self):
        super(Locatable, self)._load()
        location = self.data.get('location') or {}
        self.location = {field: location.get(field)
                         for field in self.location_fields}

    def _set_location(self, field, value):
        if value is not None:
            value = str(value).strip()
        if value == self.location.get(field):
            return
        self.location[field] = value
        self.should_update()

    def set_building(self, value):
        from .jssobjects import Building
        value = value.strip() if value else value
        if value and value not in Building.all_names(self.jss):
            raise NoSuchItemError("No building named %s exists in the JSS" %
                                  value)
        self._set_location('building', value)

    def set_department(self, value):
        from .jssobjects import Department
        value = value.strip() if value else value
        if value and value not in Department.all_names(self.jss):
            raise NoSuchItemError("No department named %s exists in the JSS"
                                  % value)
        self._set_location('department', value)

    def set_email_address(self, value):
        value = value.strip() if value else value
        if value and not re.match(r'^[^\s@]+@[^\s@]+$', value):
            raise InvalidDataError("Invalid Email Address")
        self._set_location('email_address', value)

    def set_phone(self, value):
        self._set_location('phone', value)

    def set_position(self, value):
        self._set_location('position', value)

    def set_real_name(self, value):
        self._set_location('real_name', value)

    def set_room(self, value):
        self._set_location('room', value)

    def set_username(self, value):
        self._set_location('username', value)

    def location_xml(self):
        location = ElementTree.Element('location')
        for field in self.location_fields:
            add_text(location, field, self.location.get(field))
        return location


class Purchasable(object):
    """Mixin for devices with purchasing data.

    Dates are kept as datetimes, and sent to the JSS as epochs.

    """
    purchasing_fields = ('applecare_id', 'is_leased', 'is_purchased',
                         'life_expectancy', 'po_number', 'purchase_price',
                         'purchasing_account', 'purchasing_contact',
                         'vendor')
    purchasing_dates = ('lease_expires', 'po_date', 'warranty_expires')

    def _load(self):
        super(Purchasable, self)._load()
        purchasing = self.data.get('purchasing') or {}
        self.purchasing = {field: purchasing.get(field)
                           for field in self.purchasing_fields}
        # Prices entered with currency symbols stay text.
        price = str(self.purchasing['purchase_price'] or '').strip()
        if re.match(r'^-?\d+(\.\d+)?$', price):
            self.purchasing['purchase_price'] = float(price)
        for field in self.purchasing_dates:
            self.purchasing[field] = epoch_to_datetime(
                purchasing.get('%s_epoch' % field))

    @property
    def has_purchasing(self):
        return any(value not in (None, '', False)
                   for value in self.purchasing.values())

    def set_purchasing(self, field, value):
        """Set one purchasing field. Date fields accept strings."""
        if field not in self.purchasing_fields + self.purchasing_dates:
            raise InvalidDataError("Unknown purchasing field %s" % field)
        if field in self.purchasing_dates and value is not None:
            value = parse_datetime(value)
        if field in ('is_leased', 'is_purchased'):
            validate_bool(value, field)
        if self.purchasing.get(field) == value:
            return
        self.purchasing[field] = value
        self.should_update()

    def purchasing_xml(self):
        purch = ElementTree.Element('purchasing')
        values = self.purchasing
        add_text(purch, 'applecare_id', values['applecare_id'])
        add_text(purch, 'is_leased', bool_text(values['is_leased']))
        add_text(purch, 'is_purchased', bool_text(values['is_purchased']))
        add_text(purch, 'lease_expires_epoch',
                 datetime_to_epoch(values['lease_expires'])
                 if values['lease_expires'] else None)
        add_text(purch, 'life_expectancy', values['life_expectancy'] or 0)
        add_text(purch, 'po_date_epoch',
                 datetime_to_epoch(values['po_date'])
                 if values['po_date'] else None)
        add_text(purch, 'po_number', values['po_number'])
        add_text(purch, 'purchase_price', values['purchase_price'])
        add_text(purch, 'purchasing_account', values['purchasing_account'])
        add_text(purch, 'purchasing_contact', values['purchasing_contact'])
        add_text(purch, 'vendor', values['vendor'])
        add_text(purch, 'warranty_expires_epoch',
                 datetime_to_epoch(values['warranty_expires'])
                 if values['warranty_expires'] else None)
        return purch


class Extendable(object):
    """Mixin for objects with extension attribute values.

    ext_attr_class is the ExtensionAttribute subclass defining them.

    """
    ext_attr_class = None

    def _load(self):
        super(Extendable, self)._load()
        self.extension_attributes = [
            dict(ea) for ea in as_list(self.data.get('extension_attributes'),
                                       'extension_attribute')]
        self.changed_eas = []

    @property
    def ea_types(self):
        return {ea.get('name'): ea.get('type')
                for ea in self.extension_attributes}

    @property
    def ea_names(self):
        return list(self.ea_types)

    @property
    def ext_attrs(self):
        """Return {name: value} with values converted by type."""
        result = {}
        for ea in self.extension_attributes:
            value = ea.get('value')
            if ea.get('type') == 'Date':
                try:
                    value = parse_datetime(value)
                except InvalidDataError:
                    value = INVALID_DATE
            elif ea.get('type') in ('Number', 'Integer'):
                text = str(value or '').strip()
                if not text:
                    value = None
                elif re.match(r'^-?\d+$', text):
                    value = int(text)
            result[ea.get('name')] = value
        return result

    def set_ext_attr(self, name, value, validate_popup_choice=True,
                     refresh=False):
        """Set the value of the extension attribute called name."""
        ea_types = self.ea_types
        if name not in ea_types:
            raise KeyError("Unknown Extension Attribute Name: '%s'" % name)
        if value is None:
            value = ''
        if validate_popup_choice:
            self._validate_popup_value(name, value, refresh)

        if ea_types[name] == 'Date' and value != '':
            value = parse_datetime(value).strftime('%Y-%m-%d %H:%M:%S')
        elif ea_types[name] in ('Number', 'Integer') and value != '':
            if isinstance(value, bool) or not re.match(r'^-?\d+$',
                                                       str(value).strip()):
                raise InvalidDataError("The value for %s must be an integer"
                                       % name)
            value = int(str(value).strip())
        else:
            value = str(value)

        for ea in self.extension_attributes:
            if ea.get('name') == name:
                ea['value'] = value
        if name not in self.changed_eas:
            self.changed_eas.append(name)
        self.should_update()

    def _validate_popup_value(self, name, value, refresh):
        if value == '' or self.ext_attr_class is None:
            return
        cache = self.jss.ext_attr_definition_cache.setdefault(
            self.__class__, {})
        if refresh or name not in cache:
            cache[name] = self.ext_attr_class.fetch(self.jss, name)
        definition = cache[name]
        if not definition.from_popup_menu:
            return
        if str(value) not in definition.popup_choices:
            raise UnsupportedError("The value for %s must be one of: '%s'" % (
                name, "' '".join(definition.popup_choices)))

    @property
    def unsaved_eas(self):
        return bool(self.need_to_update and self.changed_eas)

    def ext_attr_xml(self):
        """Return an Element with only the changed extension attributes."""
        element = ElementTree.Element('extension_attributes')
        for ea in self.extension_attributes:
            if ea.get('name') not in self.changed_eas:
                continue
            ea_element = ElementTree.SubElement(element,
                                                'extension_attribute')
            add_text(ea_element, 'name', ea.get('name'))
            add_text(ea_element, 'value', ea.get('value'))
        return element


class VPPable(object):
    """Mixin for apps and books purchased through VPP."""

    def _load(self):
        super(VPPable, self)._load()
        vpp = self.data.get('vpp') or {}
        self.vpp_codes = self.data.get('vpp_codes')
        self.vpp_admin_account_id = vpp.get('vpp_admin_account_id')
        self._assign_vpp_device_based_licenses = to_bool(
            vpp.get('assign_vpp_device_based_licenses'))
        self.total_vpp_licenses = vpp.get('total_vpp_licenses')
        self.remaining_vpp_licenses = vpp.get('remaining_vpp_licenses')
        self.used_vpp_licenses = vpp.get('used_vpp_licenses')

    @property
    def assign_vpp_device_based_licenses(self):
        return self._assign_vpp_device_based_licenses

    @assign_vpp_device_based_licenses.setter
    def assign_vpp_device_based_licenses(self, value):
        if value == self._assign_vpp_device_based_licenses:
            return
        validate_bool(value, 'assign_vpp_device_based_licenses')
        self._assign_vpp_device_based_licenses = value
        self.should_update()

    def add_vpp_xml(self, root):
        vpp = ElementTree.SubElement(root, 'vpp')
        add_text(vpp, 'assign_vpp_device_based_licenses',
                 bool_text(self._assign_vpp_device_based_licenses))

"""Shared fixtures for the jssapi tests.

A FakeSession stands in for the requests.Session of a JSS, so tests
route canned responses by method and resource and then inspect what
was sent.

"""

import json
import unittest
from xml.etree import ElementTree

from jssapi import JSS


JSS_URL = 'https://jss.example.com:8443'


class FakeResponse(object):
    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(data if data is not None else {})
        self.text = text

    def json(self):
        return json.loads(self.text)


class FakeSession(object):
    """Routes (method, resource) pairs to FakeResponses.

    Unrouted requests get a 404 like the JSS gives.

    """
    def __init__(self, base_url):
        self.base_url = base_url + '/'
        self.routes = {}
        self.requests = []
        self.closed = False

    def route(self, method, rsrc, response):
        self.routes[(method, rsrc)] = response

    def request(self, method, url, timeout=None, **kwargs):
        rsrc = url[len(self.base_url):] if url.startswith(self.base_url) \
            else url
        self.requests.append((method, rsrc, kwargs))
        response = self.routes.get((method, rsrc))
        if response is None:
            return FakeResponse(404, text='<html><body><p>The server has '
                                'not found anything matching the request '
                                'URI</p></body></html>')
        return response

    def close(self):
        self.closed = True


class JSSTestCase(unittest.TestCase):
    """TestCase with a JSS whose session is a FakeSession."""

    def setUp(self):
        self.jss = JSS(url=JSS_URL, user='api', password='secret',
                       repo_prefs=[{'name': 'CasperShare',
                                    'password': 'sharepass'}])
        self.session = FakeSession(self.jss.base_url)
        self.jss.session = self.session

    def add_get(self, rsrc, data, status=200):
        self.session.route('GET', rsrc, FakeResponse(status, data))

    def add_list(self, obj_class, items):
        """Route the list resource of obj_class to items."""
        self.add_get(obj_class.list_url or obj_class._url,
                     {obj_class.container: items})

    def add_object(self, obj_class, data):
        """Route the GET of one object, wrapped in its type key."""
        obj_id = data.get('id')
        if obj_id is None:
            obj_id = data[obj_class.main_subset]['id']
        self.add_get(obj_class.get_url(obj_id), {obj_class.list_type: data})

    def add_post(self, rsrc, new_id=1, status=201):
        self.session.route('POST', rsrc, FakeResponse(
            status, text='<?xml version="1.0" encoding="UTF-8"?><x>'
            '<id>%s</id></x>' % new_id))

    def add_put(self, rsrc, status=201):
        self.session.route('PUT', rsrc, FakeResponse(status, text=''))

    def add_delete(self, rsrc, status=200):
        self.session.route('DELETE', rsrc, FakeResponse(status, text=''))

    def add_error(self, method, rsrc, status, text=''):
        self.session.route(method, rsrc, FakeResponse(status, text=text))

    def sent(self, method=None):
        """Return the (method, rsrc, kwargs) of requests made."""
        return [req for req in self.session.requests
                if method is None or req[0] == method]

    def last_body(self, method):
        """Return the last XML body sent with method, parsed."""
        body = self.sent(method)[-1][2]['data']
        return ElementTree.fromstring(body)

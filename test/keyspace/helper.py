'''
Helper for running tests against an in-process key-space server.

`FakeKeyspaceServer` implements the part of the etcd v2 key-space API that
the client uses. It holds everything in memory and never expires keys.
'''

import logging

from collections import OrderedDict

from tornado.testing import AsyncHTTPTestCase
from tornado.web import Application, RequestHandler

from keyspace import errors
from keyspace.client import KeyspaceClient

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

class StoreError(Exception):
    def __init__(self, status, code, message, cause=None):
        super(StoreError, self).__init__(message)
        self.status = status
        self.code = code
        self.message = message
        self.cause = cause

class FakeNode(object):
    def __init__(self, key, value=None, dir=False, ttl=None, index=0):  # pylint: disable=redefined-builtin
        self.key = key
        self.value = value
        self.dir = dir
        self.children = OrderedDict() if dir else None
        self.ttl = ttl
        self.created_index = index
        self.modified_index = index

    def serialize(self, depth=0):
        '''
        Serialize with `depth` levels of children, or all if negative.
        '''

        result = {}
        if self.key != '/':
            result['key'] = self.key
            result['createdIndex'] = self.created_index
            result['modifiedIndex'] = self.modified_index

        if self.dir:
            result['dir'] = True
            if depth != 0 and self.children:
                result['nodes'] = [child.serialize(depth - 1) for child in self.children.values()]
        else:
            result['value'] = self.value

        if self.ttl:
            result['ttl'] = self.ttl
            result['expiration'] = '2038-01-19T03:14:07Z'

        return result

class FakeKeyspace(object):
    '''
    In-memory key space.
    '''

    def __init__(self):
        self.root = FakeNode('/', dir=True)
        self.index = 1

    def next_index(self):
        self.index += 1
        return self.index

    @staticmethod
    def split(path):
        return [p for p in path.split('/') if p]

    def find(self, path):
        node = self.root
        for part in self.split(path):
            if not node.dir or part not in node.children:
                return None
            node = node.children[part]

        return node

    def ensure_dir(self, path):
        node = self.root
        key = ''
        for part in self.split(path):
            key += '/' + part
            if not node.dir:
                raise StoreError(403, errors.NOT_A_DIR, 'Not a directory', node.key)
            if part not in node.children:
                node.children[part] = FakeNode(key, dir=True, index=self.next_index())
            node = node.children[part]

        if not node.dir:
            raise StoreError(403, errors.NOT_A_DIR, 'Not a directory', node.key)

        return node

    def create(self, path, value=None, dir=False, ttl=None):  # pylint: disable=redefined-builtin
        parts = self.split(path)
        parent = self.ensure_dir('/'.join(parts[:-1]))
        node = FakeNode('/' + '/'.join(parts), value=value, dir=dir, ttl=ttl, index=self.next_index())
        parent.children[parts[-1]] = node
        return node

    def remove(self, path):
        parts = self.split(path)
        parent = self.find('/'.join(parts[:-1]))
        del parent.children[parts[-1]]

    def populate(self, mapping):
        '''
        Create leaves from a mapping of path to value, or to `None` for a
        directory.
        '''

        for (path, value) in mapping.items():
            if value is None:
                self.ensure_dir(path)
            else:
                self.create(path, value)

class KeysHandler(RequestHandler):
    '''
    Handler for GET, PUT, POST, and DELETE on the key space.
    '''

    @property
    def keyspace(self):
        return self.application.keyspace

    def fail(self, exc):
        self.set_status(exc.status)
        self.write({
            'errorCode': exc.code,
            'message': exc.message,
            'cause': exc.cause,
            'index': self.keyspace.index,
        })

    def flag(self, name):
        return self.get_argument(name, 'false') == 'true'

    def ttl(self):
        ttl = self.get_argument('ttl', None)
        return int(ttl) if ttl else None

    def get(self, path=None):
        path = path or '/'
        node = self.keyspace.find(path)
        if node is None:
            self.fail(StoreError(404, errors.KEY_NOT_FOUND, 'Key not found', path))
            return

        self.write({'action': 'get', 'node': node.serialize(-1 if self.flag('recursive') else 1)})

    def put(self, path=None):
        try:
            self._put(path or '/')
        except StoreError as exc:
            self.fail(exc)

    def _put(self, path):
        keyspace = self.keyspace
        prev_exist = self.get_query_argument('prevExist', None)
        prev_value = self.get_query_argument('prevValue', None)
        prev_index = self.get_query_argument('prevIndex', None)
        is_dir = self.flag('dir')
        value = self.get_argument('value', None)
        ttl = self.ttl()

        if not keyspace.split(path):
            raise StoreError(403, errors.ROOT_READ_ONLY, 'Root is read only', '/')

        node = keyspace.find(path)
        if node is not None and prev_exist == 'false':
            raise StoreError(412, errors.NODE_EXIST, 'Key already exists', node.key)
        if node is None and (prev_exist == 'true' or prev_value is not None or prev_index is not None):
            raise StoreError(404, errors.KEY_NOT_FOUND, 'Key not found', path)

        if node is None:
            node = keyspace.create(path, value=value, dir=is_dir, ttl=ttl)
            self.set_status(201)
            self.write({'action': 'create' if prev_exist == 'false' else 'set', 'node': node.serialize()})
            return

        if prev_value is not None and (node.dir or node.value != prev_value):
            raise StoreError(412, errors.TEST_FAILED, 'Compare failed', '[{} != {}]'.format(prev_value, node.value))
        if prev_index is not None and str(node.modified_index) != prev_index:
            raise StoreError(412, errors.TEST_FAILED, 'Compare failed', '[{} != {}]'.format(prev_index, node.modified_index))

        prev = node.serialize()
        if is_dir:
            if not node.dir:
                raise StoreError(403, errors.NOT_A_DIR, 'Not a directory', node.key)
            if prev_exist != 'true':
                raise StoreError(403, errors.NOT_A_FILE, 'Not a file', node.key)
        elif node.dir:
            raise StoreError(403, errors.NOT_A_FILE, 'Not a file', node.key)
        else:
            node.value = value

        node.ttl = ttl
        node.modified_index = keyspace.next_index()

        if prev_value is not None or prev_index is not None:
            action = 'compareAndSwap'
        elif prev_exist == 'true':
            action = 'update'
        else:
            action = 'set'

        self.write({'action': action, 'node': node.serialize(), 'prevNode': prev})

    def post(self, path=None):
        keyspace = self.keyspace
        try:
            parent = keyspace.ensure_dir(path or '/')
        except StoreError as exc:
            self.fail(exc)
            return

        key = '{}/{:020d}'.format(parent.key.rstrip('/'), keyspace.index + 1)
        node = keyspace.create(key, value=self.get_argument('value', None), dir=self.flag('dir'), ttl=self.ttl())
        self.set_status(201)
        self.write({'action': 'create', 'node': node.serialize()})

    def delete(self, path=None):
        try:
            self._delete(path or '/')
        except StoreError as exc:
            self.fail(exc)

    def _delete(self, path):
        keyspace = self.keyspace
        node = keyspace.find(path)
        if node is None:
            raise StoreError(404, errors.KEY_NOT_FOUND, 'Key not found', path)
        if node is keyspace.root:
            raise StoreError(403, errors.ROOT_READ_ONLY, 'Root is read only', '/')

        recursive = self.flag('recursive')
        if node.dir:
            if not self.flag('dir') and not recursive:
                raise StoreError(403, errors.NOT_A_FILE, 'Not a file', node.key)
            if node.children and not recursive:
                raise StoreError(403, errors.DIR_NOT_EMPTY, 'Directory not empty', node.key)
        elif self.flag('dir'):
            raise StoreError(403, errors.NOT_A_DIR, 'Not a directory', node.key)

        prev = node.serialize()
        keyspace.remove(path)
        result = {'key': node.key, 'modifiedIndex': keyspace.next_index()}
        if node.dir:
            result['dir'] = True

        self.write({'action': 'delete', 'node': result, 'prevNode': prev})

class VersionHandler(RequestHandler):
    def get(self):
        self.write({'etcdserver': '2.3.8', 'etcdcluster': '2.3.0'})

class FakeKeyspaceServer(Application):
    '''
    Tornado web application serving a `FakeKeyspace`.
    '''

    def __init__(self):
        super(FakeKeyspaceServer, self).__init__()
        self.keyspace = FakeKeyspace()

        self.add_handlers(r'.*', [
            (r'/v2/keys(?P<path>/.*)?', KeysHandler),
            (r'/version', VersionHandler),
        ])

    def log_request(self, handler):
        logger.debug('{} {} {}'.format(handler.request.method, handler.request.uri, handler.get_status()))

class FakeHTTPClient(object):  # pylint: disable=too-few-public-methods
    '''
    Tornado HTTP client wrapper to strip the protocol, host, and port
    from URLs so test cases work properly.
    '''

    def __init__(self, target):
        self._target = target
        self._trim_length = len(self._target.get_url(''))
        self.requests = []

    def fetch(self, path, **kwargs):
        self.requests.append((kwargs.get('method'), path))
        return self._target.fetch(path[self._trim_length:], **kwargs)

class StubResponse(object):  # pylint: disable=too-few-public-methods
    def __init__(self, code=200, body=b'{}', reason=None, error=None):
        self.code = code
        self.body = body
        self.reason = reason
        self.error = error

class StubHTTPClient(object):
    '''
    Records every request and answers with canned responses in order.

    A response that is an exception instance is raised instead.
    '''

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def fetch(self, url, **kwargs):
        self.requests.append(dict(kwargs, url=url))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True

class KeyspaceTestCase(AsyncHTTPTestCase):
    '''
    Unit test base class that sets up a key-space server and client just
    for the tests in this case.
    '''

    def setUp(self):
        '''
        Initialize the client.
        '''
        super(KeyspaceTestCase, self).setUp()
        self.http = FakeHTTPClient(self)
        self.client = KeyspaceClient(self.get_url(''), namespace='/', client=self.http)

    def get_app(self):
        '''
        Initialize the server.
        '''
        self.server = FakeKeyspaceServer()
        return self.server

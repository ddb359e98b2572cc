'''
Client for the etcd v2 key-space HTTP API.
'''

import logging

from os import environ

from .codec import decode, json_decode, is_error
from .errors import KeyspaceError, KeyNotFound, KeyExists, PreconditionMissing, TransportError
from .node import Condition
from .path import build_key_uri, build_uri, normalize_namespace
from .transport import HTTPTransport
from .tree import flatten
from . import DEFAULT_SERVER, DEFAULT_VERSION, DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

class KeyspaceClient(object):
    '''
    Client for reading and conditionally writing keys and directories.

    Every key is placed under the client namespace. The namespace is a
    plain attribute; changing it while other threads issue requests
    through the same client is not safe.

    Each operation performs exactly one HTTP request and never retries.
    Store errors are raised with an exception that matches the intent of
    the operation.
     - `KeyNotFound`: reads and updates of a missing key
     - `KeyExists`: creation of an existing key
     - `KeyspaceError`: any other store error
    '''

    def __init__(self, server=None, namespace=None, version=DEFAULT_VERSION, client=None, **kwargs):
        if not server:
            # fall back to environment variable
            server = environ.get('KEYSPACE_SERVER', None)
        if not server:
            # fall back to default
            server = DEFAULT_SERVER

        if namespace is None:
            namespace = environ.get('KEYSPACE_NAMESPACE', DEFAULT_NAMESPACE)

        self._version = version
        self._namespace = normalize_namespace(namespace)
        self._transport = HTTPTransport(server, client=client, **kwargs)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self._transport.close()

    @property
    def server(self):
        return self._transport.base_url

    @property
    def version(self):
        return self._version

    @property
    def namespace(self):
        return self._namespace

    @namespace.setter
    def namespace(self, namespace):
        self._namespace = normalize_namespace(namespace)

    def set_namespace(self, namespace):
        '''
        Set the directory under which all keys are placed.

        For example, after `set_namespace('linkorb')` the key `key1` refers
        to `/linkorb/key1` on the server. Returns the client for chaining.
        '''

        self.namespace = namespace
        return self

    def set_transport(self, transport):
        '''
        Replace the transport used for all subsequent requests.
        '''

        self._transport = transport
        return self

    def key_uri(self, key):
        return build_key_uri(key, self._namespace, self._version)

    def _request(self, method, key, form=None, args=None):
        response = self._transport.fetch(self.key_uri(key), method, form=form, args=args)
        return decode(response.body)

    def _write(self, method, key, form, condition=None, args=None):
        '''
        Conditional write primitive underlying all PUT and POST operations.

        `condition` is rendered into the query string along with `args`.
        '''

        query = Condition.coerce(condition).to_args()
        if args:
            query.update(args)

        return self._request(method, key, form=form, args=query)

    @staticmethod
    def _check(body, exc_class):
        if is_error(body):
            logger.debug('store error {}: {}'.format(body.error_code, body.message))
            body.raise_as(exc_class)

        return body

    def _result(self, body, strict):
        if strict:
            return self._check(body, KeyspaceError)

        # error bodies are returned as the raw dictionary
        return body.body if is_error(body) else body

    def get_version(self):
        '''
        Retrieve the server and cluster versions.
        '''

        response = self._transport.fetch(build_uri('version'), 'GET')
        return json_decode(response.body)

    def get_node(self, key, query=None):
        '''
        Retrieve the node at `key` as a dictionary.

        `query` holds extra query arguments such as `recursive` or
        `sorted`. Raises `KeyNotFound` on a store error.
        '''

        body = self._check(self._request('GET', key, args=query), KeyNotFound)
        if 'node' not in body:
            logger.error('response without node: {}'.format(body))
            raise TransportError('malformed response')

        return body['node']

    def get(self, key, flags=None):
        '''
        Retrieve the value of `key`.

        Raises `KeyNotFound` on a store error. A directory has no value so
        `None` is returned for it.
        '''

        return self.get_node(key, flags).get('value')

    def set(self, key, value, ttl=None, condition=None, strict=False):
        '''
        Set the value of `key`.

        `ttl` is sent only if it is non-zero. `condition` is a `Condition`
        or a mapping of `prevExist`, `prevValue`, and `prevIndex`.

        The decoded body is returned as is, including store error bodies,
        unless `strict`, in which case store errors raise `KeyspaceError`.
        '''

        body = self._write('PUT', key, self._form(value=value, ttl=ttl), condition)
        return self._result(body, strict)

    def mk(self, key, value, ttl=0):
        '''
        Create `key` with `value`.

        Raises `KeyExists` on a store error.
        '''

        body = self._write('PUT', key, self._form(value=value, ttl=ttl), Condition(prev_exist=False))
        return self._check(body, KeyExists)

    def mkdir(self, key, ttl=0):
        '''
        Create the directory `key`.

        Raises `KeyExists` on a store error.
        '''

        body = self._write('PUT', key, self._form(dir=True, ttl=ttl), Condition(prev_exist=False))
        return self._check(body, KeyExists)

    def update(self, key, value, ttl=0, condition=None):
        '''
        Update the value of the existing `key`.

        `condition` adds predicates on top of `prevExist=true`. Raises
        `KeyNotFound` on a store error.
        '''

        condition = Condition(prev_exist=True).merge(condition)
        body = self._write('PUT', key, self._form(value=value, ttl=ttl), condition)
        return self._check(body, KeyNotFound)

    def update_dir(self, key, ttl):
        '''
        Refresh the TTL of the existing directory `key`.

        Raises `PreconditionMissing` without contacting the store if `ttl`
        is not given and `KeyspaceError` on a store error.
        '''

        if not ttl:
            raise PreconditionMissing('TTL is required')

        body = self._write('PUT', key, {'ttl': int(ttl)}, Condition(prev_exist=True), args={'dir': 'true'})
        return self._check(body, KeyspaceError)

    def rm(self, key):
        '''
        Remove `key`.

        Raises `KeyspaceError` on a store error.
        '''

        return self._check(self._request('DELETE', key), KeyspaceError)

    def rmdir(self, key, recursive=False):
        '''
        Remove the directory `key`.

        The directory must be empty unless `recursive`. Raises
        `KeyspaceError` on a store error.
        '''

        args = {'dir': 'true'}
        if recursive is True:
            args['recursive'] = 'true'

        return self._check(self._request('DELETE', key, args=args), KeyspaceError)

    def list_dir(self, key='/', recursive=False):
        '''
        Retrieve the directory `key` as a decoded body.

        Raises `KeyNotFound` on a store error.
        '''

        args = {}
        if recursive is True:
            args['recursive'] = 'true'

        return self._check(self._request('GET', key, args=args), KeyNotFound)

    def ls(self, key='/', recursive=False):
        '''
        List the directories below `key` in server order.
        '''

        (dirs, _) = flatten(self.list_dir(key, recursive))
        return dirs

    def get_keys_value(self, root='/', recursive=True, key=None):
        '''
        Map every leaf below `root` to its value.

        If `key` is the complete server path of one of the leaves, only its
        value is returned.
        '''

        (_, values) = flatten(self.list_dir(root, recursive))
        if key is not None and key in values:
            return values[key]

        return values

    def set_with_in_order_key(self, dir, value, ttl=0, condition=None, strict=False):  # pylint: disable=redefined-builtin
        '''
        Create a key with a server-generated, increasing name in `dir`.

        Store errors are handled as in `set`.
        '''

        body = self._write('POST', dir, self._form(value=value, ttl=ttl), condition)
        return self._result(body, strict)

    def mkdir_with_in_order_key(self, dir, ttl=0, strict=False):  # pylint: disable=redefined-builtin
        '''
        Create a directory with a server-generated, increasing name in `dir`.

        Store errors are handled as in `set`.
        '''

        body = self._write('POST', dir, self._form(dir=True, ttl=ttl))
        return self._result(body, strict)

    @staticmethod
    def _form(value=None, dir=False, ttl=0):  # pylint: disable=redefined-builtin
        form = {}
        if dir:
            form['dir'] = 'true'
        else:
            # an absent value is sent empty
            form['value'] = '' if value is None else value
        if ttl:
            form['ttl'] = ttl

        return form

    # camel-case aliases
    setNamespace = set_namespace
    getVersion = get_version
    getNode = get_node
    updateDir = update_dir
    listDir = list_dir
    getKeysValue = get_keys_value
    setWithInOrderKey = set_with_in_order_key
    mkdirWithInOrderKey = mkdir_with_in_order_key

'''

# Keyspace

A client for the hierarchical key-value store exposed by the etcd v2
key-space HTTP API.

## Design

The store is organized like a file system. The key is a forward-slash (`/`)
delimited path much like a UNIX file path or URL. Each node is either a
leaf holding a string value or a directory holding child nodes. Any node
can carry a time-to-live (TTL) after which the store removes it.

Writes can be made conditional on the prior state of the key.
 - `prevExist`: the key must (`true`) or must not (`false`) exist
 - `prevValue`: the key must currently hold this value
 - `prevIndex`: the key must have been last modified at this index
The client builds its higher-level operations from these conditions. For
example, `mk` is a `set` with `prevExist=false` and `update` is a `set`
with `prevExist=true`. The same store error code is reported with an
exception that matches the intent of the operation, so a failed `mk`
raises `KeyExists` while a failed `update` raises `KeyNotFound`.

Every key is placed under the client namespace, which defaults to `/`.
Setting the namespace to `/linkorb` places the key `key1` at `/linkorb/key1`
on the server.

### Example

Suppose the store starts empty.
 - `mk('a', '1')` creates `/a` with value `1`.
 - `mk('a', '2')` raises `KeyExists`.
 - `update('b', '3')` raises `KeyNotFound`.
 - `update('a', '3')` succeeds and `get('a') -> '3'`.

After `mkdir('tests/sub')`, `set('tests/1', 'a')`, and `set('tests/2', 'b')`:
 - `ls('tests', recursive=True) -> ['/tests/sub']`
 - `get_keys_value('tests') -> {'/tests/1': 'a', '/tests/2': 'b'}`

## Usage

The following code snippet creates a client that connects to `127.0.0.1`
on the default port.
```
from keyspace.client import KeyspaceClient

client = KeyspaceClient(namespace='/linkorb')
client.mk('key1', 'value1')
client.get('key1') # -> 'value1'
```
The server falls back to the `KEYSPACE_SERVER` environment variable and
the namespace to `KEYSPACE_NAMESPACE`. Refer to the `KeyspaceClient` class
for the available operations and flags.
'''

DEFAULT_PORT = 2379
DEFAULT_SERVER = 'http://127.0.0.1:{}'.format(DEFAULT_PORT)
DEFAULT_VERSION = 'v2'
DEFAULT_NAMESPACE = '/'

from .errors import KeyspaceError, KeyNotFound, KeyExists, PreconditionMissing, TransportError
from .node import Node, Condition
from .client import KeyspaceClient

__all__ = [
    'KeyspaceClient', 'Node', 'Condition',
    'KeyspaceError', 'KeyNotFound', 'KeyExists', 'PreconditionMissing', 'TransportError',
]

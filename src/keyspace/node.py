'''
Node and write-condition types of the key space.
'''

import logging
logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

class Node(object):
    '''
    One entry of the key space, either a leaf value or a directory.

    The store root is returned by the server without a key, so `key` is
    `None` for it.
    '''

    def __init__(self, key=None, value=None, dir=False, nodes=None,  # pylint: disable=redefined-builtin
                 ttl=None, expiration=None, created_index=None, modified_index=None):
        self.key = key
        self.value = value
        self.dir = bool(dir or nodes is not None)
        self.nodes = nodes
        self.ttl = ttl
        self.expiration = expiration
        self.created_index = created_index
        self.modified_index = modified_index

        if self.dir and self.value is not None:
            # invalid server input; a directory never holds a value
            logger.warning('directory "{}" carries a value; ignoring it'.format(key))
            self.value = None

        if self.dir and self.nodes is None:
            self.nodes = []

    @classmethod
    def from_dict(cls, data):
        '''
        Construct a `Node` tree from its decoded JSON representation.

        A full response body is accepted in place of its `node` field.
        '''

        if 'node' in data and 'key' not in data:
            data = data['node']

        nodes = data.get('nodes')
        if nodes is not None:
            nodes = [cls.from_dict(child) for child in nodes]

        return cls(
            key=data.get('key'),
            value=data.get('value'),
            dir=data.get('dir', False),
            nodes=nodes,
            ttl=data.get('ttl'),
            expiration=data.get('expiration'),
            created_index=data.get('createdIndex'),
            modified_index=data.get('modifiedIndex'),
        )

    def is_root(self):
        return self.key is None or self.key == '/'

    def __iter__(self):
        return iter(self.nodes or [])

    def __repr__(self):
        if self.dir:
            return 'Node({!r}, dir=True, nodes={})'.format(self.key, len(self.nodes))
        return 'Node({!r}, {!r})'.format(self.key, self.value)

class Condition(object):
    '''
    Optimistic concurrency predicates attached to a write.

    Only the predicates that are set are sent to the store.
     - `prev_exist`: the key must (`True`) or must not (`False`) exist
     - `prev_value`: the key must currently hold this value
     - `prev_index`: the key must have been last modified at this index
    '''

    FIELDS = [
        ('prev_exist', 'prevExist'),
        ('prev_value', 'prevValue'),
        ('prev_index', 'prevIndex'),
    ]

    def __init__(self, prev_exist=None, prev_value=None, prev_index=None):
        self.prev_exist = prev_exist
        self.prev_value = prev_value
        self.prev_index = prev_index

    @classmethod
    def coerce(cls, obj):
        '''
        Build a `Condition` from `None`, a `Condition`, or a mapping.

        Mapping keys may use the wire names (`prevExist`) or the attribute
        names (`prev_exist`). Unknown names raise `ValueError`.
        '''

        if obj is None:
            return cls()
        if isinstance(obj, Condition):
            return obj

        names = {}
        for (attr, wire) in cls.FIELDS:
            names[attr] = attr
            names[wire] = attr

        kwargs = {}
        for (k, v) in obj.items():
            try:
                attr = names[k]
            except KeyError:
                raise ValueError('unknown condition: {}'.format(k))

            if attr == 'prev_exist' and not isinstance(v, bool):
                v = str(v).lower() == 'true'
            kwargs[attr] = v

        return cls(**kwargs)

    def merge(self, other):
        '''
        Return a new `Condition` where the predicates set in `other` win.
        '''

        other = Condition.coerce(other)
        kwargs = {}
        for (attr, _) in self.FIELDS:
            value = getattr(other, attr)
            kwargs[attr] = getattr(self, attr) if value is None else value

        return Condition(**kwargs)

    def to_args(self):
        '''
        Render the set predicates as query arguments.
        '''

        args = {}
        if self.prev_exist is not None:
            args['prevExist'] = 'true' if self.prev_exist else 'false'
        if self.prev_value is not None:
            args['prevValue'] = self.prev_value
        if self.prev_index is not None:
            args['prevIndex'] = str(self.prev_index)

        return args

    def __bool__(self):
        return bool(self.to_args())

    def __eq__(self, other):
        return isinstance(other, Condition) and self.to_args() == other.to_args()

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        return 'Condition({})'.format(', '.join('{}={!r}'.format(k, v) for (k, v) in sorted(self.to_args().items())))

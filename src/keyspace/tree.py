'''
Flattening of directory listings into paths and values.
'''

from .node import Node

def _coerce(node):
    if isinstance(node, Node):
        return node
    return Node.from_dict(node)

def _flatten(node, top):
    dirs = []
    values = {}

    if node.dir:
        if not top and not node.is_root():
            dirs.append(node.key)

        # children in server order; the store guarantees a tree
        for child in node:
            (child_dirs, child_values) = _flatten(child, False)
            dirs.extend(child_dirs)
            values.update(child_values)
    elif node.key is not None:
        values[node.key] = node.value

    return (dirs, values)

def flatten(node):
    '''
    Flatten a directory listing.

    `node` is a `Node`, its dictionary form, or a full response body.
    Returns `(dirs, values)` where `dirs` lists the key of every directory
    below `node` in document order and `values` maps the key of every leaf
    to its value. The listed node itself is not included in `dirs`.
    '''

    return _flatten(_coerce(node), True)

'''
Construction of key-space request paths.
'''

from tornado.escape import url_escape

SEPARATOR = '/'

def normalize_namespace(namespace):
    '''
    Return `namespace` with a leading and without a trailing separator.

    An empty namespace is the root `/`.
    '''

    if not namespace:
        return SEPARATOR

    if not namespace.startswith(SEPARATOR):
        namespace = SEPARATOR + namespace

    return namespace.rstrip(SEPARATOR) or SEPARATOR

def normalize_key(key):
    '''
    Return `key` with a leading separator.
    '''

    if not key:
        return SEPARATOR

    if not key.startswith(SEPARATOR):
        key = SEPARATOR + key

    return key

def quote_path(path):
    '''
    Percent-encode `path` for use in a URL, keeping the separators.
    '''

    return SEPARATOR.join(url_escape(part, plus=False) for part in path.split(SEPARATOR))

def build_uri(*segments):
    '''
    Join `segments` into an absolute request path.
    '''

    return SEPARATOR + SEPARATOR.join(s.strip(SEPARATOR) for s in segments if s)

def build_key_uri(key, namespace=SEPARATOR, version='v2'):
    '''
    Build the request path for `key` under `namespace`.

    The result is `/<version>/keys<namespace><key>` with the namespace and
    key percent-encoded. The root namespace adds nothing so the same key
    under `/` and `` maps to the same path.
    '''

    namespace = normalize_namespace(namespace)
    if namespace == SEPARATOR:
        namespace = ''

    return build_uri(version, 'keys') + quote_path(namespace + normalize_key(key))

'''
Decoding of key-space response bodies.

The store reports application errors in the body as
`{"errorCode": ..., "message": ..., "cause": ..., "index": ...}` with a
non-2xx status. The decoder returns these as `ErrorPayload` rather than
raising so each operation can choose the exception that fits its intent.
'''

import json
import logging

from tornado.escape import to_basestring

import jsonschema

from .errors import KeyspaceError, TransportError

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

RESPONSE_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-04/schema#',
    'type': 'object',
    'properties': {
        'action': {
            'type': 'string'
        },
        'node': {
            'type': 'object'
        },
        'prevNode': {
            'type': 'object'
        },
    },
}

ERROR_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-04/schema#',
    'type': 'object',
    'properties': {
        'errorCode': {
            'type': 'integer'
        },
        'message': {
            'type': 'string'
        },
        'index': {
            'type': 'integer'
        },
    },
    'required': ['errorCode'],
}

class ErrorPayload(object):
    '''
    Application error reported by the store.
    '''

    def __init__(self, error_code, message=None, cause=None, index=None, body=None):
        self.error_code = error_code
        self.message = message or 'store error {}'.format(error_code)
        self.cause = cause
        self.index = index
        self.body = body

    @classmethod
    def from_body(cls, body):
        return cls(body['errorCode'], body.get('message'), body.get('cause'), body.get('index'), body)

    def exception(self, exc_class=KeyspaceError):
        '''
        Build an `exc_class` instance carrying the store's message and code.
        '''

        return exc_class(self.message, self.error_code, cause=self.cause, index=self.index)

    def raise_as(self, exc_class=KeyspaceError):
        raise self.exception(exc_class)

    def __repr__(self):
        return 'ErrorPayload({!r}, {!r})'.format(self.error_code, self.message)

def json_decode(data):
    '''
    Decode `data` as JSON.

    Raises `TransportError` if `data` is not valid JSON.
    '''

    if data is None:
        data = b''

    try:
        return json.loads(to_basestring(data))
    except ValueError as exc:
        logger.error('unable to parse response body into JSON: {}\
            \n\nResponse:\n{}'.format(exc, data))
        raise TransportError('unable to parse response body into JSON: {}'.format(exc))

def is_error(body):
    '''
    Test if a decoded body is a store error.
    '''

    return isinstance(body, ErrorPayload)

def decode(data):
    '''
    Decode and classify a response body.

    Returns the body as a dictionary on success or an `ErrorPayload` if
    the body carries an `errorCode`. Raises `TransportError` if the body is
    not a JSON object.
    '''

    obj = json_decode(data)

    try:
        if isinstance(obj, dict) and 'errorCode' in obj:
            jsonschema.validate(obj, ERROR_SCHEMA)
            return ErrorPayload.from_body(obj)

        jsonschema.validate(obj, RESPONSE_SCHEMA)
    except jsonschema.ValidationError as exc:
        logger.error('malformed response: {}\
            \n\nResponse:\n{}'.format(exc.message, data))
        raise TransportError('malformed response')

    return obj

'''
Exceptions raised by the key-space client.

Store errors carry the numeric `errorCode` and `message` reported by the
server. The same code may be raised as different exception classes
depending on what the operation expected of the key.
'''

# error codes reported by the store
KEY_NOT_FOUND = 100
TEST_FAILED = 101
NOT_A_FILE = 102
NOT_A_DIR = 104
NODE_EXIST = 105
ROOT_READ_ONLY = 107
DIR_NOT_EMPTY = 108

# raised locally without contacting the store
PRECONDITION_MISSING = 204

class KeyspaceError(Exception):
    '''
    Generic store error.
    '''

    def __init__(self, message, code=None, cause=None, index=None):
        super(KeyspaceError, self).__init__(message, code)
        self.message = message
        self.code = code
        self.cause = cause
        self.index = index

    def __str__(self):
        text = self.message
        if self.code is not None:
            text = '{} (code {})'.format(text, self.code)
        if self.cause:
            text = '{}: {}'.format(text, self.cause)
        return text

class KeyNotFound(KeyspaceError, KeyError):
    '''
    The key or directory does not exist but the operation required it.
    '''

class KeyExists(KeyspaceError, ValueError):
    '''
    The key or directory exists but the operation required it not to.
    '''

class PreconditionMissing(KeyspaceError, ValueError):
    '''
    A mandatory argument was missing. No request was sent.
    '''

    def __init__(self, message, code=PRECONDITION_MISSING, **kwargs):
        super(PreconditionMissing, self).__init__(message, code, **kwargs)

class TransportError(KeyspaceError, RuntimeError):
    '''
    The request could not be completed or the response was not understood.
    '''

'''
HTTP transport for the key-space client.
'''

import logging

from urllib.parse import urlencode

from tornado.httpclient import HTTPClient, HTTPClientError
from tornado.httputil import url_concat

from .errors import TransportError

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'

class Response(object):  # pylint: disable=too-few-public-methods
    '''
    Status code and raw body of a completed exchange.
    '''

    def __init__(self, code, body, reason=None):
        self.code = code
        self.body = body
        self.reason = reason

class HTTPTransport(object):
    '''
    Performs HTTP requests against the store base URL.

    Error statuses are returned like any other response since the store
    reports application errors in the body of non-2xx responses. Only a
    failure to complete the exchange raises `TransportError`.

    `client` is any object with the `fetch(url, **kwargs)` interface of
    `tornado.httpclient.HTTPClient`. Extra keyword arguments such as
    `request_timeout` and `connect_timeout` are passed to every request.
    '''

    def __init__(self, base_url, client=None, **options):
        if '://' not in base_url:
            base_url = 'http://' + base_url

        self._base_url = base_url.rstrip('/')
        self._client = client or HTTPClient()
        self._options = options

    @property
    def base_url(self):
        return self._base_url

    def fetch(self, path, method='GET', form=None, args=None):
        '''
        Perform a single request.

        `form` is form-encoded into the request body and `args` into the
        query string. PUT and POST always carry a body, possibly empty.
        '''

        url = self._base_url + path
        if args:
            url = url_concat(url, args)

        headers = {'Accept': 'application/json'}
        body = None
        if method in ('PUT', 'POST'):
            body = urlencode(form or {})
            headers['Content-Type'] = FORM_CONTENT_TYPE

        try:
            response = self._client.fetch(url,
                                          method=method,
                                          body=body,
                                          headers=headers,
                                          raise_error=False,
                                          **self._options)
        except (OSError, HTTPClientError) as exc:
            logger.error('{} {} failed: {}'.format(method, url, exc))
            raise TransportError('{} {} failed: {}'.format(method, url, exc))

        logger.debug('{} {} -> {}'.format(method, url, response.code))

        # tornado reports timeouts and connection resets with a pseudo-status
        if response.code == 599:
            logger.error('{} {} failed: {}'.format(method, url, response.error))
            raise TransportError('{} {} failed: {}'.format(method, url, response.error), 599)

        return Response(response.code, response.body, response.reason)

    def get(self, path, args=None):
        return self.fetch(path, 'GET', args=args)

    def put(self, path, form=None, args=None):
        return self.fetch(path, 'PUT', form=form, args=args)

    def post(self, path, form=None, args=None):
        return self.fetch(path, 'POST', form=form, args=args)

    def delete(self, path, args=None):
        return self.fetch(path, 'DELETE', args=args)

    def close(self):
        close = getattr(self._client, 'close', None)
        if close:
            close()

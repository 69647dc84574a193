from io import BytesIO

from twisted.internet import defer
from twisted.web import client, error
from twisted.web.http_headers import Headers

HTTP_TIMEOUT = 30

@defer.inlineCallbacks
def _fetch(agent, method, url, headers, producer):
    response = yield agent.request(method, url, headers, producer)
    body = yield client.readBody(response)
    return response, body

@defer.inlineCallbacks
def get_page(url, method=b'GET', headers=None, postdata=None, agent=None, timeout=HTTP_TIMEOUT, clock=None):
    '''
    Fetch url and return the body as bytes. A non-2xx status fails with
    twisted.web.error.Error, the body available as its response attribute.
    The timeout covers the whole exchange, body included.
    '''
    if clock is None:
        from twisted.internet import reactor as clock
    if agent is None:
        agent = client.Agent(clock, connectTimeout=timeout)
    if isinstance(url, str):
        url = url.encode('ascii')

    producer = None
    if postdata is not None:
        producer = client.FileBodyProducer(BytesIO(postdata))

    df = _fetch(agent, method, url,
        Headers(dict((k, [v]) for k, v in (headers or {}).items())), producer)
    df.addTimeout(timeout, clock)
    response, body = yield df

    if not 200 <= response.code < 300:
        raise error.Error(response.code, response.phrase, body)
    return body

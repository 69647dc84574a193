import itertools

from twisted.internet import defer
from twisted.python import failure, log

class Event:
    def __init__(self):
        self.observers = {}
        self.id_generator = itertools.count()
        self._once = None
        self.times = 0

    def watch(self, func):
        id = next(self.id_generator)
        self.observers[id] = func
        return id
    def unwatch(self, id):
        self.observers.pop(id, None)

    @property
    def once(self):
        res = self._once
        if res is None:
            res = self._once = Event()
        return res

    def happened(self, *event):
        self.times += 1

        once, self._once = self._once, None

        for id, func in sorted(self.observers.items()):
            try:
                func(*event)
            except Exception:
                log.err(None, "Error while processing Event callbacks:")

        if once is not None:
            once.happened(*event)

    def get_deferred(self, timeout=None, clock=None):
        '''
        Deferred fired with the arguments of the next happened() call, or
        failed with defer.TimeoutError after timeout seconds, whichever
        comes first. Cancelling it stops both.
        '''
        if clock is None:
            from twisted.internet import reactor as clock
        once = self.once
        state = dict(delay=None)
        def stop(df_):
            once.unwatch(id1)
            if state['delay'] is not None and state['delay'].active():
                state['delay'].cancel()
        df = defer.Deferred(stop)
        def got_event(*event):
            if state['delay'] is not None:
                state['delay'].cancel()
            df.callback(event)
        id1 = once.watch(got_event)
        if timeout is not None:
            def do_timeout():
                once.unwatch(id1)
                df.errback(failure.Failure(defer.TimeoutError('in Event.get_deferred')))
            state['delay'] = clock.callLater(timeout, do_timeout)
        return df

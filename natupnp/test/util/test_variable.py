from twisted.internet import defer, task
from twisted.trial import unittest

from natupnp.util import variable

class Test(unittest.TestCase):
    def test_happened(self):
        e = variable.Event()
        seen = []
        id = e.watch(lambda *args: seen.append(args))
        e.happened(1, 2)
        e.unwatch(id)
        e.happened(3, 4)
        assert seen == [(1, 2)]
        assert e.times == 2

    def test_failing_observer(self):
        e = variable.Event()
        seen = []
        e.watch(lambda: 1/0)
        e.watch(lambda: seen.append(True))
        e.happened()
        assert seen == [True]
        self.assertEqual(len(self.flushLoggedErrors(ZeroDivisionError)), 1)

    def test_get_deferred_event_wins(self):
        clock = task.Clock()
        e = variable.Event()
        df = e.get_deferred(5, clock)
        clock.advance(4)
        e.happened('a', 'b')
        assert self.successResultOf(df) == ('a', 'b')
        assert not clock.getDelayedCalls()
        # only the first one counts
        e.happened('c', 'd')

    def test_get_deferred_timeout_wins(self):
        clock = task.Clock()
        e = variable.Event()
        df = e.get_deferred(5, clock)
        clock.advance(5)
        self.failureResultOf(df, defer.TimeoutError)
        # too late, must not fire df again
        e.happened('a')

    def test_get_deferred_cancel(self):
        clock = task.Clock()
        e = variable.Event()
        df = e.get_deferred(5, clock)
        df.cancel()
        self.failureResultOf(df, defer.CancelledError)
        assert not clock.getDelayedCalls()
        e.happened('a')

    def test_get_deferred_without_timeout(self):
        e = variable.Event()
        df = e.get_deferred()
        self.assertNoResult(df)
        e.happened(1)
        assert self.successResultOf(df) == (1,)

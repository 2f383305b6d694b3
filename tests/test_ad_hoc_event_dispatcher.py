from unittest import TestCase

from pagecycle.AdHocEventDispatcher import AdHocEventDispatcher

EVENT_A = 1
EVENT_B = 2
EVENT_C = 3


class TestAdHocEventDispatcher(TestCase):
    def setUp(self):
        self.dispatcher = AdHocEventDispatcher()
        self.calls = []

    def test_listeners_run_in_registration_order(self):
        def first():
            self.calls.append("first:start")
            self.calls.append("first:end")

        self.dispatcher.add_listener(EVENT_A, first)
        self.dispatcher.add_listener(EVENT_A, lambda: self.calls.append("second"))

        self.dispatcher.notify(EVENT_A)

        assert self.calls == ["first:start", "first:end", "second"]

    def test_notify_without_listeners_is_a_no_op(self):
        self.dispatcher.add_listener(EVENT_A, lambda: self.calls.append("a"))

        self.dispatcher.notify(EVENT_B)

        assert self.calls == []
        assert self.dispatcher.pending == 0
        assert self.dispatcher.is_running is False

    def test_same_listener_twice_is_called_twice(self):
        listener = lambda: self.calls.append("x")
        self.dispatcher.add_listener(EVENT_A, listener)
        self.dispatcher.add_listener(EVENT_A, listener)

        self.dispatcher.notify(EVENT_A)

        assert self.calls == ["x", "x"]

    def test_nested_notify_is_queued_not_nested(self):
        depth = {"current": 0, "max": 0}

        def tracked(name, raises=()):
            def listener():
                depth["current"] += 1
                depth["max"] = max(depth["max"], depth["current"])
                self.calls.append(name)
                for event in raises:
                    self.dispatcher.notify(event)
                    # The nested event has not been handled yet.
                    assert self.calls[-1] == name
                depth["current"] -= 1

            return listener

        self.dispatcher.add_listener(EVENT_A, tracked("a1", raises=[EVENT_B, EVENT_C]))
        self.dispatcher.add_listener(EVENT_A, tracked("a2"))
        self.dispatcher.add_listener(EVENT_B, tracked("b", raises=[EVENT_C]))
        self.dispatcher.add_listener(EVENT_C, tracked("c"))

        self.dispatcher.notify(EVENT_A)

        # Breadth first, in the order the events were raised.
        assert self.calls == ["a1", "a2", "b", "c", "c"]
        assert depth["max"] == 1
        assert self.dispatcher.is_running is False
        assert self.dispatcher.pending == 0

    def test_dispatcher_reports_running_while_draining(self):
        seen = []
        self.dispatcher.add_listener(EVENT_A, lambda: seen.append(self.dispatcher.is_running))

        self.dispatcher.notify(EVENT_A)

        assert seen == [True]
        assert self.dispatcher.is_running is False

    def test_listener_exception_propagates_and_aborts_the_drain(self):
        def failing():
            self.dispatcher.notify(EVENT_C)
            raise RuntimeError("boom")

        self.dispatcher.add_listener(EVENT_A, failing)
        self.dispatcher.add_listener(EVENT_A, lambda: self.calls.append("after failing"))
        self.dispatcher.add_listener(EVENT_C, lambda: self.calls.append("c"))

        with self.assertRaises(RuntimeError):
            self.dispatcher.notify(EVENT_A)

        assert self.calls == []
        assert self.dispatcher.pending == 0
        assert self.dispatcher.is_running is False

        # The dispatcher is still usable.
        self.dispatcher.notify(EVENT_C)
        assert self.calls == ["c"]

    def test_listener_added_while_dispatching_runs_on_next_event(self):
        def registering():
            self.calls.append("registering")
            self.dispatcher.add_listener(EVENT_A, lambda: self.calls.append("late"))

        self.dispatcher.add_listener(EVENT_A, registering)

        self.dispatcher.notify(EVENT_A)
        assert self.calls == ["registering"]

        self.dispatcher.notify(EVENT_A)
        assert self.calls == ["registering", "registering", "late"]

from doodleduel.realtime.transport import SocketIOScheduler


class FakeSocketIO:
    """Records background tasks and sleeps instead of running them."""

    def __init__(self):
        self.tasks = []
        self.slept = []

    def start_background_task(self, fn, *args):
        self.tasks.append((fn, args))

    def sleep(self, seconds):
        self.slept.append(seconds)

    def run(self):
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)


def test_timer_fires_after_full_delay():
    sio = FakeSocketIO()
    fired = []
    SocketIOScheduler(sio).call_later(3.5, lambda: fired.append(True))

    sio.run()

    assert fired == [True]
    assert sio.slept == [1.0, 1.0, 1.0, 0.5]


def test_cancelled_timer_stops_sleeping_early():
    sio = FakeSocketIO()
    fired = []
    handle = SocketIOScheduler(sio).call_later(300, lambda: fired.append(True))

    def sleep_then_cancel(seconds):
        sio.slept.append(seconds)
        handle.cancel()

    sio.sleep = sleep_then_cancel
    sio.run()

    assert fired == []
    assert sio.slept == [1.0]


def test_spawn_runs_on_a_background_task():
    sio = FakeSocketIO()
    seen = []
    SocketIOScheduler(sio).spawn(seen.append, 'checked')
    sio.run()
    assert seen == ['checked']

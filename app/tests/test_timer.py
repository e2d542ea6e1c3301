from util.timer import Timer


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_elapsed_excludes_paused_time():
    clock = FakeClock()
    timer = Timer(clock)
    timer.start()
    clock.now = 0.010
    timer.pause()
    clock.now = 500.0
    assert timer.get_elapsed_time() == 0.010
    timer.resume()
    clock.now = 500.005
    assert abs(timer() - 0.015) < 1e-9


def test_restart_keeps_running():
    clock = FakeClock()
    timer = Timer(clock)
    timer.start()
    clock.now = 1.0
    timer.restart()
    assert timer.is_running()
    assert timer.get_elapsed_time() == 0.0
    clock.now = 1.5
    assert timer >= 0.5
    assert timer < 0.6

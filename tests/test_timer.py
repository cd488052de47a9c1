from chip8_timer import DelayTimer, trigger_sound


def test_read_counts_down_one_per_tick(clock):
    timer = DelayTimer(clock=clock)
    timer.set(100)
    assert timer.read() == 100

    clock.advance(1 / 60)
    assert timer.read() == 99

    # Halfway through the 31st tick
    clock.now = 30.5 / 60
    assert timer.read() == 70


def test_read_never_negative(clock):
    timer = DelayTimer(clock=clock)
    timer.set(3)
    clock.advance(10.0)
    assert timer.read() == 0


def test_read_does_not_mutate(clock):
    timer = DelayTimer(clock=clock)
    timer.set(50)
    clock.advance(0.25)
    assert timer.read() == timer.read() == 35
    assert timer.value == 50


def test_set_restarts_reference_time(clock):
    timer = DelayTimer(clock=clock)
    timer.set(5)
    clock.advance(1.0)
    assert timer.read() == 0
    timer.set(5)
    assert timer.read() == 5


def test_partial_tick_rounds_down(clock):
    timer = DelayTimer(clock=clock)
    timer.set(2)
    clock.advance(0.01)
    assert timer.read() == 2


def test_trigger_sound_beeps_once(io):
    trigger_sound(io)
    assert io.beeps == 1

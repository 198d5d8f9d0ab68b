import json
import os

import pytest

INPUTS = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "Inputs")


def input_path(name):
    return os.path.join(INPUTS, name)


@pytest.fixture
def counter_source():
    with open(input_path("Counter.sol"), encoding="utf-8", newline="") as f:
        return f.read()


@pytest.fixture
def counter_compiled():
    with open(input_path("Counter.json"), encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def counter_symexec():
    with open(input_path("Counter.symexec.json"), encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def counter_mappings(counter_source, counter_compiled):
    from solbolt.parsers.legacy_assembly import build_mapping_tables
    return build_mapping_tables(counter_source, counter_compiled)


@pytest.fixture
def counter_table(counter_mappings):
    return counter_mappings["Counter"]


class ManualTimer:
    """threading.Timer stand-in that only fires when the test says so."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]

    @property
    def intervals(self):
        return [timer.interval for timer in self.timers]


@pytest.fixture
def timers():
    return ManualTimerFactory()

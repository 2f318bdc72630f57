"""Shared test helpers for Respira."""

from respira.breathing.engine import BreathingEngine
from respira.breathing.state import EngineState, Transition, tick


class SignalCollector:
    """Slot that records every emission of the signals connected to it.

    Single-argument emissions are stored bare, others as tuples.
    """

    def __init__(self):
        self.items: list = []

    def __call__(self, *args):
        self.items.append(args[0] if len(args) == 1 else args)

    def __len__(self):
        return len(self.items)

    @property
    def last(self):
        return self.items[-1] if self.items else None


def step_engine(engine: BreathingEngine, seconds: int) -> None:
    """Drive *engine* by hand, one second per call."""
    for _ in range(seconds):
        engine.step()


def run_ticks(state: EngineState, seconds: int) -> tuple[EngineState, list]:
    """Apply *seconds* pure ticks; return the final state and all signals."""
    signals: list = []
    for _ in range(seconds):
        result: Transition = tick(state)
        state = result.state
        signals.extend(result.signals)
    return state, signals

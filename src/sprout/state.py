"""Process-wide "seeding in progress" flag.

Host applications poll :func:`is_seeding_active` to suppress side effects
such as notifications or background jobs while seeders are running. The
engine's run lifecycle is the only writer.
"""

from __future__ import annotations


class RunState:
    def __init__(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False


RUN_STATE = RunState()


def is_seeding_active() -> bool:
    return RUN_STATE.active

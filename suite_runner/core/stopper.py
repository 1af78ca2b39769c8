"""Cooperative cancellation flag shared by every branch of a run."""

import threading


class Stopper:
    """Advisory stop flag, polled at suite and test boundaries.

    Setting the flag never interrupts a running test body.
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def stop_requested(self) -> bool:
        return self._event.is_set()

    def request_stop(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

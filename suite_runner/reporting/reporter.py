"""Reporter capability - the sink for a run's event stream."""

from ..core.events import Event


class Reporter:
    """Receives events; override __call__ (and dispose if needed).

    Reporters may be called concurrently from several worker threads when a
    distributor is in use.
    """

    def __call__(self, event: Event) -> None:
        raise NotImplementedError

    def dispose(self) -> None:
        """Release any resources held by the reporter. Called once per run."""


class NullReporter(Reporter):
    """Discards every event."""

    def __call__(self, event: Event) -> None:
        pass

import threading


class CancellationToken:
    """Cooperative cancellation flag, polled by the APKG builder between batches.

    Thread-safe, so a UI or signal handler thread may cancel a build running
    elsewhere.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

"""Network status observer.

Connectivity is a boolean updated by online/offline transition events.
The startup value and refresh() come from a probe; the default probe is
a TCP connect to the remote host. A reported "online" does not mean the
remote service will accept writes.
"""
import socket
from typing import Callable

from arthub.core.constants import DEFAULT_PROBE_PORT, PROBE_TIMEOUT_SECONDS
from arthub.core.receipt import emit_receipt
from arthub.offline.observable import Observable


def is_connected(
    host: str | None,
    port: int = DEFAULT_PROBE_PORT,
    timeout: float = PROBE_TIMEOUT_SECONDS,
) -> bool:
    """Check if host is reachable.

    Args:
        host: Remote host, None means not configured
        port: Port to connect to
        timeout: Connection timeout in seconds

    Returns:
        True if a TCP connection could be opened
    """
    if not host:
        return False
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def host_probe(host: str | None, port: int = DEFAULT_PROBE_PORT) -> Callable[[], bool]:
    """Probe bound to one host."""
    return lambda: is_connected(host, port)


class NetworkStatusObserver:
    """Current connectivity as observable state."""

    def __init__(
        self,
        probe: Callable[[], bool] | None = None,
        initial: bool | None = None,
        tenant_id: str = "default",
    ):
        self.probe = probe
        self.tenant_id = tenant_id
        if initial is None:
            initial = probe() if probe is not None else True
        self._status: Observable[bool] = Observable(bool(initial))

    @property
    def is_online(self) -> bool:
        return self._status.value

    @property
    def is_offline(self) -> bool:
        return not self._status.value

    def _transition(self, online: bool) -> bool:
        changed = self._status.set(online)
        if changed:
            emit_receipt("offline_connectivity", {
                "tenant_id": self.tenant_id,
                "status": "online" if online else "offline",
            })
        return changed

    def handle_online(self) -> bool:
        """Online event. Returns True if the state changed."""
        return self._transition(True)

    def handle_offline(self) -> bool:
        """Offline event. Returns True if the state changed."""
        return self._transition(False)

    def refresh(self) -> bool:
        """Re-run the probe and dispatch the matching event.

        Returns:
            Current connectivity
        """
        if self.probe is not None:
            self._transition(bool(self.probe()))
        return self.is_online

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Call callback(is_online) on every transition.

        Returns:
            Unsubscribe function
        """
        return self._status.subscribe(lambda _old, new: callback(new))

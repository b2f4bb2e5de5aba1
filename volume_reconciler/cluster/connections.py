"""
Provider connection lifecycle for one reconciliation batch.
"""

import logging
from contextlib import ExitStack
from typing import List, Optional

from volume_reconciler.cluster.exceptions import ProviderConnectionError, VolumeReconcilerException
from volume_reconciler.providers.base import VolumeResizer


class ProviderConnectionManager:
    """Opens each backend connection at most once and releases it on exit.

    Use as a context manager around a whole batch:

        with ProviderConnectionManager(logger) as connections:
            connections.ensure_connected(resizer)
            ...

    Every connection opened through the manager is disconnected exactly once
    when the block exits, whether it completes or raises. Disconnection errors
    are logged and collected in `disconnect_errors`, never raised.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.disconnect_errors: List[Exception] = []
        self._connected: List[VolumeResizer] = []
        self._stack = ExitStack()

    def __enter__(self) -> "ProviderConnectionManager":
        self._stack.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return self._stack.__exit__(exc_type, exc, tb)

    @property
    def connected_count(self) -> int:
        return len(self._connected)

    def ensure_connected(self, resizer: VolumeResizer) -> None:
        """
        Connect `resizer` unless it already holds a connection.

        Raises:
            ProviderConnectionError: Connecting failed
        """
        if resizer.is_connected_to_provider():
            return

        try:
            resizer.connect_to_provider()
        except ProviderConnectionError:
            raise
        except Exception as e:
            raise ProviderConnectionError(f"Could not connect to the volume provider {resizer.name}: {e}") from e

        self._connected.append(resizer)
        self._stack.callback(self._disconnect, resizer)

    def _disconnect(self, resizer: VolumeResizer) -> None:
        try:
            resizer.disconnect_from_provider()
        except Exception as e:
            message = e.message if isinstance(e, VolumeReconcilerException) else str(e)
            self.logger.error("could not disconnect from the volume provider %s: %s", resizer.name, message)
            self.disconnect_errors.append(e)

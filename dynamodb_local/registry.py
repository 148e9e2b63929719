from __future__ import annotations

from threading import Lock

from .process import DynamoDbProcess


class ProcessRegistry:
    """Tracks the DynamoDB Local process bound to each port.

    At most one handle is kept per port. Entries are not dropped when the
    process exits on its own, only ``remove`` or ``prune_finished`` do that.
    """

    def __init__(self) -> None:
        self._records: dict[int, DynamoDbProcess] = {}
        self._lock = Lock()

    def get(self, port: int) -> DynamoDbProcess | None:
        with self._lock:
            return self._records.get(port)

    def register(self, port: int, process: DynamoDbProcess) -> DynamoDbProcess:
        with self._lock:
            existing = self._records.get(port)
            if existing is not None:
                return existing
            self._records[port] = process
            return process

    def remove(self, port: int) -> DynamoDbProcess | None:
        with self._lock:
            return self._records.pop(port, None)

    def ports(self) -> list[int]:
        with self._lock:
            return sorted(self._records)

    def handles(self) -> list[DynamoDbProcess]:
        with self._lock:
            return list(self._records.values())

    def prune_finished(self) -> list[DynamoDbProcess]:
        with self._lock:
            finished = [port for port, process in self._records.items() if not process.is_running]
            return [self._records.pop(port) for port in finished]

    def __contains__(self, port: int) -> bool:
        with self._lock:
            return port in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = [
    "ProcessRegistry",
]

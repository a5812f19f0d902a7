from __future__ import annotations

from typing import Protocol, Sequence

from .model import DownloadLog


class DownloadLogRepository(Protocol):
    def list_all(self) -> Sequence[DownloadLog]:
        raise NotImplementedError

    def create(self, log: DownloadLog) -> None:
        raise NotImplementedError

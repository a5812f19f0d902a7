from __future__ import annotations

from typing import Sequence

from ..api.client import ApiClient
from .model import DownloadLog
from .repository import DownloadLogRepository


class RestDownloadLogRepository(DownloadLogRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    def list_all(self) -> Sequence[DownloadLog]:
        return [DownloadLog.from_payload(r) for r in self._api.get_json("/downloadLog") or []]

    def create(self, log: DownloadLog) -> None:
        self._api.post_json("/downloadLog", log.to_payload())

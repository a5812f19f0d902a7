from __future__ import annotations

from typing import Sequence

from ..api.client import ApiClient
from .model import TripleOTDate
from .repository import TripleOTRepository


class RestTripleOTRepository(TripleOTRepository):
    def __init__(self, api: ApiClient):
        self._api = api

    def list_all(self) -> Sequence[TripleOTDate]:
        return [TripleOTDate.from_payload(r) for r in self._api.get_json("/tripleot") or []]

    def create(self, record: TripleOTDate) -> None:
        self._api.post_json("/tripleot", record.to_payload())

    def update(self, record_id: str, record: TripleOTDate) -> None:
        self._api.put_json(f"/tripleot/{record_id}", record.to_payload())

    def delete(self, record_id: str) -> None:
        self._api.delete(f"/tripleot/{record_id}")

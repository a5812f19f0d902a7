from __future__ import annotations

from typing import Protocol, Sequence

from .model import TripleOTDate


class TripleOTRepository(Protocol):
    def list_all(self) -> Sequence[TripleOTDate]:
        raise NotImplementedError

    def create(self, record: TripleOTDate) -> None:
        raise NotImplementedError

    def update(self, record_id: str, record: TripleOTDate) -> None:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError

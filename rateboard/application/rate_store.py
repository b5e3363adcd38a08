"""Rate store protocol. Application layer depends on this; infrastructure implements it."""

from typing import List, Optional, Protocol, Sequence

from rateboard.domain.models.currency import CurrencyRate, RateUpdate


class RateStore(Protocol):
    """
    One record per currency code. Writes are serialized per record; a batch is not
    all-or-nothing across codes. Records are never hard-deleted.
    """

    async def get_active(self) -> List[CurrencyRate]:
        """Active records ordered by code."""
        ...

    async def get_all(self) -> List[CurrencyRate]:
        """Every record, active or not, ordered by code."""
        ...

    async def get_by_code(self, code: str) -> Optional[CurrencyRate]:
        """Record for code (active or not), or None."""
        ...

    async def count(self) -> int:
        ...

    async def create(self, rate: CurrencyRate) -> CurrencyRate:
        """Insert a new record. Raises DuplicateCodeError if the code exists."""
        ...

    async def upsert_batch(
        self,
        updates: Sequence[RateUpdate],
        actor: Optional[str],
    ) -> List[CurrencyRate]:
        """
        Apply each update atomically per record, creating missing records. A record whose
        pair fails the re-check is skipped. Returns the records that were written.
        """
        ...

    async def set_active(self, code: str, active: bool) -> CurrencyRate:
        """Raises RecordNotFoundError if code does not exist."""
        ...

    async def set_visible(self, code: str, visible: bool) -> CurrencyRate:
        """Raises RecordNotFoundError if code does not exist."""
        ...

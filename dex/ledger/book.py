"""Directory of token ledgers keyed by asset identity."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from dex.errors import UnknownAsset
from dex.ledger.base import TokenLedger
from dex.ledger.journaled import JournaledLedger
from dex.models.types import normalize_address
from dex.transaction import Journaled


class LedgerBook:
    """Maps asset addresses to the ledgers that hold their balances.

    Ledgers that cannot snapshot themselves are registered behind a
    JournaledLedger, so every ledger handed out can join a transaction.
    """

    def __init__(self, ledgers: Iterable[TokenLedger] = ()) -> None:
        self._ledgers: dict[str, TokenLedger] = {}
        for ledger in ledgers:
            self.register(ledger)

    def register(self, ledger: TokenLedger) -> TokenLedger:
        """Add a ledger and return the instance the book hands out for it.

        Re-registering the same ledger is a no-op.

        Raises:
            ValueError: If a different ledger already uses the address
        """
        address = normalize_address(ledger.address)
        existing = self._ledgers.get(address)
        if existing is not None:
            if existing is ledger or getattr(existing, "ledger", None) is ledger:
                return existing
            raise ValueError(f"Another ledger is already registered at {address}")
        if not isinstance(ledger, Journaled):
            ledger = JournaledLedger(ledger)
        self._ledgers[address] = ledger
        return ledger

    def get(self, asset: str) -> TokenLedger:
        """Ledger for an asset.

        Raises:
            UnknownAsset: If no ledger is registered for the asset
        """
        ledger = self._ledgers.get(normalize_address(asset))
        if ledger is None:
            raise UnknownAsset(f"No ledger registered for asset {asset}")
        return ledger

    def __contains__(self, asset: object) -> bool:
        if not isinstance(asset, str):
            return False
        return normalize_address(asset, validate=False) in self._ledgers

    def __iter__(self) -> Iterator[TokenLedger]:
        return iter(self._ledgers.values())

    def __len__(self) -> int:
        return len(self._ledgers)

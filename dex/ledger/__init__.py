"""Token ledgers: the external collaborator that holds asset balances."""

from dex.ledger.base import TokenLedger
from dex.ledger.book import LedgerBook
from dex.ledger.journaled import JournaledLedger
from dex.ledger.memory import InMemoryTokenLedger

__all__ = ["TokenLedger", "LedgerBook", "InMemoryTokenLedger", "JournaledLedger"]

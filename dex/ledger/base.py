"""Token ledger interface consumed by pools and the router."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenLedger(Protocol):
    """Per-account balances of one fungible asset.

    The exchange never writes balances directly: it only moves tokens with
    transfer (from an account it controls) and transfer_from (on behalf of a
    caller that approved it). The on-chain implicit msg.sender is the explicit
    first argument of every mutating method.

    A ledger signals failure either by raising or by returning False; the
    router treats False as TransferFailed.

    Nothing else is required. A ledger that also implements Journaled
    (snapshot, restore, release) joins transactions directly; any other
    ledger is wrapped in a JournaledLedger when it is registered.
    """

    @property
    def address(self) -> str:
        """Ledger address; doubles as the asset identity."""
        ...

    def balance_of(self, account: str) -> int:
        """Balance held by account."""
        ...

    def allowance(self, owner: str, spender: str) -> int:
        """Amount spender may still move on behalf of owner."""
        ...

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move amount from sender to to."""
        ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Move amount from owner to to, consuming spender's allowance."""
        ...

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Set spender's allowance over owner's balance."""
        ...

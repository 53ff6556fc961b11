"""Liquidity and swap orchestration.

The Router is stateless: it resolves pools through the registry, works out
deposit amounts that match the current reserve ratio, pulls the caller's
tokens with transfer_from (the caller approves the router beforehand) and
drives Pool.mint / Pool.burn / Pool.swap.

Each public call runs as one transaction over every ledger, pool and the
registry it touches. Any failure (an expired deadline, a missed slippage
bound, a failed transfer) restores all of them, including tokens already
pulled from the caller, and re-raises the error.

Supports:
- add_liquidity / remove_liquidity with minimum-amount bounds
- exact-input and exact-output swaps along multi-hop paths
- read-only quotes (quote, get_amounts_out, get_amounts_in)
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from dex.amm.constant_product import ConstantProduct, constant_product
from dex.config import Clock
from dex.errors import (
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientOutputAmount,
    InvalidPath,
    PairNotFound,
    TransferFailed,
)
from dex.ledger.base import TokenLedger
from dex.models.types import normalize_address, short, validate_amount
from dex.pools.identity import derive_address
from dex.pools.pool import Pool
from dex.pools.registry import PoolRegistry
from dex.routing.types import AddLiquidityResult, HopResult, RemoveLiquidityResult, SwapReceipt
from dex.transaction import atomic

logger = structlog.get_logger()


class Router:
    """Routes liquidity and swap calls through a PoolRegistry.

    Args:
        registry: Registry used to resolve (and create) pools
        address: Router account; the spender callers approve.
                 Defaults to an address derived from the registry's.
        clock: Time source for deadlines. Defaults to the registry's clock.
        amm: Pricing math. Defaults to the constant_product singleton.
    """

    def __init__(
        self,
        registry: PoolRegistry,
        address: str | None = None,
        clock: Clock | None = None,
        amm: ConstantProduct | None = None,
    ) -> None:
        self.registry = registry
        self.address = (
            normalize_address(address)
            if address is not None
            else derive_address(f"dex.router:{registry.address}")
        )
        self._clock = clock if clock is not None else registry.clock
        self.amm = amm if amm is not None else constant_product

    # --- Liquidity ---

    def add_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        deadline: int | None = None,
        to: str | None = None,
    ) -> AddLiquidityResult:
        """Deposit both assets at the current ratio and mint shares.

        An empty pool takes the desired amounts as-is and sets the ratio.
        Otherwise the router keeps amount_a_desired and matches B to it, or,
        if that needs more B than desired, keeps amount_b_desired and matches A.

        Args:
            sender: Caller; pays both assets (must have approved the router)
            asset_a: First asset of the pair (either order)
            asset_b: Second asset
            amount_a_desired: Most A the caller wants to deposit
            amount_b_desired: Most B the caller wants to deposit
            amount_a_min: Least A the caller accepts depositing
            amount_b_min: Least B the caller accepts depositing
            deadline: Latest clock value at which the call may run (None = no limit)
            to: Owner of the new shares (defaults to sender)

        Raises:
            Expired: If the deadline has passed
            InsufficientAAmount / InsufficientBAmount: If the ratio violates a minimum
        """
        self._ensure(deadline)
        for amount in (amount_a_desired, amount_b_desired, amount_a_min, amount_b_min):
            validate_amount(amount)
        sender = normalize_address(sender)
        to = normalize_address(to) if to is not None else sender
        asset_a = normalize_address(asset_a)
        asset_b = normalize_address(asset_b)
        ledger_a = self.registry.ledgers.get(asset_a)
        ledger_b = self.registry.ledgers.get(asset_b)

        with atomic(
            "router.add_liquidity", self.registry, self.registry.events, ledger_a, ledger_b
        ) as tx:
            pool = self.registry.resolve_or_create(asset_a, asset_b)
            tx.touch(pool)
            amount_a, amount_b = self._deposit_amounts(
                pool, asset_a, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
            )
            self._pull(ledger_a, sender, pool.address, amount_a)
            self._pull(ledger_b, sender, pool.address, amount_b)
            if pool.asset0 == asset_a:
                shares = pool.mint(amount_a, amount_b, to, sender=sender)
            else:
                shares = pool.mint(amount_b, amount_a, to, sender=sender)

        logger.info(
            "liquidity_added",
            pool=short(pool.address),
            sender=short(sender),
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        return AddLiquidityResult(pool=pool, amount_a=amount_a, amount_b=amount_b, shares=shares)

    def remove_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        shares: int,
        amount_a_min: int = 0,
        amount_b_min: int = 0,
        deadline: int | None = None,
        to: str | None = None,
    ) -> RemoveLiquidityResult:
        """Burn the sender's shares and pay out the underlying assets.

        Raises:
            Expired: If the deadline has passed
            PairNotFound: If no pool exists for the pair
            InsufficientAAmount / InsufficientBAmount: If a payout is below its minimum
        """
        self._ensure(deadline)
        validate_amount(amount_a_min)
        validate_amount(amount_b_min)
        sender = normalize_address(sender)
        to = normalize_address(to) if to is not None else sender
        asset_a = normalize_address(asset_a)
        pool = self.registry.lookup(asset_a, asset_b)
        if pool is None:
            raise PairNotFound(f"DEX: PAIR_NOT_FOUND ({asset_a}, {asset_b})")

        with atomic(
            "router.remove_liquidity",
            pool,
            self.registry.events,
            pool.ledger_for(pool.asset0),
            pool.ledger_for(pool.asset1),
        ):
            amount0, amount1 = pool.burn(shares, sender, to=to)
            if pool.asset0 == asset_a:
                amount_a, amount_b = amount0, amount1
            else:
                amount_a, amount_b = amount1, amount0
            if amount_a < amount_a_min:
                raise InsufficientAAmount(
                    f"DEX: INSUFFICIENT_A_AMOUNT ({amount_a} < {amount_a_min})"
                )
            if amount_b < amount_b_min:
                raise InsufficientBAmount(
                    f"DEX: INSUFFICIENT_B_AMOUNT ({amount_b} < {amount_b_min})"
                )

        logger.info(
            "liquidity_removed",
            pool=short(pool.address),
            sender=short(sender),
            amount_a=amount_a,
            amount_b=amount_b,
            shares=shares,
        )
        return RemoveLiquidityResult(pool=pool, amount_a=amount_a, amount_b=amount_b, shares=shares)

    # --- Swaps ---

    def swap_exact_input(
        self,
        sender: str,
        path: Sequence[str],
        amount_in: int,
        amount_out_min: int,
        deadline: int | None = None,
        to: str | None = None,
    ) -> SwapReceipt:
        """Sell exactly amount_in of path[0] for as much of path[-1] as the pools give.

        The input is pulled once, straight into the first pool; every hop
        pays its output into the next pool, and the last hop pays `to`.

        Raises:
            Expired: If the deadline has passed
            InvalidPath: If the path has fewer than two assets or a hop has no pool
            InsufficientOutputAmount: If the final output is below amount_out_min
        """
        self._ensure(deadline)
        validate_amount(amount_out_min)
        sender = normalize_address(sender)
        to = normalize_address(to) if to is not None else sender
        path = [normalize_address(asset) for asset in path]
        pools = self._pools_on_path(path)

        amounts = self.get_amounts_out(amount_in, path)
        if amounts[-1] < amount_out_min:
            raise InsufficientOutputAmount(
                f"DEX: INSUFFICIENT_OUTPUT_AMOUNT ({amounts[-1]} < {amount_out_min})"
            )

        return self._execute_swap(
            "router.swap_exact_input", sender, path, pools, amount_in, amount_out_min, to
        )

    def swap_exact_output(
        self,
        sender: str,
        path: Sequence[str],
        amount_out: int,
        amount_in_max: int,
        deadline: int | None = None,
        to: str | None = None,
    ) -> SwapReceipt:
        """Buy at least amount_out of path[-1], paying no more than amount_in_max of path[0].

        Raises:
            Expired: If the deadline has passed
            InvalidPath: If the path has fewer than two assets or a hop has no pool
            ExcessiveInputAmount: If the required input exceeds amount_in_max
        """
        self._ensure(deadline)
        validate_amount(amount_in_max)
        sender = normalize_address(sender)
        to = normalize_address(to) if to is not None else sender
        path = [normalize_address(asset) for asset in path]
        pools = self._pools_on_path(path)

        amounts = self.get_amounts_in(amount_out, path)
        if amounts[0] > amount_in_max:
            raise ExcessiveInputAmount(
                f"DEX: EXCESSIVE_INPUT_AMOUNT ({amounts[0]} > {amount_in_max})"
            )

        return self._execute_swap(
            "router.swap_exact_output", sender, path, pools, amounts[0], amount_out, to
        )

    # --- Quotes ---

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B equal in value to amount_a of A at the given reserves."""
        return self.amm.quote(amount_a, reserve_a, reserve_b)

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int]:
        """Chained exact-input quotes: amounts[i + 1] is the output of hop i.

        Raises:
            InvalidPath: If the path is too short or a hop has no pool
            InsufficientOutputAmount: If an intermediate hop rounds to zero
        """
        validate_amount(amount_in)
        pools = self._pools_on_path(path)
        amounts = [amount_in]
        for i, pool in enumerate(pools):
            if amounts[-1] == 0:
                raise InsufficientOutputAmount(f"DEX: INSUFFICIENT_OUTPUT_AMOUNT (hop {i - 1})")
            reserve_in, reserve_out = pool.reserves_for(path[i])
            amounts.append(
                self.amm.get_amount_out(
                    amounts[-1], reserve_in, reserve_out, pool.config.fee_multiplier
                )
            )
        return amounts

    def get_amounts_in(self, amount_out: int, path: Sequence[str]) -> list[int]:
        """Chained exact-output quotes: amounts[0] is the input the whole path needs.

        Raises:
            InvalidPath: If the path is too short or a hop has no pool
            InsufficientLiquidity: If a hop cannot produce the requested output
        """
        validate_amount(amount_out)
        pools = self._pools_on_path(path)
        amounts = [amount_out]
        for i in range(len(pools) - 1, -1, -1):
            pool = pools[i]
            reserve_in, reserve_out = pool.reserves_for(path[i])
            amount_in = self.amm.get_amount_in(
                amounts[0], reserve_in, reserve_out, pool.config.fee_multiplier
            )
            amounts.insert(0, amount_in)
        return amounts

    # --- Internals ---

    def _ensure(self, deadline: int | None) -> None:
        if deadline is None:
            return
        now = self._clock()
        if now > deadline:
            raise Expired(f"DEX: EXPIRED (now={now}, deadline={deadline})")

    def _pull(self, ledger: TokenLedger, owner: str, to: str, amount: int) -> None:
        if not ledger.transfer_from(self.address, owner, to, amount):
            raise TransferFailed(
                f"DEX: TRANSFER_FROM_FAILED "
                f"({short(ledger.address)}: {short(owner)} -> {short(to)})"
            )

    def _pools_on_path(self, path: Sequence[str]) -> list[Pool]:
        if len(path) < 2:
            raise InvalidPath(f"DEX: INVALID_PATH (length {len(path)})")
        pools = []
        for asset_in, asset_out in zip(path, path[1:]):
            pool = self.registry.lookup(asset_in, asset_out)
            if pool is None:
                raise InvalidPath(f"DEX: INVALID_PATH (no pool for {asset_in}/{asset_out})")
            pools.append(pool)
        return pools

    def _deposit_amounts(
        self,
        pool: Pool,
        asset_a: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        reserve_a, reserve_b = pool.reserves_for(asset_a)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = self.amm.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmount(
                    f"DEX: INSUFFICIENT_B_AMOUNT ({amount_b_optimal} < {amount_b_min})"
                )
            return amount_a_desired, amount_b_optimal

        amount_a_optimal = self.amm.quote(amount_b_desired, reserve_b, reserve_a)
        if amount_a_optimal > amount_a_desired or amount_a_optimal < amount_a_min:
            raise InsufficientAAmount(
                f"DEX: INSUFFICIENT_A_AMOUNT ({amount_a_optimal} not in "
                f"[{amount_a_min}, {amount_a_desired}])"
            )
        return amount_a_optimal, amount_b_desired

    def _execute_swap(
        self,
        label: str,
        sender: str,
        path: list[str],
        pools: list[Pool],
        amount_in: int,
        amount_out_min: int,
        to: str,
    ) -> SwapReceipt:
        ledgers = [self.registry.ledgers.get(asset) for asset in path]
        with atomic(label, self.registry.events, *pools, *ledgers):
            self._pull(ledgers[0], sender, pools[0].address, amount_in)
            hops: list[HopResult] = []
            amounts = [amount_in]
            last = len(pools) - 1
            for i, pool in enumerate(pools):
                recipient = to if i == last else pools[i + 1].address
                amount_out = pool.swap(
                    amounts[-1],
                    path[i],
                    min_amount_out=amount_out_min if i == last else 0,
                    sender=sender,
                    to=recipient,
                )
                hops.append(
                    HopResult(
                        pool=pool,
                        asset_in=path[i],
                        asset_out=path[i + 1],
                        amount_in=amounts[-1],
                        amount_out=amount_out,
                    )
                )
                amounts.append(amount_out)

        logger.info(
            "swap_executed",
            path=[short(asset) for asset in path],
            hops=len(hops),
            amount_in=amounts[0],
            amount_out=amounts[-1],
        )
        return SwapReceipt(path=path, amounts=amounts, hops=hops)


__all__ = ["Router"]

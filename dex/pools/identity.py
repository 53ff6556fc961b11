"""Canonical pair ordering and content-addressed pool identity.

A pool's address is a pure function of (registry address, asset0, asset1),
laid out like a CREATE2 deployment:

    salt    = keccak256(asset0 ++ asset1)                      (packed)
    address = keccak256(0xff ++ registry ++ salt ++ init_code_hash)[12:]

so off-chain tooling can compute where a pool lives without asking the
registry.
"""

from eth_abi.packed import encode_packed
from eth_utils import keccak

from dex.constants import POOL_INIT_CODE_HASH
from dex.errors import IdenticalAssets, ZeroAddress
from dex.models.types import ZERO_ADDRESS, normalize_address


def sort_assets(asset_a: str, asset_b: str) -> tuple[str, str]:
    """Return the pair in canonical order (asset0 < asset1).

    Raises:
        IdenticalAssets: If both identities are the same
        ZeroAddress: If either identity is the zero address
    """
    a = normalize_address(asset_a)
    b = normalize_address(asset_b)
    if a == b:
        raise IdenticalAssets(f"DEX: IDENTICAL_ADDRESSES ({a})")
    asset0, asset1 = (a, b) if a < b else (b, a)
    if asset0 == ZERO_ADDRESS:
        raise ZeroAddress()
    return asset0, asset1


def pair_salt(asset0: str, asset1: str) -> bytes:
    """keccak256 of the packed canonical pair."""
    return keccak(
        encode_packed(
            ["address", "address"],
            [bytes.fromhex(asset0[2:]), bytes.fromhex(asset1[2:])],
        )
    )


def pair_address(
    registry_address: str,
    asset_a: str,
    asset_b: str,
    init_code_hash: bytes = POOL_INIT_CODE_HASH,
) -> str:
    """Deterministic pool address for a pair, in either order.

    Args:
        registry_address: Address of the registry that creates the pool
        asset_a: One asset of the pair
        asset_b: The other asset
        init_code_hash: 32-byte hash mixed into the derivation

    Returns:
        Lowercase 0x-prefixed pool address
    """
    asset0, asset1 = sort_assets(asset_a, asset_b)
    registry = bytes.fromhex(normalize_address(registry_address)[2:])
    digest = keccak(b"\xff" + registry + pair_salt(asset0, asset1) + init_code_hash)
    return "0x" + digest[12:].hex()


def derive_address(seed: str) -> str:
    """Address derived from an arbitrary label (accounts and ledgers in the harness)."""
    return "0x" + keccak(text=seed)[12:].hex()


__all__ = ["sort_assets", "pair_salt", "pair_address", "derive_address"]

"""Protocol constants for the exchange.

Centralizes fee parameters, storage widths and identity-derivation seeds.
"""

from eth_utils import keccak

# Swap fee in basis points (30 = 0.30%) and the basis-point denominator
SWAP_FEE_BPS = 30
FEE_DENOMINATOR = 10_000

# Shares locked forever on a pool's first deposit
MINIMUM_LIQUIDITY = 10**3

# Reserves are stored as uint112 on-chain; price accumulators use UQ112x112
RESERVE_BITS = 112
Q112 = 1 << 112

# Protocol fee takes 1/6 of sqrt(k) growth when a fee recipient is set
PROTOCOL_FEE_DENOMINATOR = 5

# Unlimited allowance sentinel; ledgers do not decrement it
MAX_ALLOWANCE = 2**256 - 1

# Init-code hash that seeds content-addressed pool keys (CREATE2 layout).
# Pools have no bytecode here, so the hash of a versioned label stands in.
POOL_INIT_CODE_HASH = keccak(text="dex.pool.v1")

# Registry address used when none is supplied
DEFAULT_REGISTRY_ADDRESS = "0x" + keccak(text="dex.registry")[12:].hex()

"""Shared account and asset constants for tests.

All addresses are lowercase for consistency with normalize_address().
Asset addresses sort as TOKEN_A < TOKEN_B < TOKEN_C < TOKEN_D, so TOKEN_A is
asset0 of every pair it is in.

Usage:
    from tests.helpers import ALICE, TOKEN_A
    # or
    from tests.helpers.constants import ALICE, TOKEN_A
"""

# =============================================================================
# Accounts
# =============================================================================

ALICE = "0x00000000000000000000000000000000000a11ce"
BOB = "0x0000000000000000000000000000000000000b0b"
CAROL = "0x00000000000000000000000000000000000ca201"
FEE_TO = "0x000000000000000000000000000000000000fee5"

# =============================================================================
# Assets
# =============================================================================

TOKEN_A = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa1"
TOKEN_B = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb2"
TOKEN_C = "0xccccccccccccccccccccccccccccccccccccccc3"
TOKEN_D = "0xddddddddddddddddddddddddddddddddddddddd4"

# =============================================================================
# Registry
# =============================================================================

REGISTRY = "0x1111111111111111111111111111111111111111"

# Start of the fixed test clock
T0 = 1_700_000_000

# Balance every funded account starts with
STARTING_BALANCE = 10**30


__all__ = [
    "ALICE",
    "BOB",
    "CAROL",
    "FEE_TO",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_D",
    "REGISTRY",
    "T0",
    "STARTING_BALANCE",
]

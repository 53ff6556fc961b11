"""AMM pricing math."""

from dex.amm.constant_product import (
    DEFAULT_FEE_MULTIPLIER,
    ConstantProduct,
    SwapQuote,
    constant_product,
)

__all__ = [
    "ConstantProduct",
    "SwapQuote",
    "constant_product",
    "DEFAULT_FEE_MULTIPLIER",
]

"""Chain and token metadata."""

from .models import NATIVE_PLACEHOLDER, Chain, Token
from .registry import ChainRegistry, get_chain_registry

__all__ = [
    "NATIVE_PLACEHOLDER",
    "Chain",
    "Token",
    "ChainRegistry",
    "get_chain_registry",
]

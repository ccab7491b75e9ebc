"""
Brytashop Backend
GraphQL storefront API: accounts, catalogue, cart and checkout
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]

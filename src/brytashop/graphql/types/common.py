"""
Shared GraphQL type definitions
"""

import strawberry


@strawberry.type
class SuccessMessage:
    """Plain acknowledgement returned by mutations without a payload."""

    message: str

"""Storefront-specific exceptions.

Domain rule violations use Protean's own ValidationError and
ObjectNotFoundError; these two cover who is calling.
"""


class AuthenticationRequired(Exception):
    """No valid bearer token accompanied the request."""


class AccessDenied(Exception):
    """The caller is authenticated but may not perform this action."""

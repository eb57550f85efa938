"""Exceptions raised inside the pricing core."""


class InvalidInputError(ValueError):
    """A price, quantity or tax rate that cannot be used in order arithmetic."""

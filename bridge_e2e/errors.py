"""Exceptions raised by the harness and its environments."""


class HarnessError(Exception):
    """Base class for errors surfaced as a failing test result."""


class RegistrationError(HarnessError):
    """Raised when the deposit processor rejects a route binding."""


class FundingError(HarnessError):
    """Raised when a treasury transfer or wrap fails or does not confirm."""


class UnsupportedAssetError(FundingError):
    """Raised when no funding strategy exists for an asset."""


class PollTimeout(HarnessError):
    """Raised when no balance increase is observed before the deadline."""


class BalanceReadError(HarnessError):
    """Raised when a balance cannot be read from the chain."""


class UnknownChainError(HarnessError):
    """Raised when a chain key is not in the registry."""


class UnknownTokenError(HarnessError):
    """Raised when a token has no known address on a chain."""

"""Custom errors for the vault model

Every on-ledger error aborts the whole operation; ``reason`` carries the revert
name surfaced to callers and keepers.
"""

class ProtocolError(Exception):
    """Base error class for vault errors"""
    reason = "ProtocolError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason

class ValidationError(ProtocolError):
    """Caller input errors, retry with corrected input"""
    reason = "ValidationError"

class StateConflictError(ProtocolError):
    """Errors caused by current position or balance state"""
    reason = "StateConflictError"

class ArithmeticOverflowError(ProtocolError):
    """Error for arithmetic overflow/underflow"""
    reason = "ArithmeticOverflow"

class TransferFailed(ProtocolError):
    """Error for a rejected collateral transfer"""
    reason = "TransferFailed"

class NoCollateral(ValidationError):
    reason = "NoCollateral"

class NoMintAmount(ValidationError):
    reason = "NoMintAmount"

class InsufficientCollateral(ValidationError):
    reason = "InsufficientCollateral"

class InvalidPrice(ValidationError):
    """Error for invalid or stale price data"""
    reason = "InvalidPrice"

class NotOwner(ValidationError):
    reason = "NotOwner"

class PositionNotOpen(StateConflictError):
    reason = "PositionNotOpen"

class PositionHealthy(StateConflictError):
    reason = "PositionHealthy"

class PositionUnhealthy(StateConflictError):
    reason = "PositionUnhealthy"

class PositionStillOpen(StateConflictError):
    reason = "PositionStillOpen"

class InsufficientBalance(StateConflictError):
    reason = "InsufficientBalance"

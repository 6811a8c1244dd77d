"""Exception classes for the push/pull transfer protocol."""


class TransferError(Exception):
    """
    Base exception class for all errors raised by this package.
    """
    pass


class ProtocolViolation(TransferError):
    """
    Raised when the peer (or the local file) breaks a protocol invariant.

    These are not retryable: the connection is in an undefined state
    and the transfer must be abandoned.
    """
    pass


class DataIntegrityError(ProtocolViolation):
    """
    Raised when the source file changed size while it was being pushed.
    """

    def __init__(self, declared: int, sent: int):
        super().__init__(
            f"file modified during transmission: declared {declared} bytes, sent {sent}"
        )
        self.declared = declared
        self.sent = sent


class LengthMismatchError(ProtocolViolation):
    """
    Raised when the payload byte count disagrees with the length prefix.
    """

    def __init__(self, declared: int, received: int):
        super().__init__(
            f"length prefix declared {declared} bytes, received {received}"
        )
        self.declared = declared
        self.received = received


class HandshakeError(ProtocolViolation):
    """
    Raised when the completion byte is wrong or never arrives.
    """
    pass


class ConnectionFailedError(TransferError):
    """
    Raised when a connection to the peer could not be established.
    """
    pass

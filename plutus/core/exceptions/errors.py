class PayloadEncodingError(Exception):
    """A response payload could not be serialized to JSON."""

    def __init__(self, message: str = "Failed to encode response"):
        super().__init__(message)
        self.message = message

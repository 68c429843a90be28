class ClearingFailure(Exception):
    """Raised inside the simulation when a clearing attempt is rejected."""

    def __init__(self, message: str, transaction_id: str = ""):
        super().__init__(message)
        self.message = message
        self.transaction_id = transaction_id

    def __str__(self):
        return f"ClearingFailure: {self.message}"

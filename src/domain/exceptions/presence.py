class InvalidPosition(ValueError):
    """Raised for a malformed position update (non-finite or out of range)."""

import secrets

ID_BYTES = 16

class IdGenerationError(RuntimeError):
    """The OS entropy source could not supply bytes for a new receipt id."""

def generate_id() -> str:
    """
    Returns a 32-char lowercase hex id from 16 CSPRNG bytes.
    """
    try:
        return secrets.token_bytes(ID_BYTES).hex()
    except OSError as e:
        raise IdGenerationError(str(e)) from e

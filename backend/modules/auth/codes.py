"""Random one-time codes and opaque verification tokens."""

import secrets

OPAQUE_TOKEN_BYTES = 32


def generate_code(length: int = 6) -> str:
    """
    Generate a numeric code from a CSPRNG.

    Each digit is ``byte % 10``, which very slightly favours 0-5
    (bytes 250-255).
    """
    if length < 1:
        raise ValueError("Code length must be positive")
    return "".join(str(byte % 10) for byte in secrets.token_bytes(length))


def generate_opaque_token() -> str:
    """Generate a 64-character hex token for email verification links."""
    return secrets.token_hex(OPAQUE_TOKEN_BYTES)

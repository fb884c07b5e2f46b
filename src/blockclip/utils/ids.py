"""Block id generation utilities for blockclip."""

import uuid


def generate_block_id() -> str:
    """
    Generate a random block id (UUID v4).

    Used for blocks merged into a document, which never keep the id they had
    in the source document.

    Returns:
        UUID string in standard format

    Example:
        >>> generate_block_id()
        "f47ac10b-58cc-4372-a567-0e02b2c3d479"
    """
    return str(uuid.uuid4())

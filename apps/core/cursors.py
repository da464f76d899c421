"""
Opaque continuation tokens for cursor pagination.
"""
import base64
import binascii
import json
from typing import Dict, Optional


def encode_cursor(data: Dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data, separators=(",", ":")).encode()).decode()


def decode_cursor(token: Optional[str]) -> Optional[Dict]:
    """Return the cursor payload, or None for a missing or unreadable token."""
    if not token:
        return None
    try:
        data = json.loads(base64.urlsafe_b64decode(token.encode()).decode())
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None

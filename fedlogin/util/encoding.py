# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Encoding helpers for fedlogin.
Token claim extraction and safe handling of secret strings.
"""

import hmac
import logging
from typing import Any, Dict, Optional

import jwt

logger = logging.getLogger(__name__)


def extract_jwt_claims(token: str) -> Optional[Dict[str, Any]]:
    """
    Read the claims of a JWT without verifying its signature.

    Signature and audience checks belong to the identity backend that
    receives the token; this is only used to read echoed values.
    Returns None when the token is not a decodable JWT.
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.debug(f"Token is not a decodable JWT: {e}")
        return None


def secure_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Timing-safe string comparison to prevent timing attacks.
    """
    if not isinstance(a, str) or not isinstance(b, str):
        return False

    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))


def mask_sensitive_data(data: str, mask_char: str = '*',
                        show_first: int = 2, show_last: int = 2) -> str:
    """
    Mask sensitive data leaving only first and last characters visible.
    """
    if not isinstance(data, str) or len(data) <= (show_first + show_last):
        return mask_char * len(data) if data else ""

    first_part = data[:show_first]
    last_part = data[-show_last:] if show_last > 0 else ""
    middle_length = len(data) - show_first - show_last

    return first_part + (mask_char * middle_length) + last_part

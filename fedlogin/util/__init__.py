# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Utility package providing helper functions for fedlogin.

This package includes:
- Configuration lookup from the environment and duration parsing
- JWT claim extraction and timing-safe comparison of secrets
"""

from .config import (
    ENV_PREFIX, get_config_value, get_int_config,
    get_list_config, parse_duration_string, parse_optional_duration
)
from .encoding import extract_jwt_claims, secure_compare, mask_sensitive_data

__all__ = [
    # Configuration utilities
    'ENV_PREFIX', 'get_config_value', 'get_int_config',
    'get_list_config', 'parse_duration_string', 'parse_optional_duration',

    # Encoding utilities
    'extract_jwt_claims', 'secure_compare', 'mask_sensitive_data',
]

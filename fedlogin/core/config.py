"""
Configuration module for fedlogin.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from datetime import timedelta
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from .types import LoginMethod
from ..util.config import (
    get_config_value, get_int_config, get_list_config, parse_optional_duration
)

DEFAULT_PROVIDER_SCOPES: Dict[LoginMethod, List[str]] = {
    LoginMethod.GOOGLE: ["email", "profile"],
    LoginMethod.GITHUB: ["read:user", "user:email"],
    LoginMethod.FACEBOOK: ["public_profile", "email"],
    LoginMethod.APPLE: ["full_name", "email"],
}


@dataclass
class Config:
    """Configuration for the login orchestrator"""
    nonce_length: int = 32
    attempt_timeout: Optional[timedelta] = field(default_factory=lambda: timedelta(seconds=120))
    history_size: int = 50
    audit_max_entries: int = 1000
    provider_scopes: Dict[LoginMethod, List[str]] = field(default_factory=dict)

    def __post_init__(self):
        scopes = {method: list(values) for method, values in DEFAULT_PROVIDER_SCOPES.items()}
        scopes.update(self.provider_scopes)
        self.provider_scopes = scopes

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from FEDLOGIN_* environment variables"""
        overrides = {}
        for method in DEFAULT_PROVIDER_SCOPES:
            scopes = get_list_config(f"{method.value}_scopes")
            if scopes:
                overrides[method] = scopes

        return cls(
            nonce_length=get_int_config("nonce_length", 32),
            attempt_timeout=parse_optional_duration(get_config_value("attempt_timeout", "120s")),
            history_size=get_int_config("history_size", 50),
            audit_max_entries=get_int_config("audit_max_entries", 1000),
            provider_scopes=overrides,
        )

    def scopes_for(self, method: LoginMethod) -> List[str]:
        """Scopes requested from the provider behind ``method``"""
        return list(self.provider_scopes.get(method, []))

    def validate(self) -> bool:
        """Validate the configuration"""
        if self.nonce_length <= 0:
            raise ValueError("nonce_length must be positive")
        if self.attempt_timeout is not None and self.attempt_timeout <= timedelta(0):
            raise ValueError("attempt_timeout must be positive or None")
        if self.history_size < 0:
            raise ValueError("history_size must not be negative")
        if self.audit_max_entries <= 0:
            raise ValueError("audit_max_entries must be positive")
        return True

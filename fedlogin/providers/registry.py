# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Default adapter registry keyed by login method.
"""

from typing import Dict, Optional

from .access_token import SimpleOAuthAdapter
from .base import CredentialAdapter
from .chained import ChainedCredentialAdapter
from .identity_token import NonceCredentialAdapter
from ..auth.nonce import NonceGenerator
from ..core.config import Config
from ..core.types import LoginMethod


def create_default_adapters(config: Optional[Config] = None,
                            nonce_generator: Optional[NonceGenerator] = None
                            ) -> Dict[LoginMethod, CredentialAdapter]:
    """
    Create one adapter per federated login method.

    Args:
        config: Supplies provider scopes and nonce length
        nonce_generator: Generator for the identity-token provider

    Returns:
        Mapping from login method to its adapter
    """
    config = config or Config()

    return {
        LoginMethod.GOOGLE: SimpleOAuthAdapter(
            LoginMethod.GOOGLE, "Google", config.scopes_for(LoginMethod.GOOGLE)
        ),
        LoginMethod.GITHUB: SimpleOAuthAdapter(
            LoginMethod.GITHUB, "GitHub", config.scopes_for(LoginMethod.GITHUB)
        ),
        LoginMethod.FACEBOOK: ChainedCredentialAdapter(
            LoginMethod.FACEBOOK, "Facebook", config.scopes_for(LoginMethod.FACEBOOK)
        ),
        LoginMethod.APPLE: NonceCredentialAdapter(
            LoginMethod.APPLE, "Apple", config.scopes_for(LoginMethod.APPLE),
            nonce_generator=nonce_generator,
            nonce_length=config.nonce_length,
        ),
    }

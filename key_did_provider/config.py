"""Provider configuration.

Settings live on a pydantic ``ProviderConfig`` model. ``load_config`` fills it from
``KEY_DID_AUTH_EXPIRY_SECONDS``, the lifetime in seconds of the ``exp`` claim in
``did_authenticate`` responses, and falls back to the model defaults when the
variable is unset.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, PositiveInt

AUTH_EXPIRY_ENV = "KEY_DID_AUTH_EXPIRY_SECONDS"


class ProviderConfig(BaseModel):
    """Provider configuration."""

    auth_expiry_seconds: PositiveInt = 600


def load_config(environ: Optional[dict[str, str]] = None) -> ProviderConfig:
    """Load configuration from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``.

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ
    data = {}
    expiry = env.get(AUTH_EXPIRY_ENV)
    if expiry:
        data["auth_expiry_seconds"] = expiry
    return ProviderConfig(**data)

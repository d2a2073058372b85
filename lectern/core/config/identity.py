import typing as t

import annotated_types as ant

from .base import BaseSettings


class IdentitySettings(BaseSettings):
    """Rules applied when accounts are registered or changed."""

    # lowercase domains, compared against the part after the @
    allowed_email_domains: list[str]
    min_password_length: t.Annotated[int, ant.Ge(1), ant.Le(72)] = 8

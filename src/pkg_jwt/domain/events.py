from dataclasses import dataclass

from .entities import Token


@dataclass(frozen=True, slots=True)
class TokenGenerating:
    """Dispatched after the subject is accepted, before claims are built."""
    generator: str
    subject: str


@dataclass(frozen=True, slots=True)
class TokenGenerated:
    """Dispatched once the token has been signed."""
    generator: str
    token: Token

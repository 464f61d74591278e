from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(slots=True)
class JWTSettings:
    """
    Application values + raw generator configuration.

    Host code decides how to construct this (env, config file, etc.).
    `generators` maps a generator name to its raw configuration:

        {
            "algorithm": "RS256",
            "key": {"signing": "file:/keys/private.pem",
                    "verification": "file:/keys/public.pem"},
            "expiry": "1 hour",
            "claims": ["app_name_as_issuer", ["not_within", "5 minutes"]],
        }
    """
    app_key: Optional[str] = None
    app_name: Optional[str] = None
    app_url: Optional[str] = None
    generators: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> JWTSettings:
        generators = data.get("generators") or {}
        if not isinstance(generators, Mapping):
            raise ValueError("'generators' must be a mapping of name -> configuration")
        return cls(
            app_key=data.get("app_key"),
            app_name=data.get("app_name"),
            app_url=data.get("app_url"),
            generators={str(name): dict(cfg or {}) for name, cfg in generators.items()},
        )

    def generator_config(self, name: str) -> Optional[Dict[str, Any]]:
        return self.generators.get(name)

    @property
    def generator_names(self) -> list[str]:
        return sorted(self.generators)

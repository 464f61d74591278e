from __future__ import annotations

from typing import Callable, Dict, Iterable, Mapping, Optional

from ..domain.claims import (
    AppNameAsIssuer,
    AppNameInAudience,
    AppUrlAsIssuer,
    AsAudience,
    AsIssuer,
    GeneratorNameAsIssuer,
    GeneratorNameInAudience,
    InAudience,
    NotWithin,
    UniqueId,
    WithClaim,
)
from ..domain.exceptions import UnresolvableClaimError
from ..domain.ports import JWTClaim
from ..domain.value_objects import ClaimSpec

ClaimFactory = Callable[..., JWTClaim]


class ClaimRegistry:
    """
    Typed mapping from a claim tag (as written in configuration) to the
    factory that builds the contributor.

    Factories receive the literal params of the ClaimSpec positionally.
    """

    def __init__(self, factories: Optional[Mapping[str, ClaimFactory]] = None) -> None:
        self._factories: Dict[str, ClaimFactory] = dict(factories or {})

    def register(self, tag: str, factory: ClaimFactory, *, replace: bool = False) -> None:
        if not replace and tag in self._factories:
            raise ValueError(f'Claim tag "{tag}" is already registered')
        self._factories[tag] = factory

    def has(self, tag: str) -> bool:
        return tag in self._factories

    def tags(self) -> Iterable[str]:
        return tuple(self._factories)

    def make(self, spec: ClaimSpec) -> JWTClaim:
        """
        Build a fresh contributor for the ClaimSpec.

        Raises:
            UnresolvableClaimError
        """
        factory = self._factories.get(spec.tag)
        if factory is None:
            raise UnresolvableClaimError(
                f'The JWT claim "{spec.tag}" is not registered.', claim=spec.tag
            )

        try:
            instance = factory(*spec.params)
        except (TypeError, ValueError) as exc:
            raise UnresolvableClaimError(
                f'The JWT claim "{spec.tag}" cannot be resolved: {exc}', claim=spec.tag
            ) from exc

        if not isinstance(instance, JWTClaim):
            raise UnresolvableClaimError(
                f'The JWT claim "{spec.tag}" must provide name() and value().', claim=spec.tag
            )
        return instance


def _requires(setting: str, value: Optional[str], factory: Callable[[str], JWTClaim]) -> ClaimFactory:
    def build() -> JWTClaim:
        if not value:
            raise ValueError(f"the application setting '{setting}' is not configured")
        return factory(value)

    return build


def default_claim_registry(
    *,
    app_name: Optional[str] = None,
    app_url: Optional[str] = None,
) -> ClaimRegistry:
    """Registry with every built-in contributor, bound to the app settings."""
    return ClaimRegistry(
        {
            "app_name_as_issuer": _requires("app_name", app_name, AppNameAsIssuer),
            "app_url_as_issuer": _requires("app_url", app_url, AppUrlAsIssuer),
            "as_issuer": AsIssuer,
            "generator_name_as_issuer": GeneratorNameAsIssuer,
            "app_name_in_audience": _requires("app_name", app_name, AppNameInAudience),
            "in_audience": InAudience,
            "as_audience": AsAudience,
            "generator_name_in_audience": GeneratorNameInAudience,
            "not_within": NotWithin,
            "unique_id": UniqueId,
            "with_claim": WithClaim,
        }
    )

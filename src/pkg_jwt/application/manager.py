from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import structlog

from ..config.settings import JWTSettings
from ..domain.constants import Algorithm, DEFAULT_DRIVER, DEFAULT_EXPIRY_SECONDS
from ..domain.entities import GeneratorConfig
from ..domain.exceptions import (
    InvalidClaimSpecError,
    InvalidDriverResultError,
    InvalidExpiryError,
    InvalidKeyError,
    UnknownAlgorithmError,
    UnknownGeneratorError,
    UnsupportedDriverError,
)
from ..domain.ports import EventDispatcher, Generator, TokenCodec
from ..domain.value_objects import ClaimSpec, KeyMaterial, load_key, parse_duration
from .claim_registry import ClaimRegistry, default_claim_registry
from .generator import Clock, DefaultGenerator, utc_now

logger = structlog.get_logger(__name__)

DriverFactory = Callable[[GeneratorConfig, "GeneratorManager"], Any]


class GeneratorManager:
    """
    Resolves named generator configurations into Generators.

    - get(name):     cached accessor, resolves on first use
    - resolve(name): always rebuilds and replaces the cache entry

    The cache belongs to this instance; two managers never share generators.
    """

    def __init__(
        self,
        settings: JWTSettings,
        *,
        codec: TokenCodec,
        claims: Optional[ClaimRegistry] = None,
        dispatcher: Optional[EventDispatcher] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = settings
        self._codec = codec
        self._claims = claims or default_claim_registry(
            app_name=settings.app_name,
            app_url=settings.app_url,
        )
        self._dispatcher = dispatcher
        self._clock = clock

        self._drivers: Dict[str, DriverFactory] = {}
        self._generators: Dict[str, Generator] = {}

    # ------------------------------------------------------------------ #
    # Collaborators (exposed for driver factories)
    # ------------------------------------------------------------------ #

    @property
    def settings(self) -> JWTSettings:
        return self._settings

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    @property
    def claims(self) -> ClaimRegistry:
        return self._claims

    @property
    def dispatcher(self) -> Optional[EventDispatcher]:
        return self._dispatcher

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def get(self, name: str) -> Generator:
        generator = self._generators.get(name)
        if generator is not None:
            return generator
        return self.resolve(name)

    def resolve(self, name: str) -> Generator:
        """
        Build the generator for `name` from configuration.

        Raises:
            UnknownGeneratorError
            UnknownAlgorithmError
            InvalidKeyError
            InvalidExpiryError
            InvalidClaimSpecError
            UnsupportedDriverError
            InvalidDriverResultError
        """
        raw = self._settings.generator_config(name)
        if raw is None:
            raise UnknownGeneratorError(f"No generator found for name: {name}", generator=name)

        config = self._build_config(name, self._fill_default_config(raw))
        generator = self._create_generator(config)

        self._generators[name] = generator

        logger.info(
            "jwt_generator_resolved",
            generator=name,
            algorithm=config.algorithm.value,
            driver=config.driver,
            claims=[spec.tag for spec in config.claims],
        )
        return generator

    def register_driver(self, driver: str, factory: DriverFactory) -> None:
        """
        Register an alternate construction strategy, selected with
        `"driver": "<name>"` in a generator's configuration.

        The factory receives the resolved GeneratorConfig and this manager,
        and must return an object satisfying the Generator protocol.
        """
        if driver == DEFAULT_DRIVER:
            raise ValueError(f'Driver "{DEFAULT_DRIVER}" cannot be replaced')
        self._drivers[driver] = factory

    def create_default_generator(self, config: GeneratorConfig) -> DefaultGenerator:
        return DefaultGenerator(
            config,
            codec=self._codec,
            claims=self._claims,
            dispatcher=self._dispatcher,
            clock=self._clock,
        )

    def resolved(self) -> Tuple[str, ...]:
        return tuple(self._generators)

    def forget(self, name: str) -> None:
        self._generators.pop(name, None)

    def clear(self) -> None:
        self._generators.clear()

    # ------------------------------------------------------------------ #
    # Defaults & validation
    # ------------------------------------------------------------------ #

    def _fill_default_config(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        config = dict(raw)

        # No algorithm: HS256 signed with the application key.
        if config.get("algorithm") is None:
            config["algorithm"] = Algorithm.HS256
            config["key"] = self._settings.app_key

        if config.get("expiry") is None:
            config["expiry"] = DEFAULT_EXPIRY_SECONDS

        return config

    def _build_config(self, name: str, config: Dict[str, Any]) -> GeneratorConfig:
        algorithm = self._resolve_algorithm(name, config)
        keys = self._resolve_keys(name, algorithm, config)
        expiry = self._resolve_expiry(name, config)
        claims = self._resolve_claims(name, config)

        driver = config.get("driver") or DEFAULT_DRIVER
        if not isinstance(driver, str):
            raise UnsupportedDriverError(f"Driver [{driver!r}] not supported.", generator=name)

        return GeneratorConfig(
            name=name,
            algorithm=algorithm,
            keys=keys,
            expiry=expiry,
            claims=claims,
            driver=driver,
            # Key sources never reach options.
            options={k: v for k, v in config.items() if k != "key"},
        )

    @staticmethod
    def _resolve_algorithm(name: str, config: Mapping[str, Any]) -> Algorithm:
        try:
            return Algorithm.from_value(config["algorithm"])
        except UnknownAlgorithmError as exc:
            raise UnknownAlgorithmError(
                f'Invalid algorithm for JWT generator "{name}".', generator=name
            ) from exc

    def _resolve_keys(self, name: str, algorithm: Algorithm, config: Mapping[str, Any]) -> KeyMaterial:
        key = config.get("key")

        if algorithm.is_symmetric:
            if not isinstance(key, str) or not key:
                raise InvalidKeyError(f'Invalid key set for JWT generator "{name}".', generator=name)
            return KeyMaterial.symmetric(self._prepare_key(name, algorithm, key))

        if not isinstance(key, Mapping) or not all(
            isinstance(key.get(part), str) and key.get(part)
            for part in ("signing", "verification")
        ):
            raise InvalidKeyError(
                f'Invalid public/private key pair set for JWT generator "{name}".',
                generator=name,
            )

        return KeyMaterial(
            signing_key=self._prepare_key(name, algorithm, key["signing"]),
            verification_key=self._prepare_key(name, algorithm, key["verification"]),
        )

    def _prepare_key(self, name: str, algorithm: Algorithm, source: str) -> Any:
        try:
            return self._codec.prepare_key(algorithm, load_key(source))
        except InvalidKeyError as exc:
            raise InvalidKeyError(
                f'Invalid key set for JWT generator "{name}": {exc}', generator=name
            ) from exc

    def _resolve_expiry(self, name: str, config: Mapping[str, Any]) -> timedelta:
        try:
            expiry = parse_duration(config["expiry"])
            # Expiration times must stay representable as dates.
            self._clock() + expiry
        except (ValueError, OverflowError) as exc:
            raise InvalidExpiryError(
                f'Invalid expiry set for JWT generator "{name}".', generator=name
            ) from exc
        return expiry

    def _resolve_claims(self, name: str, config: Mapping[str, Any]) -> Tuple[ClaimSpec, ...]:
        entries = config.get("claims") or ()
        if not isinstance(entries, (list, tuple)):
            raise InvalidClaimSpecError(
                f'Claims for JWT generator "{name}" must be a list.', generator=name
            )

        specs = []
        for entry in entries:
            try:
                spec = ClaimSpec.from_config(entry)
            except InvalidClaimSpecError as exc:
                raise InvalidClaimSpecError(f'{exc} (generator "{name}")', generator=name) from exc

            if not self._claims.has(spec.tag):
                raise InvalidClaimSpecError(
                    f'Unknown claim "{spec.tag}" for JWT generator "{name}".', generator=name
                )
            specs.append(spec)

        return tuple(specs)

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    def _create_generator(self, config: GeneratorConfig) -> Generator:
        if config.driver == DEFAULT_DRIVER:
            return self.create_default_generator(config)

        factory = self._drivers.get(config.driver)
        if factory is None:
            raise UnsupportedDriverError(
                f"Driver [{config.driver}] not supported.", generator=config.name
            )

        instance = factory(config, self)
        if not isinstance(instance, Generator):
            raise InvalidDriverResultError(
                f"Driver [{config.driver}] must return a Generator.", generator=config.name
            )
        return instance

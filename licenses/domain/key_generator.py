"""
License key generation, validation and parsing.

Four strategies are supported:

- standard:  PREFIX-XXXX-XXXX-XXXX-XXXX
- compact:   PREFIX-XXXXXXXXXXXX (block length 8-20, default 12)
- segmented: PREFIX followed by 2-10 segments of 2-8 characters
- custom:    a caller supplied template with placeholders
             ``{random:N}``, ``{timestamp:FORMAT}``, ``{year}``, ``{month}``
             and ``{day}``

Random characters are drawn from uppercase letters and digits. Numeric
options outside their bounds are clamped; unrecognized option keys are
ignored.
"""

import logging
import re
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from core.domain.exceptions import (
    InvalidInputError,
    InvalidKeyOptionsError,
    KeyCollisionExhaustedError,
)
from core.domain.value_objects import KeyStrategy, LicensePlan
from core.metrics import (
    license_key_collisions_total,
    license_key_exhaustions_total,
    license_keys_generated_total,
)
from licenses.domain.plans import PLAN_KEY_PREFIXES, parse_plan

logger = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_PREFIX = "MEDI"
DEFAULT_MAX_ATTEMPTS = 10
MAX_BATCH_SIZE = 100
MAX_TEMPLATE_LENGTH = 100
MAX_RANDOM_PLACEHOLDER = 32

SEGMENT_LENGTH_BOUNDS = (2, 8)
SEGMENT_COUNT_BOUNDS = (2, 10)
COMPACT_LENGTH_BOUNDS = (8, 20)

_PREFIX = re.compile(r"^[A-Z0-9]{1,10}$")
_PLACEHOLDER = re.compile(r"\{random:(\d+)\}|\{timestamp:([^{}]+)\}|\{(year|month|day)\}")
_DATE_FORMATS = {"year": "%Y", "month": "%m", "day": "%d"}

_GENERIC_PATTERNS = {
    KeyStrategy.STANDARD: re.compile(r"^[A-Z0-9]{1,10}(?:-[A-Z0-9]{4}){4}$"),
    KeyStrategy.COMPACT: re.compile(r"^[A-Z0-9]{1,10}-[A-Z0-9]{8,20}$"),
    KeyStrategy.SEGMENTED: re.compile(r"^[A-Z0-9]{1,10}(?:-[A-Z0-9]{2,8}){2,10}$"),
}

STRATEGY_DESCRIPTIONS = {
    KeyStrategy.STANDARD: "Standard (MEDI-XXXX-XXXX-XXXX-XXXX)",
    KeyStrategy.COMPACT: "Compact (MEDI-XXXXXXXXXXXX)",
    KeyStrategy.SEGMENTED: "Segmented (configurable segment count and length)",
    KeyStrategy.CUSTOM: "Custom (user-defined template)",
}


def _clamp(options: Mapping[str, Any], name: str, default: int, bounds: Tuple[int, int]) -> int:
    value = options.get(name)
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidKeyOptionsError(f"Option '{name}' must be an integer, got {value!r}") from None
    low, high = bounds
    return min(max(number, low), high)


def _random_block(length: int) -> str:
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class KeyOptions:
    """Normalized generation options."""

    prefix: str = DEFAULT_PREFIX
    segment_length: int = 4
    segments: int = 4
    length: int = 12
    template: Optional[str] = None

    @classmethod
    def from_mapping(
        cls,
        strategy: KeyStrategy,
        options: Optional[Mapping[str, Any]] = None,
        default_prefix: str = DEFAULT_PREFIX,
    ) -> "KeyOptions":
        """
        Normalize a caller supplied options bag for a strategy.

        Raises:
            InvalidKeyOptionsError: If the prefix or template is unusable
        """
        options = options or {}

        prefix = str(options.get("prefix") or default_prefix).strip().upper()
        if not _PREFIX.match(prefix):
            raise InvalidKeyOptionsError(
                f"Invalid key prefix {prefix!r}: use 1-10 letters or digits"
            )

        if strategy is KeyStrategy.STANDARD:
            # Standard keys have a fixed shape; only the prefix is configurable.
            return cls(prefix=prefix)

        if strategy is KeyStrategy.CUSTOM:
            template = options.get("format")
            cls._check_template(template)
            return cls(prefix=prefix, template=template)

        return cls(
            prefix=prefix,
            segment_length=_clamp(options, "segment_length", 4, SEGMENT_LENGTH_BOUNDS),
            segments=_clamp(options, "segments", 4, SEGMENT_COUNT_BOUNDS),
            length=_clamp(options, "length", 12, COMPACT_LENGTH_BOUNDS),
        )

    @staticmethod
    def _check_template(template: Any) -> None:
        if not isinstance(template, str) or not template.strip():
            raise InvalidKeyOptionsError("Custom format is required for custom strategy")
        if len(template) > MAX_TEMPLATE_LENGTH:
            raise InvalidKeyOptionsError(
                f"Custom format must be at most {MAX_TEMPLATE_LENGTH} characters"
            )
        placeholders = list(_PLACEHOLDER.finditer(template))
        if not placeholders:
            raise InvalidKeyOptionsError(
                "Custom format must contain at least one placeholder such as {random:8}"
            )
        if any(ch.isspace() for ch in _PLACEHOLDER.sub("", template)):
            raise InvalidKeyOptionsError("Custom format must not contain whitespace")
        for match in placeholders:
            if match.group(1) is not None:
                size = int(match.group(1))
                if not 1 <= size <= MAX_RANDOM_PLACEHOLDER:
                    raise InvalidKeyOptionsError(
                        f"{{random:N}} requires 1 <= N <= {MAX_RANDOM_PLACEHOLDER}"
                    )
            elif match.group(2) is not None:
                _check_timestamp_format(match.group(2))

    def pattern(self, strategy: KeyStrategy) -> "re.Pattern[str]":
        """Exact pattern matched by keys built from these options."""
        prefix = re.escape(self.prefix)
        if strategy is KeyStrategy.STANDARD:
            return re.compile(rf"^{prefix}(?:-[A-Z0-9]{{4}}){{4}}$")
        if strategy is KeyStrategy.COMPACT:
            return re.compile(rf"^{prefix}-[A-Z0-9]{{{self.length}}}$")
        if strategy is KeyStrategy.SEGMENTED:
            return re.compile(
                rf"^{prefix}(?:-[A-Z0-9]{{{self.segment_length}}}){{{self.segments}}}$"
            )
        return _template_pattern(self.template)


# Single and double digit fields, so space padded directives such as %e show up.
_SAMPLE_MOMENTS = (
    datetime(2001, 2, 3, 4, 5, 6, tzinfo=timezone.utc),
    datetime(2024, 12, 25, 23, 59, 58, tzinfo=timezone.utc),
)


def _check_timestamp_format(fmt: str) -> None:
    for moment in _SAMPLE_MOMENTS:
        try:
            rendered = moment.strftime(fmt)
        except ValueError as e:
            raise InvalidKeyOptionsError(f"Invalid timestamp format {fmt!r}: {e}") from e
        if not rendered or any(ch.isspace() for ch in rendered):
            raise InvalidKeyOptionsError(
                f"Timestamp format {fmt!r} must render a non-empty value without whitespace"
            )


def _template_pattern(template: str) -> "re.Pattern[str]":
    parts = []
    position = 0
    for match in _PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[position:match.start()]))
        if match.group(1) is not None:
            parts.append(f"[A-Z0-9]{{{int(match.group(1))}}}")
        elif match.group(2) is not None:
            parts.append(".+?")
        elif match.group(3) == "year":
            parts.append(r"\d{4}")
        else:
            parts.append(r"\d{2}")
        position = match.end()
    parts.append(re.escape(template[position:]))
    return re.compile("^" + "".join(parts) + "$", re.DOTALL)


def build_key(strategy: KeyStrategy, options: KeyOptions, now: Optional[datetime] = None) -> str:
    """Build one candidate key. No uniqueness check."""
    if strategy is KeyStrategy.STANDARD:
        return "-".join([options.prefix] + [_random_block(4) for _ in range(4)])
    if strategy is KeyStrategy.COMPACT:
        return f"{options.prefix}-{_random_block(options.length)}"
    if strategy is KeyStrategy.SEGMENTED:
        segments = [_random_block(options.segment_length) for _ in range(options.segments)]
        return "-".join([options.prefix] + segments)

    moment = now or datetime.now(timezone.utc)

    def substitute(match: "re.Match[str]") -> str:
        if match.group(1) is not None:
            return _random_block(int(match.group(1)))
        if match.group(2) is not None:
            return moment.strftime(match.group(2))
        return moment.strftime(_DATE_FORMATS[match.group(3)])

    return _PLACEHOLDER.sub(substitute, options.template)


@dataclass(frozen=True)
class ParsedLicenseKey:
    """Best-effort decomposition of a key."""

    prefix: str = ""
    segments: Tuple[str, ...] = ()
    segment_count: int = 0
    total_length: int = 0
    strategy_guess: Optional[KeyStrategy] = None

    @property
    def recognized(self) -> bool:
        return self.strategy_guess is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prefix": self.prefix,
            "segments": list(self.segments),
            "segment_count": self.segment_count,
            "total_length": self.total_length,
            "strategy_guess": self.strategy_guess.value if self.strategy_guess else None,
            "recognized": self.recognized,
        }


@dataclass
class KeyStatistics:
    """Issued key and license counts."""

    total_keys_issued: int = 0
    retired_keys: int = 0
    keys_by_strategy: Dict[str, int] = field(default_factory=dict)
    total_licenses: int = 0
    licenses_by_plan: Dict[str, int] = field(default_factory=dict)
    licenses_by_status: Dict[str, int] = field(default_factory=dict)
    expiring_soon: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_keys_issued": self.total_keys_issued,
            "retired_keys": self.retired_keys,
            "keys_by_strategy": dict(self.keys_by_strategy),
            "total_licenses": self.total_licenses,
            "licenses_by_plan": dict(self.licenses_by_plan),
            "licenses_by_status": dict(self.licenses_by_status),
            "expiring_soon": self.expiring_soon,
            "generation_strategies": {
                strategy.value: description
                for strategy, description in STRATEGY_DESCRIPTIONS.items()
            },
        }


class LicenseKeyGenerator:
    """
    Domain service producing keys that were never issued before.

    Every candidate is checked against the registry of issued keys and
    re-rolled on collision, up to ``max_attempts`` candidates per key.
    """

    def __init__(
        self,
        license_key_repository: "LicenseKeyRepository",  # noqa: F821
        license_repository: Optional["LicenseRepository"] = None,  # noqa: F821
        default_prefix: str = DEFAULT_PREFIX,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.license_key_repository = license_key_repository
        self.license_repository = license_repository
        self.default_prefix = default_prefix
        self.max_attempts = max_attempts

    def _options(
        self, strategy: Union[str, KeyStrategy], options: Optional[Mapping[str, Any]]
    ) -> Tuple[KeyStrategy, KeyOptions]:
        strategy = KeyStrategy.parse(strategy)
        return strategy, KeyOptions.from_mapping(strategy, options, self.default_prefix)

    async def key_exists(self, key: str) -> bool:
        """True if the key was ever issued. Format is not checked."""
        return await self.license_key_repository.exists(key)

    async def _unique(
        self, strategy: KeyStrategy, options: KeyOptions, reserved: Set[str]
    ) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = build_key(strategy, options)
            if candidate in reserved or await self.key_exists(candidate):
                license_key_collisions_total.labels(strategy=strategy.value).inc()
                logger.warning(
                    "License key collision, re-rolling",
                    extra={"strategy": strategy.value, "attempt": attempt},
                )
                continue
            license_keys_generated_total.labels(strategy=strategy.value).inc()
            logger.info(
                "License key generated",
                extra={"strategy": strategy.value, "attempts": attempt},
            )
            return candidate

        license_key_exhaustions_total.labels(strategy=strategy.value).inc()
        logger.error(
            "Unable to generate a unique license key",
            extra={"strategy": strategy.value, "attempts": self.max_attempts},
        )
        raise KeyCollisionExhaustedError(
            f"Unable to generate a unique {strategy.value} license key "
            f"after {self.max_attempts} attempts"
        )

    async def generate(
        self,
        strategy: Union[str, KeyStrategy] = KeyStrategy.STANDARD,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Generate one key that is not in the registry.

        Raises:
            InvalidKeyStrategyError: If the strategy is unknown
            InvalidKeyOptionsError: If the options are unusable after clamping
            KeyCollisionExhaustedError: If every attempt collided
        """
        strategy, key_options = self._options(strategy, options)
        return await self._unique(strategy, key_options, set())

    async def generate_multiple(
        self,
        count: int,
        strategy: Union[str, KeyStrategy] = KeyStrategy.STANDARD,
        options: Optional[Mapping[str, Any]] = None,
    ) -> List[str]:
        """
        Generate ``count`` keys (1-100), distinct from the registry and from
        each other.
        """
        if not isinstance(count, int) or not 1 <= count <= MAX_BATCH_SIZE:
            raise InvalidInputError(
                f"Count must be between 1 and {MAX_BATCH_SIZE}", code="INVALID_KEY_COUNT"
            )
        strategy, key_options = self._options(strategy, options)
        keys: List[str] = []
        reserved: Set[str] = set()
        for _ in range(count):
            key = await self._unique(strategy, key_options, reserved)
            reserved.add(key)
            keys.append(key)
        return keys

    async def generate_with_characteristics(
        self,
        plan: Union[str, LicensePlan, None] = None,
        strategy: Union[str, KeyStrategy] = KeyStrategy.STANDARD,
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Generate a key whose prefix reflects the plan tier (STD, PRM, ENT).
        An explicit ``prefix`` option wins over the plan prefix.
        """
        merged: Dict[str, Any] = {}
        if plan is not None:
            try:
                tier = parse_plan(plan)
            except ValueError:
                raise InvalidInputError(f"Unknown plan: {plan}", code="INVALID_PLAN") from None
            merged["prefix"] = PLAN_KEY_PREFIXES.get(tier, self.default_prefix)
        merged.update(options or {})
        return await self.generate(strategy, merged)

    @staticmethod
    def validate_format(
        key: str,
        strategy: Union[str, KeyStrategy],
        options: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Structural check only; storage is not consulted.

        With options the key must match exactly what those options produce.
        Without options any prefix and any in-bounds shape of the strategy
        is accepted; custom keys then only need to be non-empty without
        whitespace.

        Raises:
            InvalidKeyStrategyError: If the strategy is unknown
        """
        strategy = KeyStrategy.parse(strategy)
        if not isinstance(key, str) or not key:
            return False
        if options:
            try:
                key_options = KeyOptions.from_mapping(strategy, options)
            except InvalidKeyOptionsError:
                return False
            return key_options.pattern(strategy).match(key) is not None
        if strategy is KeyStrategy.CUSTOM:
            return not any(ch.isspace() for ch in key)
        return _GENERIC_PATTERNS[strategy].match(key) is not None

    @staticmethod
    def parse_license_key(key: Any) -> ParsedLicenseKey:
        """Decompose a key for display. Never raises."""
        if not isinstance(key, str) or not key:
            return ParsedLicenseKey()
        parts = key.split("-")
        guess = None
        for strategy in (KeyStrategy.STANDARD, KeyStrategy.COMPACT, KeyStrategy.SEGMENTED):
            if _GENERIC_PATTERNS[strategy].match(key):
                guess = strategy
                break
        return ParsedLicenseKey(
            prefix=parts[0],
            segments=tuple(parts[1:]),
            segment_count=len(parts) - 1,
            total_length=len(key),
            strategy_guess=guess,
        )

    async def get_statistics(self, expiring_within_days: int = 30) -> KeyStatistics:
        stats = KeyStatistics()
        by_strategy = await self.license_key_repository.count_by_strategy()
        stats.keys_by_strategy = by_strategy
        stats.total_keys_issued = sum(by_strategy.values())
        stats.retired_keys = await self.license_key_repository.count_retired()
        if self.license_repository is not None:
            summary = await self.license_repository.summary(expiring_within_days)
            stats.total_licenses = summary.total
            stats.licenses_by_plan = summary.by_plan
            stats.licenses_by_status = summary.by_status
            stats.expiring_soon = summary.expiring_soon
        return stats

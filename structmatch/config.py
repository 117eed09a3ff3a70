"""
structmatch/config.py
═════════════════════

Tuning knobs for matching and model loading.

``MatchConfig`` is a plain dataclass.  Values come from, in increasing
priority: the dataclass defaults, ``STRUCTMATCH_*`` environment variables
(``MatchConfig.from_env``), and explicit overrides (CLI flags).

    STRUCTMATCH_TYPE_MATCH_MODE   suffix | boundary | exact
    STRUCTMATCH_STRICT_MODEL      1/true/yes or 0/false/no
    STRUCTMATCH_ROLES             comma-separated catalog roles
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from structmatch.catalog import ROLES, build_catalog
from structmatch.errors import ConfigError
from structmatch.matchers import Matcher, TypeMatchMode

logger = logging.getLogger(__name__)

ENV_PREFIX = "STRUCTMATCH_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def parse_mode(value: str) -> TypeMatchMode:
    try:
        return TypeMatchMode(value.strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in TypeMatchMode)
        raise ConfigError(
            f"invalid type match mode {value!r}", hint=f"one of {choices}"
        ) from None


def parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigError(f"invalid boolean {value!r}")


def parse_roles(value: str) -> Tuple[str, ...]:
    return tuple(r.strip() for r in value.split(",") if r.strip())


@dataclass(frozen=True)
class MatchConfig:
    """Configuration for catalog matchers and type-model loading."""
    type_match_mode: TypeMatchMode = TypeMatchMode.SUFFIX
    strict_model: bool = False
    roles: Tuple[str, ...] = field(default_factory=lambda: tuple(ROLES))

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        unknown = [r for r in self.roles if r not in ROLES]
        if unknown:
            warnings.append(f"unknown roles: {', '.join(unknown)}")
        if not self.roles:
            warnings.append("no roles configured")
        return warnings

    def matchers(self) -> Dict[str, Matcher]:
        """Return ``{role: matcher}`` for the configured, known roles."""
        catalog = build_catalog(self.type_match_mode)
        return {r: catalog[r] for r in self.roles if r in catalog}

    def with_overrides(self, **overrides: Any) -> MatchConfig:
        """Return a copy with every non-``None`` override applied."""
        given = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **given) if given else self

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> MatchConfig:
        env = os.environ if environ is None else environ
        kwargs: Dict[str, Any] = {}
        raw = env.get(ENV_PREFIX + "TYPE_MATCH_MODE")
        if raw is not None:
            kwargs["type_match_mode"] = parse_mode(raw)
        raw = env.get(ENV_PREFIX + "STRICT_MODEL")
        if raw is not None:
            kwargs["strict_model"] = parse_bool(raw)
        raw = env.get(ENV_PREFIX + "ROLES")
        if raw is not None:
            kwargs["roles"] = parse_roles(raw)
        if kwargs:
            logger.debug("configuration from environment: %s", kwargs)
        return cls(**kwargs)

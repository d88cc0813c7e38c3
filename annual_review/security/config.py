"""
Route security configuration (`security_config.yaml`).

Each route rule names a path (literal or `{param}` template) and methods, and
may set:
- auth_required: whether a caller must be resolved at all,
- required_roles: profile roles allowed through (empty = any role),
- scope_records: restrict list queries to the caller's own and coachees' rows.

Unset fields fall back to the `default` block. Literal paths are tried before
templates; a request no rule matches gets the default.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, NamedTuple

import yaml
from pydantic import BaseModel, Field, field_validator

from annual_review.workflow.statuses import UserRole

_KNOWN_ROLES = frozenset(r.value for r in UserRole)


def _check_roles(roles: list[str]) -> list[str]:
    unknown = set(roles) - _KNOWN_ROLES
    if unknown:
        raise ValueError(f"unknown roles: {sorted(unknown)}")
    return roles


class AuthConfig(BaseModel):
    provider: Literal["dummy", "jwt"] = "dummy"
    authorization_header: str = "Authorization"
    bearer_prefix: str = "Bearer"


class DefaultRule(BaseModel):
    auth_required: bool = True
    required_roles: list[str] = Field(default_factory=list)
    scope_records: bool = False

    @field_validator("required_roles")
    @classmethod
    def _known_roles(cls, value: list[str]) -> list[str]:
        return _check_roles(value)


class RouteRule(BaseModel):
    path: str
    methods: frozenset[str] = frozenset({"GET"})

    auth_required: bool | None = None
    required_roles: list[str] = Field(default_factory=list)
    scope_records: bool | None = None

    @field_validator("methods", mode="before")
    @classmethod
    def _upper_methods(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(m).upper() for m in value)
        return value

    @field_validator("required_roles")
    @classmethod
    def _known_roles(cls, value: list[str]) -> list[str]:
        return _check_roles(value)

    @property
    def is_template(self) -> bool:
        return "{" in self.path

    def resolve(self, default: DefaultRule) -> EffectiveRule:
        # A rule that restricts roles or scopes rows needs a caller.
        needs_caller = default.auth_required or bool(self.required_roles) or bool(self.scope_records)
        return EffectiveRule(
            auth_required=needs_caller if self.auth_required is None else self.auth_required,
            required_roles=frozenset(self.required_roles or default.required_roles),
            scope_records=default.scope_records if self.scope_records is None else self.scope_records,
        )


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """What the security dependency enforces for one request."""

    auth_required: bool
    required_roles: frozenset[str]
    scope_records: bool

    @classmethod
    def from_default(cls, default: DefaultRule) -> EffectiveRule:
        return cls(
            auth_required=default.auth_required,
            required_roles=frozenset(default.required_roles),
            scope_records=default.scope_records,
        )


class _CompiledRoute(NamedTuple):
    pattern: re.Pattern[str]
    rule: RouteRule


def _compile(path_template: str) -> re.Pattern[str]:
    # "/objectives/{id}/submit" -> ^/objectives/[^/]+/submit$
    parts = re.split(r"\{[^/{}]+\}", path_template)
    return re.compile("^" + "[^/]+".join(re.escape(p) for p in parts) + "$")


class SecurityConfig:
    def __init__(self, model: SecurityConfigModel):
        self.model = model
        ordered = sorted(model.routes, key=lambda r: r.is_template)
        self._routes = [_CompiledRoute(_compile(r.path), r) for r in ordered]

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def match(self, path: str, method: str) -> EffectiveRule:
        method = method.upper()
        for route in self._routes:
            if method in route.rule.methods and route.pattern.match(path):
                return route.rule.resolve(self.model.default)
        return EffectiveRule.from_default(self.model.default)


def load_security_config(path: Path) -> SecurityConfig:
    raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    if "security" not in raw:
        raise ValueError(f"Missing top-level 'security' key in config: {path}")

    return SecurityConfig(SecurityConfigModel.model_validate(raw["security"]))

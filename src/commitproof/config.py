"""Registry configuration: explicit, immutable, loaded once per invocation.

The configuration is a plain value handed to the ``RegistryClient`` at
construction. Nothing in commitproof reads it from the process environment
or mutates it after load.

File format (``.commitproof.yaml`` at the repository root)::

    endpoint: https://registry.example.org/api
    api_key: ""
    timeout_seconds: 30
    retry_attempts: 3
    retry_delay_seconds: 2
    project_label: "my-project"
    submitter: "ci-runner-01"
    audit_log: .commitproof/audit.log

Unknown keys are ignored so older tools can read newer files.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from commitproof.exceptions import ConfigError

CONFIG_FILENAME: str = ".commitproof.yaml"

DEFAULT_TIMEOUT_SECONDS: float = 30.0
DEFAULT_RETRY_ATTEMPTS: int = 3
DEFAULT_RETRY_DELAY_SECONDS: float = 2.0
DEFAULT_AUDIT_LOG: str = ".commitproof/audit.log"

# Camel-case spellings accepted for hand-written or generated files.
_KEY_ALIASES: dict[str, str] = {
    "apiKey": "api_key",
    "timeoutSeconds": "timeout_seconds",
    "retryAttempts": "retry_attempts",
    "retryDelaySeconds": "retry_delay_seconds",
    "projectLabel": "project_label",
    "auditLog": "audit_log",
}


@dataclass(frozen=True)
class RegistryConfig:
    """Connection and retry policy for the attestation registry.

    Attributes:
        endpoint: Base URL of the registry API.
        api_key: Optional access credential sent as a bearer token.
        timeout_seconds: Upper bound for a single registry call.
        retry_attempts: Total attempts per operation (not retries after the
            first), so ``3`` means one try plus two retries.
        retry_delay_seconds: Base delay for exponential backoff.
        project_label: Free-form project identifier carried in every record.
        submitter: Identity recorded as ``submitterIdentity``. Empty means
            "derive from the local git user".
        audit_log: Path of the append-only audit log, relative to the
            repository root unless absolute.
    """

    endpoint: str = ""
    api_key: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    project_label: str = ""
    submitter: str = ""
    audit_log: str = DEFAULT_AUDIT_LOG

    @property
    def worst_case_seconds(self) -> float:
        """Longest a single operation can block: every attempt times out and
        every backoff delay is slept in full."""
        attempts = max(self.retry_attempts, 1)
        backoff = sum(
            self.retry_delay_seconds * 2 ** (n - 1) for n in range(1, attempts)
        )
        return self.timeout_seconds * attempts + backoff

    def audit_log_path(self, root: Path) -> Path:
        """Resolve the audit log location against a repository root."""
        path = Path(self.audit_log)
        return path if path.is_absolute() else root / path

    def validate(self) -> ConfigReport:
        """Check the configuration for errors and soft warnings.

        Returns:
            A ``ConfigReport``. ``report.ok`` is False when any error exists.
        """
        report = ConfigReport()
        if not self.endpoint:
            report.errors.append("endpoint is not set")
        else:
            parsed = urlparse(self.endpoint)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                report.errors.append(
                    f"endpoint must be an http(s) URL, got {self.endpoint!r}"
                )
            elif parsed.scheme == "http":
                report.warnings.append(
                    "endpoint uses plain http; records travel unencrypted"
                )
        if self.timeout_seconds <= 0:
            report.errors.append(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        if self.retry_attempts < 1:
            report.errors.append(
                f"retry_attempts must be at least 1, got {self.retry_attempts}"
            )
        if self.retry_delay_seconds < 0:
            report.errors.append(
                f"retry_delay_seconds must not be negative, got {self.retry_delay_seconds}"
            )
        if not self.api_key:
            report.warnings.append(
                "api_key is not set; the registry's public access policy applies"
            )
        if not self.project_label:
            report.warnings.append("project_label is empty")
        return report

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> RegistryConfig:
        """Build a config from a parsed mapping, coercing numeric fields.

        Raises:
            ConfigError: If a numeric field cannot be coerced.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = _KEY_ALIASES.get(str(raw_key), str(raw_key))
            if key in known and value is not None:
                values[key] = value

        try:
            for name in ("timeout_seconds", "retry_delay_seconds"):
                if name in values:
                    values[name] = float(values[name])
            if "retry_attempts" in values:
                values["retry_attempts"] = int(values["retry_attempts"])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid numeric value in config: {exc}") from exc

        for name in ("endpoint", "api_key", "project_label", "submitter", "audit_log"):
            if name in values:
                values[name] = str(values[name])
        if "endpoint" in values:
            values["endpoint"] = values["endpoint"].rstrip("/")
        return cls(**values)


@dataclass
class ConfigReport:
    """Outcome of ``RegistryConfig.validate``."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def load_config(path: Path) -> RegistryConfig:
    """Read a YAML config file.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed ``RegistryConfig``.

    Raises:
        ConfigError: If the file is missing, not valid YAML, or not a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping at the top level")
    return RegistryConfig.from_mapping(data)


def find_config(root: Path) -> Path | None:
    """Return the config file under a repository root, if present."""
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def dump_config(config: RegistryConfig) -> str:
    """Serialize a config to YAML (used by the hook installer)."""
    data = {f.name: getattr(config, f.name) for f in fields(config)}
    return yaml.safe_dump(data, sort_keys=False)

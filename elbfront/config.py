"""
Front end definition parsing and environment settings.
"""

import json
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import ConfigError
from .retry import RetryPolicy

DEFAULT_REGION = "us-west-2"
DEFAULT_CONTAINER_NAME = "front"
DEFAULT_CONTAINER_PORT = 80
DEFAULT_TG_DELETE_ATTEMPTS = 30
DEFAULT_TG_DELETE_BACKOFF = 1.0


def _require(raw: Dict[str, Any], key: str, where: str) -> Any:
    if key not in raw or raw[key] is None:
        raise ConfigError(f"Missing required key '{key}' in {where}")
    return raw[key]


def _require_list(raw: Dict[str, Any], key: str, where: str) -> Tuple[str, ...]:
    value = _require(raw, key, where)
    if not isinstance(value, list):
        raise ConfigError(f"{where}.{key} must be a list, got {value!r}")
    return tuple(str(item) for item in value)


def _to_int(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{what} must be an integer, got {value!r}")


@dataclass(frozen=True)
class ListenerSpec:
    """A listener the front end should expose."""
    protocol: str
    port: int
    certificate_arn: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ListenerSpec":
        if not isinstance(raw, dict):
            raise ConfigError(f"Listener must be a mapping, got {raw!r}")
        port = _to_int(_require(raw, "port", "listener"), "Listener port")
        return cls(
            protocol=str(_require(raw, "protocol", "listener")),
            port=port,
            certificate_arn=raw.get("certificate_arn"),
        )


@dataclass(frozen=True)
class FrontEndSpec:
    """Desired state of an application's load-balancing front end."""
    subnets: Tuple[str, ...]
    security_groups: Tuple[str, ...]
    vpc_id: str
    listeners: Tuple[ListenerSpec, ...]
    elb_name: Optional[str] = None
    scheme: Optional[str] = None
    health_check_path: Optional[str] = None
    target_type: Optional[str] = None
    container_name: str = DEFAULT_CONTAINER_NAME
    container_port: int = DEFAULT_CONTAINER_PORT
    load_balancer_attributes: Optional[Dict[str, Any]] = None
    target_group_attributes: Optional[Dict[str, Any]] = None
    tags: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FrontEndSpec":
        """
        Build a spec from the elb_v2 mapping of an application definition.

        Args:
            raw: Parsed elb_v2 mapping

        Returns:
            FrontEndSpec

        Raises:
            ConfigError: If a required key is missing or malformed
        """
        if not isinstance(raw, dict):
            raise ConfigError(f"elb_v2 must be a mapping, got {type(raw).__name__}")

        listeners = _require(raw, "listeners", "elb_v2")
        if not isinstance(listeners, list):
            raise ConfigError("elb_v2.listeners must be a list")

        return cls(
            subnets=_require_list(raw, "subnets", "elb_v2"),
            security_groups=_require_list(raw, "security_groups", "elb_v2"),
            vpc_id=str(_require(raw, "vpc_id", "elb_v2")),
            listeners=tuple(ListenerSpec.from_dict(l) for l in listeners),
            elb_name=raw.get("elb_name"),
            scheme=raw.get("scheme"),
            health_check_path=raw.get("health_check_path"),
            target_type=raw.get("target_type"),
            container_name=raw.get("container_name") or DEFAULT_CONTAINER_NAME,
            container_port=_to_int(
                DEFAULT_CONTAINER_PORT if raw.get("container_port") is None else raw["container_port"],
                "elb_v2.container_port",
            ),
            load_balancer_attributes=raw.get("load_balancer_attributes"),
            target_group_attributes=raw.get("target_group_attributes"),
            tags=dict(raw.get("tags") or {}),
        )

    @property
    def listener_ports(self) -> List[int]:
        return [l.port for l in self.listeners]


def load_definition(path: str) -> Dict[str, Any]:
    """
    Load an application definition from a YAML or JSON file.

    Args:
        path: Path to the definition file

    Returns:
        Parsed definition

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file can't be parsed
    """
    definition_file = Path(path)
    if not definition_file.exists():
        raise FileNotFoundError(f"Definition {path} not found")

    text = definition_file.read_text()
    try:
        if definition_file.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse definition {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Definition {path} must be a mapping")
    return data


def front_end_spec_from_definition(definition: Dict[str, Any]) -> Optional[FrontEndSpec]:
    """
    Extract the front end spec from scheduler.elb_v2 of a definition.

    Returns None when the definition manages no front end.
    """
    scheduler = definition.get("scheduler") or {}
    raw = scheduler.get("elb_v2")
    if raw is None:
        return None
    return FrontEndSpec.from_dict(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def default_region() -> str:
    """Region from ELBFRONT_REGION, then AWS_DEFAULT_REGION."""
    return os.environ.get("ELBFRONT_REGION") or os.environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION


def target_group_delete_policy() -> RetryPolicy:
    """Retry policy for target group deletion, tunable through the environment."""
    return RetryPolicy(
        max_attempts=max(1, _env_int("ELBFRONT_TG_DELETE_ATTEMPTS", DEFAULT_TG_DELETE_ATTEMPTS)),
        backoff=max(0.0, _env_float("ELBFRONT_TG_DELETE_BACKOFF", DEFAULT_TG_DELETE_BACKOFF)),
        sleep=time.sleep,
    )

"""Configuration management for the trampoline harness."""

import importlib
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .environment import CALL_OVERHEAD, CallEnvironment, TargetRegistry
from .hooks import DEFAULT_ADDRESS, HOOK_OVERHEAD, HookDispatcher
from .metering import RESERVE_DIVISOR
from .targets import register_builtin_targets

_log = logging.getLogger(__name__)


def import_target(spec: str):
    """Import a ``module:attr`` reference, following dots after the colon."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"target reference must look like 'module:attr', got {spec!r}")
    obj = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    return obj


class ConfigManager:
    """Manage trampoline configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or "~/.config/trampoline/config.yaml").expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()
        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            _log.warning("Error reading config %s: %s", self.config_path, e)
            return {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "dispatcher": {
                "authorized_caller": "${TRAMPOLINE_AUTHORIZED_CALLER}",
                "address": DEFAULT_ADDRESS,
                "hook_overhead": HOOK_OVERHEAD,
            },
            "environment": {
                "reserve_divisor": RESERVE_DIVISOR,
                "call_overhead": CALL_OVERHEAD,
            },
            "targets": {},
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)

    def _resolve_env_var(self, value: Any) -> Any:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not isinstance(value, str):
            return value
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_dispatcher_config(self) -> Dict[str, Any]:
        """Get dispatcher settings with env references resolved."""
        defaults = {
            "authorized_caller": "",
            "address": DEFAULT_ADDRESS,
            "hook_overhead": HOOK_OVERHEAD,
        }
        config = self.data.get("dispatcher") or {}
        merged = {**defaults, **config}
        return {key: self._resolve_env_var(value) for key, value in merged.items()}

    def get_environment_config(self) -> Dict[str, int]:
        """Get call environment settings."""
        defaults = {
            "reserve_divisor": RESERVE_DIVISOR,
            "call_overhead": CALL_OVERHEAD,
        }
        config = self.data.get("environment") or {}
        return {**defaults, **config}

    def get_targets_config(self) -> Dict[str, str]:
        """Get extra targets (identity -> 'module:attr')."""
        return dict(self.data.get("targets") or {})

    def build_environment(self) -> CallEnvironment:
        """Build a call environment with stock and configured targets."""
        registry = TargetRegistry()
        for identity, spec in self.get_targets_config().items():
            registry.register(identity, import_target(spec))
        register_builtin_targets(registry)

        env_config = self.get_environment_config()
        return CallEnvironment(
            registry,
            reserve_divisor=int(env_config["reserve_divisor"]),
            call_overhead=int(env_config["call_overhead"]),
        )

    def build_dispatcher(self, authorized_caller: Optional[str] = None) -> HookDispatcher:
        """Build a dispatcher; ``authorized_caller`` overrides the configured one."""
        config = self.get_dispatcher_config()
        return HookDispatcher(
            authorized_caller or config["authorized_caller"],
            address=config["address"],
            hook_overhead=int(config["hook_overhead"]),
        )

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w") as f:
            yaml.dump(self.data, f, default_flow_style=False)

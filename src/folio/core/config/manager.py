"""
Folio configuration management (layered YAML + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from folio.core.exceptions import TemplateConfigError
from folio.core.schemas.validation import SchemaValidationError, validate_payload
from folio.core.utils.io import iter_yaml_files, read_yaml
from folio.core.utils.merge import deep_merge as _deep_merge
from folio.data import get_data_path

logger = logging.getLogger(__name__)

PROJECT_CONFIG_DIRNAME = ".folio"
ENV_PREFIX = "FOLIO_"


class ConfigManager:
    """Load, merge, and validate Folio configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: FOLIO_*
    2. Project-local config: <root>/.folio/config.local/*.yaml (alphabetical, uncommitted)
    3. Project config: <root>/.folio/config/*.yaml (alphabetical)
    4. Bundled defaults: folio.data/config/*.yaml (alphabetical)
    """

    ARRAY_APPEND_MARKER = object()

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else Path.cwd()
        project_root_dir = self.repo_root / PROJECT_CONFIG_DIRNAME

        self.core_config_dir = get_data_path("config")
        self.project_config_dir = project_root_dir / "config"
        self.project_local_config_dir = project_root_dir / "config.local"

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def validate_schema(self, config: Dict[str, Any], schema_name: str) -> None:
        try:
            validate_payload(config, schema_name)
        except SchemaValidationError as exc:
            raise TemplateConfigError(str(exc), context={"schema": schema_name}) from exc

    # ========== Environment overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        # Tag values keep their surrounding text exactly.
        return value

    def _parse_env_key(self, raw: str, *, strict: bool) -> List[Union[str, int, object]]:
        if not raw:
            return []
        segs = raw.split("__")
        processed: List[Union[str, int, object]] = []
        for seg in segs:
            if seg == "":
                if strict:
                    raise TemplateConfigError(
                        f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'."
                    )
                return []
            if seg.isdigit():
                processed.append(int(seg))
            elif seg.upper() == "APPEND":
                processed.append(self.ARRAY_APPEND_MARKER)
            else:
                processed.append(seg.lower())
        return processed

    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[Union[str, int, object]], Any, str]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                if strict:
                    raise TemplateConfigError(f"Malformed {ENV_PREFIX}* key")
                continue
            path = self._parse_env_key(raw, strict=strict)
            if not path:
                logger.warning("Ignoring malformed environment override %s", key)
                continue
            yield path, self._coerce_type(os.environ[key]), raw

    def _set_nested(self, root: Dict[str, Any], path: List[Union[str, int, object]], value: Any) -> None:
        if not path:
            return

        cur: Any = root
        for i, part in enumerate(path[:-1]):
            nxt = path[i + 1]
            if isinstance(part, int) or part is self.ARRAY_APPEND_MARKER:
                raise TemplateConfigError("Invalid path: list index/APPEND may only appear at leaf")
            if not isinstance(cur, dict):
                raise TemplateConfigError("Path traverses non-dict container")
            if part not in cur:
                cur[part] = [] if (isinstance(nxt, int) or nxt is self.ARRAY_APPEND_MARKER) else {}
            cur = cur[part]

        leaf = path[-1]
        if leaf is self.ARRAY_APPEND_MARKER:
            if not isinstance(cur, list):
                raise TemplateConfigError("APPEND requires list")
            cur.append(value)
        elif isinstance(leaf, int):
            if not isinstance(cur, list):
                raise TemplateConfigError("Index assignment requires list")
            while len(cur) <= leaf:
                cur.append(None)
            cur[leaf] = value
        else:
            if not isinstance(cur, dict):
                raise TemplateConfigError("Key assignment requires dict")
            cur[leaf] = value

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool) -> None:
        for path, typed_value, raw in self._iter_env_overrides(strict=strict):
            logger.debug("Applying env override %s%s", ENV_PREFIX, raw)
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        """Merge every YAML file of ``directory`` into ``cfg``. Missing directories are ignored."""
        for path in iter_yaml_files(directory):
            try:
                module_cfg = read_yaml(path, default={}, raise_on_error=True) or {}
            except yaml.YAMLError as exc:
                raise TemplateConfigError(
                    f"Invalid YAML in {path}: {exc}", context={"path": str(path)}
                ) from exc
            if not isinstance(module_cfg, dict):
                raise TemplateConfigError(
                    f"Config file {path} must contain a mapping", context={"path": str(path)}
                )
            logger.debug("Merging config file %s", path)
            cfg = self.deep_merge(cfg, module_cfg)
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from all layers.

        Args:
            validate: If True, parse env keys strictly and validate against
                the bundled JSON schema.

        Returns:
            Merged configuration dictionary
        """
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        cfg = self._load_directory(self.project_local_config_dir, cfg)
        self.apply_env_overrides(cfg, strict=validate)

        if validate:
            self.validate_schema(cfg, "config.schema.yaml")
        return cfg

    # ========== Accessor Methods ==========

    def get_all(self) -> Dict[str, Any]:
        """Get full merged configuration."""
        return self.load_config(validate=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key.

        Example:
            >>> manager.get('templates.echo_tags')
            ['{{', '}}']
            >>> manager.get('nonexistent.key', 'fallback')
            'fallback'
        """
        current: Any = self.load_config(validate=False)
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["ConfigManager", "PROJECT_CONFIG_DIRNAME", "ENV_PREFIX"]

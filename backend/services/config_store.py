"""Estimator configuration store.

Holds the runtime override document (a JSON side file written by the admin
config page) and merges it over the built-in defaults on every read, so an
override saved by one request is seen by the very next estimate without a
restart or cache invalidation.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from config.errors import ConfigWriteError, ErrorCode, ValidationError
from config.estimator_defaults import base_config
from config.settings import settings
from models.estimator_config import EstimatorConfig, EstimatorOverride

logger = structlog.get_logger()


def _format_pydantic_errors(error: PydanticValidationError) -> Dict[str, Any]:
    errors = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        errors.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    first_loc = error.errors()[0].get("loc", ()) if error.errors() else ()
    return {
        "field": ".".join(str(part) for part in first_loc) or None,
        "errors": errors,
    }


def serialize_config(config: EstimatorConfig) -> Dict[str, Any]:
    """Transport form of the effective config, as returned by the admin API."""
    return config.to_transport()


def parse_override(payload: Any) -> EstimatorOverride:
    """Parse an override document received from the admin API.

    Keyword patterns are compiled here, so an uncompilable pattern is
    rejected before anything is written.

    Raises:
        ValidationError: If the payload is not a valid override document.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(
            message="Config override must be a JSON object",
            code=ErrorCode.CONFIG_INVALID
        )
    try:
        return EstimatorOverride.model_validate(payload)
    except PydanticValidationError as e:
        info = _format_pydantic_errors(e)
        code = ErrorCode.INVALID_PATTERN if "pattern" in " ".join(info["errors"]) else ErrorCode.CONFIG_INVALID
        raise ValidationError(
            message=f"Invalid config override: {info['errors'][0]}",
            field=info["field"],
            details={"errors": info["errors"]},
            code=code
        )


def merge_override(base: EstimatorConfig, override: EstimatorOverride) -> EstimatorConfig:
    """Apply ``override`` over ``base`` field by field.

    - minHours / maxHours / roundToMinutes: overwritten when present
    - serviceTypeBaseHours: shallow-merged per key
    - keywordAdjustments: replaced only by a non-empty list
    - openAI: shallow-merged

    Raises:
        pydantic.ValidationError: If the merged result is inconsistent
            (e.g. minHours > maxHours).
    """
    merged = base.model_dump(by_alias=True)

    if override.service_type_base_hours:
        merged["serviceTypeBaseHours"].update(override.service_type_base_hours)
    if override.keyword_adjustments:
        merged["keywordAdjustments"] = [
            rule.model_dump(by_alias=True) for rule in override.keyword_adjustments
        ]
    if override.min_hours is not None:
        merged["minHours"] = override.min_hours
    if override.max_hours is not None:
        merged["maxHours"] = override.max_hours
    if override.round_to_minutes is not None:
        merged["roundToMinutes"] = override.round_to_minutes
    if override.open_ai is not None:
        merged["openAI"].update(override.open_ai.model_dump(by_alias=True, exclude_none=True))

    return EstimatorConfig.model_validate(merged)


class OverrideStore:
    """JSON side file holding the runtime override.

    Absence of the file is the normal fresh-install state. Writes go to a
    temporary file in the same directory followed by an atomic rename, so a
    concurrent reader sees either the old or the new document, never a
    partial one. There is no locking: concurrent saves are last-writer-wins.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize OverrideStore.

        Args:
            path: Override file path (default from settings).
        """
        self.path = Path(path or settings.estimator_override_path)

    def load(self) -> Dict[str, Any]:
        """Read the override document.

        Returns:
            The stored document, or {} if the file is missing or corrupt.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("override_read_failed", path=str(self.path), error=str(e))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("override_corrupt", path=str(self.path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("override_not_object", path=str(self.path), type=type(data).__name__)
            return {}
        return data

    def save(self, document: Dict[str, Any]) -> None:
        """Replace the stored override with ``document``.

        Raises:
            ConfigWriteError: If the document could not be written.
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(document, tmp, indent=2, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
            logger.info("override_saved", path=str(self.path), fields=list(document.keys()))
        except OSError as e:
            logger.error("override_write_failed", path=str(self.path), error=str(e))
            raise ConfigWriteError(
                message=f"Failed to save estimator config: {e}",
                path=str(self.path)
            )
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass


class EstimatorConfigProvider:
    """Provides the effective estimator configuration.

    Constructed once with a handle to the override store; ``current()``
    re-reads and re-merges on every call.
    """

    def __init__(self, store: Optional[OverrideStore] = None):
        self.store = store or OverrideStore()

    def load_override(self) -> EstimatorOverride:
        """Stored override, or an empty one if the document is unusable."""
        document = self.store.load()
        if not document:
            return EstimatorOverride()
        try:
            return EstimatorOverride.model_validate(document)
        except PydanticValidationError as e:
            logger.warning(
                "override_invalid_ignored",
                path=str(self.store.path),
                errors=_format_pydantic_errors(e)["errors"]
            )
            return EstimatorOverride()

    def current(self) -> EstimatorConfig:
        """Effective configuration: built-in defaults with the override applied."""
        base = base_config()
        override = self.load_override()
        if override.is_empty():
            return base
        try:
            return merge_override(base, override)
        except PydanticValidationError as e:
            logger.warning(
                "override_merge_failed_ignored",
                path=str(self.store.path),
                errors=_format_pydantic_errors(e)["errors"]
            )
            return base

    def save_override(self, payload: Any) -> EstimatorConfig:
        """Validate and persist a new override, replacing the previous one.

        Args:
            payload: Override document as received from the admin API.

        Returns:
            The freshly merged effective configuration.

        Raises:
            ValidationError: If the document is invalid or would produce an
                inconsistent configuration (e.g. minHours > maxHours).
            ConfigWriteError: If the document could not be persisted.
        """
        override = payload if isinstance(payload, EstimatorOverride) else parse_override(payload)

        # Validate the merged result before writing anything
        try:
            merge_override(base_config(), override)
        except PydanticValidationError as e:
            info = _format_pydantic_errors(e)
            raise ValidationError(
                message=f"Invalid config override: {info['errors'][0]}",
                field=info["field"],
                details={"errors": info["errors"]},
                code=ErrorCode.CONFIG_INVALID
            )

        self.store.save(override.to_document())
        return self.current()

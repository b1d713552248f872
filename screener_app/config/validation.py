"""Configuration validation utilities."""

import re
from dataclasses import dataclass
from typing import Any

from ..rules.rule_sets import RULE_SETS

_CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

_KNOWN_SECTIONS = {
    "timeframes", "indicators", "acquisition", "session",
    "quality", "evaluation", "pipeline", "provider",
}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_timeframe_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate timeframe parameters."""
        errors = []

        for name in ("fine_minutes", "coarse_minutes"):
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=params[name]
                ))

        fine = params.get("fine_minutes")
        coarse = params.get("coarse_minutes")
        if _is_positive_int(fine) and _is_positive_int(coarse) and coarse < fine:
            errors.append(ValidationError(
                field="coarse_minutes",
                message="Must not be smaller than fine_minutes",
                value=coarse
            ))

        return errors

    @staticmethod
    def validate_indicator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate indicator periods."""
        errors = []

        if "ema_periods" in params:
            value = params["ema_periods"]
            if (not isinstance(value, (list, tuple)) or not value
                    or not all(_is_positive_int(p) for p in value)):
                errors.append(ValidationError(
                    field="ema_periods",
                    message="Must be a non-empty list of positive integers",
                    value=value
                ))

        for name in ("macd_fast", "macd_slow", "macd_signal"):
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=params[name]
                ))

        fast = params.get("macd_fast")
        slow = params.get("macd_slow")
        if _is_positive_int(fast) and _is_positive_int(slow) and fast >= slow:
            errors.append(ValidationError(
                field="macd_fast",
                message="Must be smaller than macd_slow",
                value=fast
            ))

        return errors

    @staticmethod
    def validate_acquisition_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate acquisition policy parameters."""
        errors = []

        if "lookback_days" in params:
            value = params["lookback_days"]
            if (not isinstance(value, (list, tuple)) or not value
                    or not all(_is_positive_int(d) for d in value)):
                errors.append(ValidationError(
                    field="lookback_days",
                    message="Must be a non-empty list of positive integers",
                    value=value
                ))
            elif list(value) != sorted(value):
                errors.append(ValidationError(
                    field="lookback_days",
                    message="Must be in ascending order",
                    value=value
                ))

        for name in ("max_attempts", "min_fine_bars", "min_coarse_bars"):
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=params[name]
                ))

        return errors

    @staticmethod
    def validate_session_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate the session window."""
        errors = []

        for name in ("start_utc", "end_utc"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not _CLOCK_PATTERN.match(value):
                    errors.append(ValidationError(
                        field=name,
                        message="Must be an HH:MM clock time",
                        value=value
                    ))

        start = params.get("start_utc")
        end = params.get("end_utc")
        if (isinstance(start, str) and isinstance(end, str)
                and _CLOCK_PATTERN.match(start) and _CLOCK_PATTERN.match(end)
                and start >= end):
            errors.append(ValidationError(
                field="end_utc",
                message="Must be later than start_utc",
                value=end
            ))

        return errors

    @staticmethod
    def validate_quality_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate data quality thresholds."""
        errors = []

        if "max_stale_hours" in params:
            value = params["max_stale_hours"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="max_stale_hours",
                    message="Must be a positive number",
                    value=value
                ))

        if "alignment_tolerance_seconds" in params:
            value = params["alignment_tolerance_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="alignment_tolerance_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_evaluation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate condition evaluation parameters."""
        errors = []

        if "rule_set" in params:
            value = params["rule_set"]
            if value not in RULE_SETS:
                errors.append(ValidationError(
                    field="rule_set",
                    message=f"Must be one of: {', '.join(sorted(RULE_SETS))}",
                    value=value
                ))

        for name in ("epsilon", "tolerance_pct"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_pipeline_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate batch screening parameters."""
        errors = []

        if "batch_size" in params and not _is_positive_int(params["batch_size"]):
            errors.append(ValidationError(
                field="batch_size",
                message="Must be a positive integer",
                value=params["batch_size"]
            ))

        if "batch_delay_seconds" in params:
            value = params["batch_delay_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="batch_delay_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "acquisition_timeout_seconds" in params:
            value = params["acquisition_timeout_seconds"]
            if value is not None and (not _is_number(value) or value <= 0):
                errors.append(ValidationError(
                    field="acquisition_timeout_seconds",
                    message="Must be a positive number or null",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section in config:
            if section not in _KNOWN_SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=config[section]
                ))

        validators = {
            "timeframes": ConfigValidator.validate_timeframe_params,
            "indicators": ConfigValidator.validate_indicator_params,
            "acquisition": ConfigValidator.validate_acquisition_params,
            "session": ConfigValidator.validate_session_params,
            "quality": ConfigValidator.validate_quality_params,
            "evaluation": ConfigValidator.validate_evaluation_params,
            "pipeline": ConfigValidator.validate_pipeline_params,
        }
        for section, validator in validators.items():
            if section in config:
                errors.extend(validator(config[section]))

        return errors

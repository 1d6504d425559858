from __future__ import annotations

from typing import Any


def validate_model_name(model: str) -> str:
    """Validate model name for security and allow OpenRouter-style IDs."""
    if not model:
        msg = "Model name cannot be empty"
        raise ValueError(msg)
    if len(model) > 100:
        msg = "Model name too long"
        raise ValueError(msg)

    allowed = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.:/")
    if ".." in model or any(ch not in allowed for ch in model):
        msg = "Model name contains invalid characters"
        raise ValueError(msg)

    return model


def _optional_api_key(value: Any, *, name: str) -> str:
    """Normalise an optional credential: blank means "not configured"."""
    if value in (None, ""):
        return ""
    key = str(value).strip()
    if len(key) > 500:
        msg = f"{name} API key appears to be too long"
        raise ValueError(msg)
    if any(char in key for char in [" ", "\n", "\t"]):
        msg = f"{name} API key contains invalid characters"
        raise ValueError(msg)
    return key


def _bounded_int(value: Any, *, default: int, name: str, minimum: int, maximum: int) -> int:
    try:
        parsed = int(str(value if value not in (None, "") else default))
    except ValueError as exc:
        msg = f"{name} must be a valid integer"
        raise ValueError(msg) from exc
    if parsed < minimum or parsed > maximum:
        msg = f"{name} must be between {minimum} and {maximum}"
        raise ValueError(msg)
    return parsed


def _bounded_float(
    value: Any, *, default: float, name: str, minimum: float, maximum: float
) -> float:
    try:
        parsed = float(str(value if value not in (None, "") else default))
    except ValueError as exc:
        msg = f"{name} must be a valid number"
        raise ValueError(msg) from exc
    if parsed < minimum or parsed > maximum:
        msg = f"{name} must be between {minimum} and {maximum}"
        raise ValueError(msg)
    return parsed

from __future__ import annotations


class ConfigError(RuntimeError):
    pass


class InvalidInput(ValueError):
    """Request payload failed validation. `code` is returned to the caller as-is."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


class Unauthorized(Exception):
    code = "unauthorized"

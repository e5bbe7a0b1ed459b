"""Pydantic models for session credentials."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Cookies(BaseModel):
    """X web session cookies."""

    model_config = ConfigDict(frozen=True)

    auth_token: str = ""
    ct0: str = ""
    source: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.auth_token and self.ct0)


class ResolvedCookies(BaseModel):
    """Cookies plus any warnings produced while resolving them."""

    cookies: Cookies
    warnings: list[str] = []

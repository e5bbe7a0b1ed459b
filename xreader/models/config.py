"""Pydantic models for x-reader configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ClientConfig(BaseModel):
    """GraphQL client configuration."""

    timeout_seconds: float | None = 30.0
    quote_depth: int = 1


class QueryIdsConfig(BaseModel):
    """Query ID discovery and cache configuration."""

    ttl_hours: float = Field(24, gt=0)
    cache_path: str | None = None
    bundle_batch_size: int = 6
    discovery_timeout_seconds: float = 20.0


class AuthConfig(BaseModel):
    """Stored credentials and the environment variables consulted for them."""

    auth_token: str | None = None
    ct0: str | None = None
    auth_token_env: str = "AUTH_TOKEN"
    ct0_env: str = "CT0"


class XReaderConfig(BaseModel):
    """Top-level x-reader configuration."""

    client: ClientConfig = ClientConfig()
    query_ids: QueryIdsConfig = QueryIdsConfig()
    auth: AuthConfig = AuthConfig()

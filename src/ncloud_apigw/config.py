from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://apigateway.apigw.ntruss.com/api/v1/"

ENV_BASE_URL = "NCLOUD_APIGW_BASE_URL"
ENV_TIMEOUT = "NCLOUD_APIGW_TIMEOUT"


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30.0, gt=0)
    default_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return value if value.endswith("/") else value + "/"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> "ClientConfig":
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get(ENV_BASE_URL):
            values["base_url"] = env[ENV_BASE_URL]
        if env.get(ENV_TIMEOUT):
            values["timeout"] = env[ENV_TIMEOUT]
        values.update(overrides)
        return cls.model_validate(values)

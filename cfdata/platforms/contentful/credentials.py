"""Credential resolution for the Contentful Management API."""

from __future__ import annotations

from dataclasses import dataclass
from os import environ
from typing import Mapping


class CredentialsError(RuntimeError):
    """Raised when required credentials are not configured."""


@dataclass(slots=True, frozen=True)
class ContentfulCredentials:
    access_token: str
    space_id: str

    def __repr__(self) -> str:
        return f"ContentfulCredentials(access_token='***', space_id={self.space_id!r})"


class ContentfulCredentialStore:
    """Resolves the management token and space id from environment variables."""

    def __init__(
        self,
        *,
        env: Mapping[str, str] | None = None,
        env_api_key_key: str = "CONTENTFUL_API_KEY",
        env_space_id_key: str = "CONTENTFUL_SPACE_ID",
    ) -> None:
        self._env = env if env is not None else environ
        self._env_api_key_key = env_api_key_key
        self._env_space_id_key = env_space_id_key

    def load(self) -> ContentfulCredentials:
        missing = [
            key
            for key in (self._env_api_key_key, self._env_space_id_key)
            if not self._env.get(key, "").strip()
        ]
        if missing:
            raise CredentialsError(
                f"Missing environment variable(s) {', '.join(missing)}; "
                "cannot connect to Contentful"
            )
        return ContentfulCredentials(
            access_token=self._env[self._env_api_key_key].strip(),
            space_id=self._env[self._env_space_id_key].strip(),
        )

"""
Configuration system using Pydantic for type-safe run settings.

Run inputs follow the GitHub Actions convention: every action input is
exposed to the process as an ``INPUT_<NAME>`` environment variable, and the
run context (workspace, repository, ref, token) as ``GITHUB_<NAME>``. The CLI
can override any of them with flags.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spec_sync.exceptions import ConfigurationError
from spec_sync.models.domain import PushPolicy


class SourceMapping(BaseModel):
    """Declared source -> destination copy instruction.

    Declared with ``from``/``to`` keys; exposed as ``source``/``destination``
    because ``from`` is a Python keyword. Exclusion globs are matched against
    paths relative to the source root.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(..., alias="from", min_length=1, description="Path in the source workspace")
    destination: str = Field(..., alias="to", min_length=1, description="Path in the target repository")
    exclude: tuple[str, ...] = Field(default=(), description="Glob patterns to skip")

    @field_validator("exclude", mode="before")
    @classmethod
    def coerce_exclude(cls, v: object) -> object:
        """Accept a single pattern or null in place of a list."""
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return v


def parse_sources(raw: str) -> list[SourceMapping]:
    """Deserialize the ``sources`` input into mappings.

    The text is read as YAML first and, if that fails, as JSON. Only when
    both fail is a configuration error raised, carrying both messages.

    Args:
        raw: Serialized mapping list

    Returns:
        Non-empty list of SourceMapping in declaration order

    Raises:
        ConfigurationError: If the text is unparseable, not a non-empty list,
            or an entry lacks ``from`` or ``to``
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as yaml_error:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as json_error:
            raise ConfigurationError(
                "Failed to parse 'sources' input as either YAML or JSON. Please check the format. "
                f"YAML error: {yaml_error}; JSON error: {json_error}"
            ) from json_error

    if not isinstance(data, list) or not data:
        raise ConfigurationError("File mapping must be a non-empty array")

    for index, entry in enumerate(data):
        if not isinstance(entry, dict) or not entry.get("from") or not entry.get("to"):
            raise ConfigurationError(f"File mapping at index {index} is missing required 'from' or 'to' field")

    try:
        return [SourceMapping.model_validate(entry) for entry in data]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid file mapping: {e}") from e


class ActionContext(BaseSettings):
    """Context of the workflow run, read from ``GITHUB_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    token: SecretStr | None = Field(default=None, description="Token provided by the runner")
    workspace: Path = Field(default=Path("."), description="Checkout of the source repository")
    repository: str | None = Field(default=None, description="owner/repo the workflow runs in")
    ref: str | None = Field(default=None, description="Ref that triggered the workflow")
    api_url: str = Field(default="https://api.github.com", description="REST API base URL")
    server_url: str = Field(default="https://github.com", description="Web/clone base URL")
    actions: bool = Field(default=False, description="True when running inside GitHub Actions")

    @property
    def ref_branch(self) -> str | None:
        """Branch name of the originating ref, without ``refs/heads/``."""
        if self.ref is None:
            return None
        return self.ref.replace("refs/heads/", "", 1)

    @property
    def repository_name(self) -> str:
        """Repository part of ``owner/repo``, or empty when unknown."""
        if not self.repository:
            return ""
        return self.repository.split("/")[-1]


class SyncSettings(BaseSettings):
    """Run options for a single sync.

    Constructed once at run start and treated as read-only afterwards.
    Required-ness of ``token``, ``branch``, ``repository`` and ``sources``
    depends on the run mode, so it is enforced by the ``require_*``
    accessors rather than by field validation.
    """

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    token: SecretStr | None = Field(default=None, description="Token with write access to the target")
    branch: str | None = Field(default=None, description="Working branch to create or reuse")
    auto_merge: bool = Field(default=False, description="Push directly instead of opening a PR")
    add_timestamp: bool = Field(default=True, description="Stamp PR bodies with the run time")
    update_from_source: bool = Field(default=False, description="Run the generator instead of copying")
    repository: str | None = Field(default=None, description="Target repository as owner/repo")
    sources: str | None = Field(default=None, description="YAML or JSON list of mappings")
    base_branch: str = Field(default="main", description="PR base for mapping sync")
    clone_directory: str = Field(default="temp-fern-config", description="Clone location under the workspace")
    git_user_name: str = Field(default="github-actions")
    git_user_email: str = Field(default="github-actions@github.com")
    context: ActionContext = Field(default_factory=ActionContext)

    @property
    def push_policy(self) -> PushPolicy:
        """Delivery policy selected by ``auto_merge``."""
        return PushPolicy.AUTO_MERGE if self.auto_merge else PushPolicy.PULL_REQUEST

    @property
    def source_root(self) -> Path:
        """Absolute path of the source workspace."""
        return self.context.workspace.resolve()

    @property
    def clone_root(self) -> Path:
        """Absolute path the target repository is cloned into."""
        return self.source_root / self.clone_directory

    def require_token(self) -> str:
        """Return the token, falling back to the runner-provided one.

        Raises:
            ConfigurationError: If neither is set
        """
        secret = self.token or self.context.token
        if secret is None or not secret.get_secret_value().strip():
            raise ConfigurationError(
                "GitHub token is required. Please provide a token with appropriate permissions."
            )
        return secret.get_secret_value().strip()

    def require_branch(self) -> str:
        """Return the working branch name.

        Raises:
            ConfigurationError: If no branch was given
        """
        if not self.branch or not self.branch.strip():
            raise ConfigurationError("Input required and not supplied: branch")
        return self.branch.strip()

    def require_repository(self) -> tuple[str, str]:
        """Return the target repository as ``(owner, repo)``.

        Raises:
            ConfigurationError: If missing or not in ``owner/repo`` form
        """
        if not self.repository:
            raise ConfigurationError("Input required and not supplied: repository")
        owner, sep, repo = self.repository.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ConfigurationError(f"Repository must be in 'owner/repo' format, got: {self.repository}")
        return owner, repo

    def require_mappings(self) -> list[SourceMapping]:
        """Parse and return the declared mappings.

        Raises:
            ConfigurationError: If ``sources`` is missing or malformed
        """
        if not self.sources or not self.sources.strip():
            raise ConfigurationError("Input required and not supplied: sources")
        return parse_sources(self.sources)

    def require_context_repository(self) -> tuple[str, str]:
        """Return the repository the workflow runs in as ``(owner, repo)``.

        Raises:
            ConfigurationError: If ``GITHUB_REPOSITORY`` is not set
        """
        repository = self.context.repository
        if not repository or "/" not in repository:
            raise ConfigurationError("GITHUB_REPOSITORY must be set to 'owner/repo' when updating from source")
        owner, _, repo = repository.partition("/")
        return owner, repo

    def require_base_ref(self) -> str:
        """Return the branch the workflow ran from.

        Raises:
            ConfigurationError: If ``GITHUB_REF`` is not set
        """
        branch = self.context.ref_branch
        if not branch:
            raise ConfigurationError("GITHUB_REF must be set when updating from source")
        return branch

"""Configuration for spec-sync.

Key Components:
    - SyncSettings: Run options (``INPUT_*`` environment or CLI flags)
    - ActionContext: Workflow run context (``GITHUB_*`` environment)
    - SourceMapping: One declared copy instruction
    - parse_sources: YAML-then-JSON deserialization of the mapping list

Example:
    >>> from spec_sync.config import SyncSettings
    >>> settings = SyncSettings(branch="sync-spec", repository="acme/api-docs")
    >>> settings.push_policy
    <PushPolicy.PULL_REQUEST: 'pull_request'>
"""

from spec_sync.config.settings import ActionContext, SourceMapping, SyncSettings, parse_sources

__all__ = [
    "ActionContext",
    "SourceMapping",
    "SyncSettings",
    "parse_sources",
]

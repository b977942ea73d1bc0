"""
Match record sources.

Usage:
    from battle_rank.providers import get_source

    source = get_source("github_issues")
    payloads = await source.fetch_payloads()
"""

from .base import (
    RawPayload,
    RecordSourceError,
    RecordSourceProtocol,
)

__all__ = [
    "RawPayload",
    "RecordSourceError",
    "RecordSourceProtocol",
    "get_source",
]


def get_source(
    source_name: str = "github_issues",
    *,
    settings=None,
    path=None,
    **overrides,
) -> RecordSourceProtocol:
    """
    Get a record source instance.

    Args:
        source_name: "github_issues" or "json_file"
        settings: Settings for the GitHub source (defaults to get_settings())
        path: Input file for the json_file source
        **overrides: Keyword overrides passed to GitHubIssuesSource.from_settings

    Raises:
        ValueError: If the source is unknown or misconfigured
    """
    if source_name == "github_issues":
        from ..core.config import get_settings
        from .github_issues import GitHubIssuesSource
        return GitHubIssuesSource.from_settings(settings or get_settings(), **overrides)
    elif source_name == "json_file":
        if path is None:
            raise ValueError("json_file source requires a path")
        from .file_source import JsonFileSource
        return JsonFileSource(path)
    else:
        raise ValueError(f"Unknown record source: {source_name}")

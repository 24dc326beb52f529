"""GitLab integration — merge request changes and raw lock file content."""

from composerdiff.gitlab.client import (
    GitLabClient,
    ManifestPair,
    MergeRequestRef,
    ProjectInfo,
    extract_project_info,
    is_merge_request_diff_page,
    parse_merge_request_url,
)

__all__ = [
    "GitLabClient",
    "ManifestPair",
    "MergeRequestRef",
    "ProjectInfo",
    "extract_project_info",
    "is_merge_request_diff_page",
    "parse_merge_request_url",
]

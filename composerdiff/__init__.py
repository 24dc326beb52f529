"""composer-diff: composer.lock diffs rendered inline on merge request pages."""

from composerdiff.runner import ComposerDiffRunner, diff_merge_request

__version__ = "0.1.0"

__all__ = ["ComposerDiffRunner", "diff_merge_request"]

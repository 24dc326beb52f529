"""Test data builders shared across test modules."""

import json

MR_URL = "https://gitlab.example.com/group/project/-/merge_requests/7/diffs"

MR_PAGE = """
<html>
<head><title>Bump dependencies</title></head>
<body data-project-full-path="group/project" data-project-id="42" data-page-type-id="7">
<div class="content-wrapper">
  <div class="diffs">
    <div class="diff-file" id="file-json">
      <div class="file-title"><span class="file-title-name">composer.json</span></div>
      <div class="diff-content"><table class="diff-table"><tr><td>json</td></tr></table></div>
    </div>
    <div class="diff-file" id="file-lock">
      <div class="file-title"><span class="file-title-name">composer.lock</span></div>
      <div class="diff-content"><table class="diff-table"><tr><td>lock</td></tr></table></div>
    </div>
  </div>
</div>
</body>
</html>
"""


def lock_json(packages=(), packages_dev=()):
    """Build composer.lock text from (name, version) pairs."""
    return json.dumps(
        {
            "packages": [{"name": n, "version": v} for n, v in packages],
            "packages-dev": [{"name": n, "version": v} for n, v in packages_dev],
        }
    )

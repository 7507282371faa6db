"""Common literal values used across essay_pages.

These constants keep filenames and endpoint paths centralized so the
collector, the dev server, and tests can import the same values without
drifting. Intended for internal use within the essay_pages package.

Examples
--------
>>> from essay_pages import _constants
>>> _constants.POST_INDEX_PATH
'content/posts.json'
>>> _constants.DOCUMENT_FILENAME in _constants.IGNORED_ATTACHMENTS
True
"""

DOCUMENT_FILENAME = "content.md"
PAGE_FILENAME = "index.html"
POST_INDEX_PATH = "content/posts.json"
RSS_PATH = "rss.xml"
IGNORED_ATTACHMENTS = frozenset({DOCUMENT_FILENAME, ".DS_Store"})
LIVE_RELOAD_PATH = "/__livereload"

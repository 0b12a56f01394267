"""
Shared constants for the page clipper.

Contains default network settings and the names of the marker attributes
written into captured documents.
"""

# Default user agent string for all HTTP requests
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Default request timeout in seconds
DEFAULT_TIMEOUT = 30

# Default concurrent fetches within one batch
DEFAULT_CONCURRENCY = 10

# Emitted in front of every generated document
DOCTYPE = "<!DOCTYPE html>"

# Prefix shared by every marker attribute. Downstream consumers read the
# provenance attributes from the serialized output, so these names are part
# of the artifact format.
ATTR_PREFIX = "data-page-clipper"

ATTR_SRC = f"{ATTR_PREFIX}-src"
ATTR_HREF = f"{ATTR_PREFIX}-href"
ATTR_IFRAME_UUID = f"{ATTR_PREFIX}-iframe-uuid"
ATTR_SHADOW_CONTENT = f"{ATTR_PREFIX}-shadow-content"
ATTR_VIDEO = f"{ATTR_PREFIX}-video"
ATTR_STYLE = f"{ATTR_PREFIX}-style"
ATTR_SCRIPT = f"{ATTR_PREFIX}-script"
ATTR_DATA_SCRIPT = f"{ATTR_PREFIX}-data"

# <meta name="page-clipper"> marks a document produced by a capture
META_NAME = "page-clipper"

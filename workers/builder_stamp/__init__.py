"""
builder_stamp — Go build helper with link-time metadata injection.

Collect build metadata (timestamp, toolchain, git identity, frontend
release) and run ``go build`` with it stamped into the binary via
``-ldflags -X``.  No cross-compilation, no retries, no repo checkout.

Profile: go-ldflags-openlist
"""

__version__ = "1.0.0"
BUILDER_NAME = "builder_stamp"
BUILDER_VERSION = "v1"
PROFILE_ID = "go-ldflags-openlist"

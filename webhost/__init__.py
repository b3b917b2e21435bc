"""webhost — static blog host with security headers and cache policy.

Serves the pre-rendered output of the blog build (``.html`` posts plus images,
scripts and JSON) from a single physical root directory:

  - every response carries a fixed set of security headers
  - long-lived immutable caching for images and icons only
  - extensionless page URLs resolve to their ``.html`` file, or redirect to
    the home post when the page was never rendered
"""

__version__ = "1.0.0"

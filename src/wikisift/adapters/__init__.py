"""Search adapter layer — Connectors for the supported search backends.

Built-in adapters:
  - wikipedia: Wikipedia MediaWiki search + REST page summaries
  - custom: any JSON HTTP API described by a field mapping
"""

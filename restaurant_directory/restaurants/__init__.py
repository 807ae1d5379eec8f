"""
Restaurant directory core.

Responsibilities:
- Validate restaurant documents against one schema.
- Translate list filters and pagination into store queries.
- Serve create/read/update/delete to both the JSON API and the HTML pages.
"""

"""CLI for running the newsrag pipeline stages.

- ``python -m newsrag.cli scrape`` -- scrape the latest stories
- ``python -m newsrag.cli chunk`` -- chunk stored stories at a version
- ``python -m newsrag.cli embed`` -- embed chunks at a version
- ``python -m newsrag.cli ask`` -- answer a question (``--stream`` for deltas)
"""

"""State layer.

Holds the cached models of a repository, the broadcaster that tells
listeners about changes to them, and the registry of fetches in flight.
"""

"""
filestages: streaming file-ingestion and transformation stages.

Each stage reads from an upstream channel (or from the filesystem), applies
one transformation, and writes results to a downstream channel, signalling
completion by ending its output.
"""

__version__ = "0.1.0"

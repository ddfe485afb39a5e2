"""Built-in expansion stages.

Expansions map each input record to zero or more output records and
isolate malformed input so one bad record never stops the stream.
"""

"""Built-in transform stages.

Transforms map each input record to exactly one output record, in order.
"""

"""
Grocery Price Aggregator.

Answers "what does item X cost near ZIP Y?" by querying several grocery
vendor APIs concurrently and merging their answers into one price list.
"""

__version__ = "0.1.0"

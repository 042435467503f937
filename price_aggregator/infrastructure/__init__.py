"""
Infrastructure package for the price aggregator.

Contains vendor credential lookup and the OAuth2 token lifecycle.
"""

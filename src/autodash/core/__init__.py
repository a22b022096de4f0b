"""Core models, type hierarchy, expressions and query construction."""

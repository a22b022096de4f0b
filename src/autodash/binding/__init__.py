"""Binding of rule dimensions, metrics, filters and cards to schema objects.

Submodules are imported directly (e.g. ``autodash.binding.candidates``);
query construction depends on the matcher, so nothing is re-exported here.
"""

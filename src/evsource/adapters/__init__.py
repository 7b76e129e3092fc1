"""Adapters – concrete event and snapshot store backends.

Each sub-package imports its backend library at module level; import only
the adapters whose extras are installed.
"""

"""
Volume Reconciler - grows a database cluster's persistent volumes to the size
declared in its manifest.

This package provides the resize reconciliation engine, pluggable block-storage
and filesystem resize backends, and a CLI for running reconciliation passes.
"""

__version__ = "0.1.0"
__all__ = ["cli", "cluster", "filesystems", "providers"]

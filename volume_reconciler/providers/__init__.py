"""Block-storage resize backends.

- VolumeResizer: capability interface shared by all backends
- EBSVolumeResizer: AWS Elastic Block Store backend
"""

from .base import VolumeResizer
from .ebs import EBSVolumeResizer

__all__ = ["VolumeResizer", "EBSVolumeResizer"]

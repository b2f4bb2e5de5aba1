"""
Conversion of Kubernetes resource quantities into whole gigabytes.
"""

from kubernetes.utils import parse_quantity

from volume_reconciler.cluster.exceptions import InvalidSizeSpec

GIGABYTE = 1 << 30


def quantity_to_gigabytes(quantity: str) -> int:
    """
    Convert a quantity string (e.g., "10Gi", "500M") to whole gigabytes.

    Fractional gigabytes are truncated, so "1536Mi" yields 1.

    Args:
        quantity: Kubernetes quantity string

    Returns:
        Size in gigabytes (2^30 bytes)

    Raises:
        InvalidSizeSpec: If the quantity cannot be parsed or is negative
    """
    if quantity is None or not str(quantity).strip():
        raise InvalidSizeSpec("Volume size cannot be empty")

    try:
        value = parse_quantity(str(quantity).strip())
    except (ValueError, TypeError) as e:
        raise InvalidSizeSpec(f"Could not parse volume size {quantity!r}: {e}")

    if value < 0:
        raise InvalidSizeSpec(f"Volume size cannot be negative: {quantity!r}")

    return int(value) // GIGABYTE

"""
Input validation functions.
"""

import re
from typing import Dict


def validate_name(name: str) -> None:
    """
    Validate a Kubernetes object name (cluster, namespace).

    Args:
        name: Name to validate

    Raises:
        ValueError: If name is invalid
    """
    if not name:
        raise ValueError("Name cannot be empty")

    if len(name) > 253:
        raise ValueError("Name must be at most 253 characters")

    if not re.match(r'^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$', name):
        raise ValueError(
            "Name must start and end with a lowercase alphanumeric and contain only "
            "lowercase alphanumerics, dots, or hyphens"
        )


def validate_replicas(replicas: int) -> None:
    """
    Validate a replica count.

    Raises:
        ValueError: If the count is negative
    """
    if replicas < 0:
        raise ValueError("Replica count cannot be negative")


def parse_label_selector(selector: str) -> Dict[str, str]:
    """
    Parse a `key=value,...` label selector into a mapping.

    Args:
        selector: Selector string (e.g., "application=spilo,cluster-name=mycluster")

    Returns:
        Mapping of label keys to values

    Raises:
        ValueError: If the selector is empty or a term is not `key=value`
    """
    labels: Dict[str, str] = {}
    for term in selector.split(","):
        term = term.strip()
        if not term:
            continue
        key, sep, value = term.partition("=")
        key = key.strip()
        if not sep or not key or "=" in value:
            raise ValueError(f"Invalid label selector term {term!r}: expected key=value")
        labels[key] = value.strip()

    if not labels:
        raise ValueError("Label selector cannot be empty")
    return labels

"""Cluster credentials for autonix-core.

Builds the kubeconfig document handed to users of a Kubernetes cluster.
Transport (clipboard, files) is left to the caller.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

ENDPOINT_DOMAIN = "k8s.autonix.io"

# Placeholder CA bundle shipped with simulated clusters
CERTIFICATE_AUTHORITY_DATA = "LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0tCk1JSUMvakNDQWVhZ0F3SUJBZ0lCQURBTkJna3Foa2lHOXcwQkFRc0ZBREFWTVJNd0VRWURWUVFERXdwcmRXSmwKY201bGRHVnpNQjRYRFRJME1EVXlOREV3TXpVeE1sb1hEVE0wTURVeU1qRXdNelV4TWxvd0ZURVRNQkVHQTFVRQpBeE1LYTNWaVpYSnVaWFJsY3pDQ0FTSXdEUVlKS29aSWh2Y05BUUVCQlFBRGdnRVBBRENDQVFvQ2dnRUJBTHJKCi0tLS0tRU5EIENFUlRJRklDQVRFLS0tLS0K"

ADMIN_USER = "admin"


def cluster_slug(name: str) -> str:
    """Lowercase the name and replace whitespace runs with dashes."""
    return re.sub(r"\s+", "-", name.strip().lower())


def cluster_endpoint(name: str) -> str:
    """API server URL of a cluster.

    Example:
        >>> cluster_endpoint("Prod Cluster")
        'https://prod-cluster.k8s.autonix.io'
    """
    return f"https://{cluster_slug(name)}.{ENDPOINT_DOMAIN}"


def kubeconfig_document(cluster_name: str, token: str, endpoint: str | None = None) -> dict[str, Any]:
    """Kubeconfig as a mapping, ready for serialization."""
    context_name = f"{cluster_name}-{ADMIN_USER}"
    return {
        "apiVersion": "v1",
        "clusters": [
            {
                "cluster": {
                    "certificate-authority-data": CERTIFICATE_AUTHORITY_DATA,
                    "server": endpoint or cluster_endpoint(cluster_name),
                },
                "name": cluster_name,
            }
        ],
        "contexts": [
            {
                "context": {"cluster": cluster_name, "user": ADMIN_USER},
                "name": context_name,
            }
        ],
        "current-context": context_name,
        "kind": "Config",
        "preferences": {},
        "users": [{"name": ADMIN_USER, "user": {"token": token}}],
    }


def render_kubeconfig(cluster_name: str, token: str, endpoint: str | None = None) -> str:
    """Serialize a kubeconfig for a cluster as YAML.

    Args:
        cluster_name: Cluster display name (also the kubeconfig cluster name).
        token: Bearer token of the admin user.
        endpoint: API server URL. Defaults to ``cluster_endpoint(cluster_name)``.

    Returns:
        YAML text that ``yaml.safe_load`` parses back into the same document.
    """
    document = kubeconfig_document(cluster_name, token, endpoint)
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False, allow_unicode=True)

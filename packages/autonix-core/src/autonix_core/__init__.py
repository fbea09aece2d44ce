"""autonix-core: Resource descriptor engine for the Autonix console.

This package provides:
- Catalog: read-only locations, plans, images and pricing rates
- Selections: one validated, mutable model per wizard
- resolve / quote / check_readiness / assemble: the derivation pipeline
- RelationalCollection: domains, firewall groups and VPCs with their children
- ResourceStore / OperationRunner: lifecycle and simulated async operations
"""

from __future__ import annotations

__version__ = "0.1.0"

# Pipeline
from autonix_core.assembler import assemble
from autonix_core.builder import ResourceBuilder

# Catalog and configuration
from autonix_core.catalog import Catalog, ImageType, PlanCategory, Region
from autonix_core.config import CatalogResolver, EngineSettings
from autonix_core.credentials import cluster_endpoint, render_kubeconfig
from autonix_core.descriptor import ResourceDescriptor, ResourceKind, ResourceStatus

# Error types
from autonix_core.errors import (
    AutonixError,
    CatalogNotFoundError,
    ChildNotFoundError,
    ConfigurationError,
    DuplicateIdError,
    ImmutableFieldError,
    InvalidTransitionError,
    NotReadyError,
    OperationInFlightError,
    ParentNotFoundError,
    ResourceNotFoundError,
    SimulatedOperationFailure,
)
from autonix_core.gate import GateReport, check_readiness, is_ready
from autonix_core.lifecycle import ResourceStore
from autonix_core.lookup import Resolved
from autonix_core.operations import OperationRunner, SimulatedSink
from autonix_core.pricing import LineItem, Quote, compute_total, quote

# Relational collections
from autonix_core.relations import (
    DnsRecord,
    DnsZones,
    Domain,
    FirewallGroup,
    FirewallGroups,
    FirewallRule,
    RelationalCollection,
    VpcNetwork,
    VpcNetworks,
    VpcRoute,
)
from autonix_core.resolver import ResolvedOptions, resolve, validate_references
from autonix_core.selection import parse_selection

__all__ = [
    "__version__",
    # Pipeline
    "ResolvedOptions",
    "resolve",
    "validate_references",
    "LineItem",
    "Quote",
    "compute_total",
    "quote",
    "GateReport",
    "check_readiness",
    "is_ready",
    "assemble",
    "ResourceBuilder",
    "parse_selection",
    # Catalog and configuration
    "Catalog",
    "ImageType",
    "PlanCategory",
    "Region",
    "Resolved",
    "CatalogResolver",
    "EngineSettings",
    # Descriptors and lifecycle
    "ResourceDescriptor",
    "ResourceKind",
    "ResourceStatus",
    "ResourceStore",
    "OperationRunner",
    "SimulatedSink",
    "cluster_endpoint",
    "render_kubeconfig",
    # Relational collections
    "RelationalCollection",
    "DnsZones",
    "Domain",
    "DnsRecord",
    "FirewallGroups",
    "FirewallGroup",
    "FirewallRule",
    "VpcNetworks",
    "VpcNetwork",
    "VpcRoute",
    # Errors
    "AutonixError",
    "CatalogNotFoundError",
    "ChildNotFoundError",
    "ConfigurationError",
    "DuplicateIdError",
    "ImmutableFieldError",
    "InvalidTransitionError",
    "NotReadyError",
    "OperationInFlightError",
    "ParentNotFoundError",
    "ResourceNotFoundError",
    "SimulatedOperationFailure",
]

"""Downstream job dispatch."""

from .dispatcher import (
    DispatchReport,
    JobDescriptor,
    JobDispatcher,
    JobDispatchOutcome,
    PerShopJobDescriptor,
    default_jobs,
)
from .remote import RemoteJobInvoker

__all__ = [
    "DispatchReport",
    "JobDescriptor",
    "JobDispatcher",
    "JobDispatchOutcome",
    "PerShopJobDescriptor",
    "default_jobs",
    "RemoteJobInvoker",
]

"""
reqmods — Network Module Requirement Enforcement
===================================================
Linked servers exchange their loaded-module inventory on link-up.
Local policy decides whether a mismatch is a warning or a link abort.

Policy is evaluation, the link layer is execution.
Every abort carries a reason.
"""

__version__ = "5.0"

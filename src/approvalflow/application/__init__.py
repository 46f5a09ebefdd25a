"""
Application layer: rule catalog, approver resolution, escalation and the
approval service that orchestrates them.
"""

from approvalflow.application.approval_service import ApprovalService
from approvalflow.application.rule_catalog import RuleCatalog, find_matching_rule

__all__ = ["ApprovalService", "RuleCatalog", "find_matching_rule"]

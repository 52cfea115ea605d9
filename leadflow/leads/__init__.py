"""Lead submission flow: field mapping, payment detection and the CRM/payment call chain."""

from .orchestrator import LeadSubmissionOrchestrator

__all__ = ["LeadSubmissionOrchestrator"]

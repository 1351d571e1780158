"""
PMO Approvals Service - Change Request Workflow

Governs how project change requests move through review:
- Role-based permission gate for every user-facing action
- Two-tier approval (Sub PMO, then Main PMO) with return routing
- Atomic status updates so concurrent reviewers cannot both win
- Auto-generated audit comments and requester notifications
"""

__version__ = "0.1.0"

"""
Audit trail and soft-delete support for CRM entities.

Every change records who made it and when; soft-deletable records are
hidden instead of removed.
"""

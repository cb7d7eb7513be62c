# =============================================================================
# Models Package — API Schemas
# =============================================================================
# Defines request enumerations and response schemas for the API.
# Task types live in interview_prep/workers/tasks.py, not here: they are
# internal work items, not part of the public contract.
# =============================================================================

# JobScout - Job Search Assistant Backend
# Version 0.1.0

"""
JobScout stores what the job search assistant works with.

Layers:
1. Core - Resume section parsing, size/format helpers, job metrics, profile weights
2. Storage - Resume library, saved jobs and profiles in a SQL database
3. API - FastAPI routes used by the chat UI and agent tools
"""

__version__ = "0.1.0"

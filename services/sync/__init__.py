"""
FSS Sync Service
Runs the full ticket synchronization pipeline

Components:
- orchestrator.py: SyncService (cache bootstrap -> fetch -> enrich)
- main.py: FastAPI application with sync and ticket endpoints
- cli.py: Command-line interface
"""

from .orchestrator import SyncResult, SyncService

__all__ = ["SyncResult", "SyncService"]

"""
adotasks - Azure DevOps work item access for task-tracking integrations.

Searches the work items assigned to the current user, reads their valid
states and moves them between states through the Azure DevOps REST API.

Architecture:
- core/: Domain entities, ports and exceptions
- adapters/: Azure DevOps client and repository, configuration providers
- cli/: Command line interface
"""

__version__ = "1.0.0"

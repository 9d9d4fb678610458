"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskDraft, TaskCounts)
- task_api.py: thin helpers mapping /tasks endpoints onto gateway calls
- edit_session.py: single-slot inline edit state
- collection.py: local task list with reload-after-write reconciliation
"""

"""
Task subsystem.

Components:
- task_models.py: data structures (Snapshot, ManualTask, Idea, RecurringTaskDefinition, ...)
- projector.py: recurring-task projection, merge, reorder/toggle/delete
- task_edits.py: add/rename/recurring-definition edits and id allocation
- task_store.py: remote (PostgREST) and local JSON document stores
- save_queue.py: debounced background saver
- task_api.py: named operations on AppState used by the connectors
- analytics.py: progress and completion statistics
"""

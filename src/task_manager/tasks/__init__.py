"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, FilterMode, SortMode)
- task_view.py: pure filter/sort over a task list
- task_store.py: in-memory task cache driven by reducer actions
- task_wizard.py: three-step creation form
"""

"""
View components for the planner frontend.

- task_list: sortable, selectable task collection with deletion
- dashboard: task creation form, clock and sidebar list
"""

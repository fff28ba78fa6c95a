"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_store.py: SQLite-backed storage (synchronous, single-row CRUD)
- live_query.py: QuerySubscription, the consumer end of a live query
- task_database.py: async front with a disk lane and live queries (get_all/get_by_id)
"""

"""Things 3 database access."""

from thingslog.things.logbook import Subtask, Task, ThingsDatabaseError, ThingsLogbook

__all__ = ["Subtask", "Task", "ThingsDatabaseError", "ThingsLogbook"]

"""Release engine.

- versions / projects: version classification and the train's version set
- model / tasks: the task pipeline and its registry
- releaser: one operation per task, delegating to the collaborators in ports
- scheduler / rollback: single project runs and their undo
- meta: releasing a whole train
- builder / git_handler: subprocess backed collaborators
"""

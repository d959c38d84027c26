"""Single-list task tracker: task store, trigger dispatch and persistence ports."""

"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple resources use
(DB wiring, settings, logging, the SQL query layer). Keep resource-specific
routes in the corresponding resource package (e.g. `posts/`).
"""

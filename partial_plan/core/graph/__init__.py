"""Dependency graph engine.

Graphs are plain ``networkx.DiGraph`` values rebuilt from a task list on every
call. Nodes are task ids carrying the task record under ``task``; edges run
from dependency to dependent and carry the relation under ``type``.
"""

"""
Process relation resolution: an identifier's target plus all descendants.
"""

from .resolver import RelationResolver, build_child_index, resolve_relations

__all__ = ["RelationResolver", "build_child_index", "resolve_relations"]

"""SWEREF 99 projection utilities.

Modules:
 - sweref_catalog: the TM projection and the 12 local zones with their bounds
 - detector: projection detection and boundary warnings
 - transform: async projection engine loading and point transforms
 - heuristics: cheap classification of free text as coordinate input
 - diagnostics: result summaries for transport
"""

__all__ = [
    "sweref_catalog",
    "detector",
    "transform",
    "heuristics",
    "diagnostics",
]

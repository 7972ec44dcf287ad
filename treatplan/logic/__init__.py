"""Core business logic layer.

Subpackages:
- reference: immutable lookup tables (findings, goals, treatments, products)
- sections: section categorizer
- composer: add-entry session, item builder and controller
- sync: optimistic-update persistence manager
- controllers: drag/move and lifecycle transitions
- reporting: display helpers and share message

editor.PlanEditor ties them together for one open patient.
"""
__all__ = ["reference", "sections", "composer", "sync", "controllers", "reporting", "editor"]

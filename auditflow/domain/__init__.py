"""Domain layer: entities, value objects, enums and exceptions.

No dependency on application or infrastructure.
"""

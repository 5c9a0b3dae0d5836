from .entity_ai import ActionKind, EnemyAction, EntityAI, greedy_step

__all__ = ["ActionKind", "EnemyAction", "EntityAI", "greedy_step"]

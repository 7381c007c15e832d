"""Combatants, combat resolution and the managers that orchestrate them."""

"""
LLM-narrated text adventure engine.

Players type free text; an LLM interprets it into structured actions, a
deterministic executor applies them to the world, and the LLM retells
the outcome without being allowed to change it.
"""

__version__ = "0.1.0"

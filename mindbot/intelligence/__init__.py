"""MindBot intelligence layer -- crisis check, FAQ, intent scoring, reply assembly."""

from mindbot.intelligence.triage import triage

__all__ = ["triage"]

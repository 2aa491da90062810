"""
Panelsmith Agents Module

Planning agents that delegate to the structured generation capability.
"""

from .base_agent import AgentConfig, BaseAgent
from .macro_planner import MacroPlanner
from .shot_planner import ShotPlanner
from .settings_planner import SettingsPlanner, suggestion_to_project_settings
from .prompts import AgentPrompt, AgentPromptLibrary

__all__ = [
    'AgentConfig',
    'BaseAgent',
    'MacroPlanner',
    'ShotPlanner',
    'SettingsPlanner',
    'suggestion_to_project_settings',
    'AgentPrompt',
    'AgentPromptLibrary',
]

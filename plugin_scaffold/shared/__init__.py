"""
References and prompts shared by the commands.
"""

from .plugin_ref import PluginRef
from .config_ref import ConfigRef
from .prompts import PromptCancelled, ask_select, ask_text

__all__ = ["PluginRef", "ConfigRef", "PromptCancelled", "ask_select", "ask_text"]

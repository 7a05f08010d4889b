"""
Interactive commands.
"""

from .plugin import create_new_plugin, generate_plugin, get_plugin_dir_name

__all__ = ["create_new_plugin", "generate_plugin", "get_plugin_dir_name"]

"""
Plugin Scaffold

Interactive generator for host-application plugins: creates the plugin
files, registers the plugin in the host configuration, and adds entities,
services, admin UI extensions and GraphQL codegen config on request.
"""

__version__ = "0.1.0"

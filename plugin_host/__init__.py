"""
plugin_host: runtime plugin registry and slot composition for a host application.

Plugins contribute UI fragments, routes and translations; the host renders
named slots by resolving and composing those contributions.
"""

__version__ = "0.1.0"

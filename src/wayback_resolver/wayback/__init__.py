"""Wayback Machine client and resolver.

Public entry points are :class:`~wayback_resolver.wayback.resolver.WaybackResolver`
and :class:`~wayback_resolver.wayback.client.WaybackClient`.
"""

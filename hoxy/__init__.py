"""
Hoxy - local development static-content server.
Serves a directory over HTTP/HTTPS with directory listings, SPA fallback,
optional CORS headers and a live-reload WebSocket channel.
"""

__version__ = "1.0.0"

"""
Request-resolution and live-reload engine.
No web framework here: the api package adapts these results to HTTP and WebSocket.
"""

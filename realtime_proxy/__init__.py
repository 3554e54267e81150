"""Realtime WebSocket proxy for the Qwen Omni realtime API.

Browser clients connect to the proxy; the proxy holds the API credential,
opens one upstream realtime connection per client and relays frames in both
directions, queueing client traffic while the upstream is not ready.
"""

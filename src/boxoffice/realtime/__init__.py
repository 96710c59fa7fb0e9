"""Real-time delivery — notifier (API side) and broadcast hub (viewer side).

Learn: Changes flow through two hops:
1. Inventory API → POST /webhook on the hub (WebhookNotifier)
2. Hub → every connected WebSocket viewer (BroadcastHub)

The notifier is the only thing coupling the two processes. Neither hop is
durable: a viewer that misses a push re-reads the API to catch up.
"""

"""Real-time infrastructure — in-process workspace broadcast over WebSocket.

Events flow one way:
1. Services commit a write, then call publish_event()
2. publish_event() hands the envelope to the ConnectionRegistry
3. The registry fans it out to every socket subscribed to that workspace

Delivery is best-effort: nothing is stored, nothing is replayed.
"""

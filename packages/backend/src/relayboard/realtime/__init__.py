"""Real-time delivery — in-process fan-out over WebSockets.

Learn: Events flow webhook → EventDistributor → every open
/ws/live-events socket. Fan-out stays inside one process; viewers that
reconnect catch up through the messages API rather than a replay.
"""

"""MomoLog Quick Start — send a few values to the debug viewer."""

import momolog

# 1. Point at the viewer (defaults to http://localhost:9090/debug)
momolog.configure(server_url="http://localhost:9090/debug", enabled=True)

# 2. Send values; each call returns immediately
momolog.debug("Hello from Python")
momolog.debug({"user_id": 42, "roles": ["admin", "editor"]}, "Current user")
momolog.debug_array([1, 2, 3], "Scores")

# 3. Quick debug, labeled with this file and line
momolog.dd({"step": "checkout", "total": 19.99})

# 4. Shutdown (waits briefly for in-flight messages)
momolog.shutdown()

print("Done! Check the MomoLog viewer at http://localhost:9090")

"""HTTP and WebSocket front end that paces the simulator."""

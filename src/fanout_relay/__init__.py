"""Connection registry and broadcast fan-out relay."""

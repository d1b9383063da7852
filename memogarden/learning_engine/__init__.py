"""Health synchronization, decay and statistics engine."""

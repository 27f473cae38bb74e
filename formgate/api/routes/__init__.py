"""FormGate API routes."""

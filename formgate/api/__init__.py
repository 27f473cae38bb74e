"""FormGate HTTP API: app factory, middleware, routes and response models."""

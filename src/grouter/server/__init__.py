"""Request-side plumbing: handler adaptation, negotiation, errors, ASGI send."""

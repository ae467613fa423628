"""Request pipeline: ASGI translation, error mapping and serving."""

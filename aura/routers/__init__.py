"""
FastAPI routers grouped by concern (health, resources, reports).

Handlers are thin: they fetch the store owned by the app from ``app.state``,
call one store operation and wrap the result in the ``{success: ...}`` envelope.
"""

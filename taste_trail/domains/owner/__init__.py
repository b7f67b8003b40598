from importlib import import_module


def __getattr__(name: str):
    # lazy so that importing .models (alembic, other domains) does not pull in the routers
    if name in ("router", "admin_router"):
        return getattr(import_module(".api", __name__), name)
    if name == "register_event_handlers":
        return import_module(".events", __name__).register_event_handlers
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

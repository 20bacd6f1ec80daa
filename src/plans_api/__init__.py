"""
Plans backend package.

A FastAPI service storing plans (todos + notes) in a document store, plus a
small httpx client and the client-side state helpers that drive it.

``plans_api.app`` and ``plans_api.create_app`` are resolved on first access,
so importing a submodule such as ``plans_api.client`` does not build the app.
"""


def __getattr__(name):
    if name in ("app", "create_app"):
        from . import main

        return getattr(main, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

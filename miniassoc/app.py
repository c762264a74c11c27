from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from miniassoc.endpoints import router


def create_app(registry):
    """Serve a resolved schema read-only. Serving ends the definition phase."""
    registry.freeze()

    app = FastAPI(title="miniassoc schema")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.state.registry = registry
    app.include_router(router)
    return app

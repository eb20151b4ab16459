from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from kwollect_input.api.v2 import health, routes
from kwollect_input.pipeline.runtime import PipelineRuntime, build_runtime


def create_app(runtime: PipelineRuntime | None = None) -> FastAPI:
    runtime = runtime or build_runtime()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        runtime.start()
        try:
            yield
        finally:
            runtime.shutdown()

    app = FastAPI(
        title="Kwollect Input",
        version="0.1.0",
        description="Grid'5000 Kwollect measurements, fetched on demand",
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    app.include_router(health.router)
    app.include_router(routes.router)
    return app


app = create_app()

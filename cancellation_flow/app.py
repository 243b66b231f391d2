"""FastAPI application factory."""

from fastapi import FastAPI

from cancellation_flow.routers import cancellation


def create_app() -> FastAPI:
    app = FastAPI(
        title="Subscription Cancellation",
        description="Variant assignment and outcome reporting for the cancellation flow.",
        version="1.0.0",
    )

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    app.include_router(cancellation.router)

    return app

from prometheus_fastapi_instrumentator import Instrumentator

from medinventory import create_app
from medinventory.core.config import get_settings
from medinventory.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
app = create_app(settings)
instrumentator = Instrumentator()


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


instrumentator.instrument(app).expose(app, include_in_schema=False)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)

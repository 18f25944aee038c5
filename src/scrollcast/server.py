"""HTTP entry point: record the configured page and stream back the MP4.

Run with:
    scrollcast-server
    # or
    python -m scrollcast.server
"""

import asyncio
import sys

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse

from scrollcast.config import Config
from scrollcast.errors import PipelineError
from scrollcast.pipeline import Pipeline


def create_app(config: Config | None = None, pipeline: Pipeline | None = None) -> FastAPI:
    """Build the FastAPI app around a single pipeline."""
    config = config or Config.load()
    pipeline = pipeline or Pipeline(config)

    app = FastAPI(title="scrollcast", version="0.1.0")
    app.state.config = config
    app.state.pipeline = pipeline
    # One capture at a time: the browser and recording dir are exclusive.
    app.state.capture_lock = asyncio.Lock()

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def generate_video():
        """Record the configured URL and return the MP4 (supports Range requests)."""
        print("Generating video.", file=sys.stderr, flush=True)

        async with app.state.capture_lock:
            try:
                output = await app.state.pipeline.run(config.pipeline.url)
            except PipelineError as exc:
                raise HTTPException(
                    status_code=500,
                    detail={"stage": exc.stage, "error": str(exc.cause)},
                ) from exc

        return FileResponse(
            output.path,
            media_type="video/mp4",
            filename=str(output.path),
        )

    return app


def main() -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    config = Config.load()
    print("Starting...", file=sys.stderr, flush=True)
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()

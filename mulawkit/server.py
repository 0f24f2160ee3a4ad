"""Built-in HTTP/WebSocket server for mulawkit.

Provides a FastAPI-based server that accepts WAV uploads and returns mu-law
audio. The WebSocket endpoint streams progress events while a conversion
runs, which is what a browser front end needs for its progress bar.

Requires: pip install mulawkit[server]
"""

from typing import Any

from loguru import logger

from mulawkit import __version__
from mulawkit.config import ConverterConfig, load_config
from mulawkit.audio.validation import find_problems
from mulawkit.audio.wav import parse_wav_header
from mulawkit.converter import convert_async, stream_conversion
from mulawkit.core.errors import ConversionError
from mulawkit.core.events import ConversionCompleted
from mulawkit.core.models import AudioMetadata


def _fastapi_available() -> bool:
    try:
        import fastapi  # noqa: F401
        import uvicorn  # noqa: F401
        return True
    except ImportError:
        return False


def _metadata_headers(result: Any) -> dict[str, str]:
    meta = result.metadata
    return {
        "X-Mulaw-Bit-Rate": str(meta.bit_rate),
        "X-Mulaw-Channels": str(meta.channels),
        "X-Mulaw-Sample-Rate": str(meta.sample_rate),
        "X-Mulaw-Sample-Size": str(meta.sample_size),
        "X-Mulaw-Duration": f"{meta.duration_seconds:.3f}",
        "X-Mulaw-File-Size": str(meta.file_size),
    }


def create_app(config: ConverterConfig | dict | str | None = None) -> Any:
    """Create a FastAPI application with the conversion endpoints.

    Args:
        config: Converter configuration (YAML path, dict, or ConverterConfig).

    Returns:
        A FastAPI application instance.

    Requires: pip install mulawkit[server]
    """
    if not _fastapi_available():
        raise ImportError(
            "The HTTP server requires fastapi and uvicorn. "
            "Install with: pip install mulawkit[server]"
        )

    from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
    from fastapi.responses import JSONResponse, Response

    converter_config = load_config(config)
    max_upload = converter_config.server.max_upload_bytes

    app = FastAPI(
        title="mulawkit",
        description="WAV to G.711 mu-law conversion",
        version=__version__,
    )

    def _too_large(size: int) -> JSONResponse | None:
        if size > max_upload:
            return JSONResponse(
                {"code": "too_large", "message": f"Upload exceeds {max_upload} bytes"},
                status_code=413,
            )
        return None

    @app.get("/health")
    async def health():
        return JSONResponse({"status": "ok", "version": __version__})

    @app.post("/info")
    async def info(request: Request):
        body = await request.body()
        rejected = _too_large(len(body))
        if rejected is not None:
            return rejected
        try:
            header = parse_wav_header(body)
        except ConversionError as e:
            return JSONResponse({"code": e.code, "message": str(e)}, status_code=422)
        problems = find_problems(header, strict=converter_config.conversion.strict_fmt_chunk)
        payload = AudioMetadata.from_header(header).model_dump()
        payload["supported"] = not problems
        payload["problems"] = [p.reason for p in problems]
        return JSONResponse(payload)

    @app.post("/convert")
    async def convert_endpoint(request: Request, container: str | None = None):
        body = await request.body()
        rejected = _too_large(len(body))
        if rejected is not None:
            return rejected
        container = container or converter_config.output.container
        if container not in ("raw", "wav"):
            return JSONResponse(
                {"code": "bad_request", "message": f"Unknown container: {container}"},
                status_code=400,
            )
        try:
            result = await convert_async(body, converter_config)
        except ConversionError as e:
            logger.info(f"Rejected upload: {e.code}: {e}")
            return JSONResponse({"code": e.code, "message": str(e)}, status_code=422)

        if container == "wav":
            return Response(result.as_wav(), media_type="audio/wav", headers=_metadata_headers(result))
        return Response(result.encoded, media_type="audio/basic", headers=_metadata_headers(result))

    @app.websocket("/convert/stream")
    async def convert_stream(websocket: WebSocket):
        await websocket.accept()
        logger.info(f"Conversion WebSocket connected: {websocket.client}")
        try:
            data = await websocket.receive_bytes()
            if len(data) > max_upload:
                await websocket.send_json({"event_type": "conversion_failed", "code": "too_large"})
                await websocket.close()
                return
            async for event in stream_conversion(data, converter_config):
                if isinstance(event, ConversionCompleted):
                    await websocket.send_json(event.model_dump(mode="json", exclude={"encoded"}))
                    await websocket.send_bytes(event.encoded)
                else:
                    await websocket.send_json(event.model_dump(mode="json"))
            await websocket.close()
        except WebSocketDisconnect:
            logger.info(f"Conversion WebSocket disconnected: {websocket.client}")

    return app


def run_server(config: ConverterConfig | dict | str | None = None, host: str = None, port: int = None):
    """Run the mulawkit server with uvicorn.

    Args:
        config: Converter configuration.
        host: Override the listen host.
        port: Override the listen port.
    """
    if not _fastapi_available():
        raise ImportError(
            "The HTTP server requires fastapi and uvicorn. "
            "Install with: pip install mulawkit[server]"
        )

    import uvicorn

    converter_config = load_config(config)
    app = create_app(converter_config)

    uvicorn.run(
        app,
        host=host or converter_config.server.host,
        port=port or converter_config.server.port,
    )

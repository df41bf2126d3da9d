from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from freq_det import __version__
from freq_det.audio_file import decode_audio, detect_blocks
from freq_det.detector import FreqDetector, FreqDetectorConfig
from freq_det.errors import InvalidConfiguration, InvalidInputLength, InvalidSampleData, SilentOrDegenerateSignal
from freq_det.notes import nearest_note
from freq_det.web.schemas import BlockEstimate, DetectRequest, DetectResponse, FileDetectResponse

logger = logging.getLogger(__name__)

app = FastAPI(title="freq-det", version=__version__)


@app.get("/api/health")
async def health() -> dict[str, object]:
    return {"status": "ok", "version": __version__}


@app.post("/api/detect", response_model=DetectResponse, response_model_by_alias=True)
async def detect(req: DetectRequest) -> DetectResponse:
    try:
        detector = FreqDetector(
            FreqDetectorConfig(
                sample_rate=req.sample_rate,
                window_size=len(req.samples),
                min_hz=req.min_hz,
                max_hz=req.max_hz,
                noise_floor=req.noise_floor,
                window=req.window,
                refinement=req.refinement,
            )
        )
    except InvalidConfiguration as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        result = detector.detect_detailed(req.samples)
    except SilentOrDegenerateSignal:
        return DetectResponse(hz=None, reason="silent")
    except (InvalidInputLength, InvalidSampleData) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    note = nearest_note(result.hz)
    return DetectResponse(
        hz=result.hz,
        bin_index=result.bin_index,
        bin_hz=result.bin_hz,
        magnitude=result.magnitude,
        note=note.name if note is not None else None,
        cents=note.cents if note is not None else None,
    )


@app.post("/api/detect/file", response_model=FileDetectResponse, response_model_by_alias=True)
async def detect_file(
    audio: UploadFile = File(...),
    window_size: int = Form(4096, alias="windowSize", ge=2, le=1 << 16),
    min_hz: float = Form(20.0, alias="minHz"),
    noise_floor: float = Form(1e-4, alias="noiseFloor"),
) -> FileDetectResponse:
    payload = await audio.read()
    if not payload:
        raise HTTPException(status_code=400, detail="Audio file is empty")

    try:
        waveform, sample_rate = decode_audio(payload)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Unable to decode upload %r: %s", audio.filename, exc)
        raise HTTPException(status_code=400, detail=f"Unable to decode audio: {exc}") from exc

    try:
        detector = FreqDetector(
            FreqDetectorConfig(
                sample_rate=sample_rate,
                window_size=window_size,
                min_hz=min_hz,
                noise_floor=noise_floor,
            )
        )
    except InvalidConfiguration as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    blocks = [BlockEstimate(t=t, hz=hz) for t, hz in detect_blocks(detector, waveform)]
    logger.info("Analyzed %d blocks from %r at %d Hz", len(blocks), audio.filename, sample_rate)
    return FileDetectResponse(sample_rate=sample_rate, window_size=window_size, blocks=blocks)


def main(host: str = "127.0.0.1", port: int = 8000) -> None:
    uvicorn.run("freq_det.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()

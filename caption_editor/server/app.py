"""FastAPI application exposing the caption editor to a host UI.

WHY: The timeline UI runs in a browser or desktop shell and cannot import
Python directly. An HTTP API gives it every editing command, import and
export, analysis, and the waveform/timeline helpers, with automatic
OpenAPI documentation and request validation.

HOW: create_app() builds a FastAPI app around one EditorSession. Each
endpoint takes the session lock, calls exactly one store (or analyzer)
operation, and converts the result to a pydantic response model. Typed
editor failures are turned into ErrorResponse bodies by a single
exception handler. The module-level ``app`` is what uvicorn serves.

RULES:
- All endpoints have OpenAPI summaries and documented error responses
- ValidationFailure -> 422; ParseFailure, UnsupportedFormat, ResampleError -> 400
- By-id edits on an unknown id answer 200 with {"applied": false}
- Endpoints are sync (def) so FastAPI runs them on its thread pool; the
  session lock serialises them
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from caption_editor import __version__
from caption_editor.audio.resample import resample_audio
from caption_editor.audio.waveform import WaveformAnalyzer
from caption_editor.config import API_HOST, API_PORT, LOG_LEVEL, WAVEFORM_SAMPLE_RATE
from caption_editor.core import timeline
from caption_editor.core.errors import CaptionEditorError, ValidationFailure
from caption_editor.core.store import CaptionStore
from caption_editor.formats import CODECS, get_codec
from caption_editor.server.models import (
    AppliedResponse,
    CaptionModel,
    ClickRequest,
    ConflictsResponse,
    CountResponse,
    CreateCaptionRequest,
    DeleteRequest,
    ErrorResponse,
    FindReplaceRequest,
    FormatInfo,
    HealthResponse,
    HistoryResponse,
    IdResponse,
    ImportRequest,
    ImportResponse,
    PanRequest,
    PeaksResponse,
    ProfanityFilterRequest,
    SelectionRequest,
    ShiftRequest,
    SplitRequest,
    StretchRequest,
    StyleModel,
    TextUpdateRequest,
    TimedCaptionRequest,
    TimeResponse,
    TimingUpdateRequest,
    TransformModel,
    WarningsResponse,
    WaveformRequest,
    WaveformResponse,
    WheelRequest,
)
from caption_editor.server.session import EditorSession

logger = logging.getLogger(__name__)

_VALIDATION_ERROR = {422: {"model": ErrorResponse, "description": "Edit rejected by a store invariant"}}
_FORMAT_ERROR = {400: {"model": ErrorResponse, "description": "Unknown format or malformed content"}}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _status_for(exc: CaptionEditorError) -> int:
    """Map an editor failure to an HTTP status code."""
    if isinstance(exc, ValidationFailure):
        return 422
    return 400


def _history_response(store: CaptionStore, moved: bool) -> HistoryResponse:
    return HistoryResponse(moved=moved, can_undo=store.can_undo, can_redo=store.can_redo)


def _to_transform(model: TransformModel) -> timeline.TimelineTransform:
    return timeline.TimelineTransform(scale=model.scale, offset=model.offset)


def _from_transform(transform: timeline.TimelineTransform) -> TransformModel:
    return TransformModel(scale=transform.scale, offset=transform.offset)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    store: Optional[CaptionStore] = None,
    analyzer: Optional[WaveformAnalyzer] = None,
) -> FastAPI:
    """Build the API around a fresh (or injected) store and analyzer."""
    session = EditorSession(store=store, analyzer=analyzer)

    app = FastAPI(
        title="Caption Editor API",
        description=(
            "Editing engine for timed captions: create, retime, split, merge, "
            "restyle, and bulk-transform captions with bounded undo/redo; import "
            "and export SRT, WebVTT, ASS and JSON; export plain text, FCPXML and "
            "EDL; waveform envelopes and timeline zoom/pan math."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.session = session

    @app.exception_handler(CaptionEditorError)
    async def _editor_error_handler(request: Request, exc: CaptionEditorError) -> JSONResponse:
        status = _status_for(exc)
        logger.warning("%s %s rejected (%d): %s", request.method, request.url.path, status, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    # -----------------------------------------------------------------------
    # Health, formats, session
    # -----------------------------------------------------------------------

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
        summary="Health check",
    )
    def health_check() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.get(
        "/formats",
        response_model=List[FormatInfo],
        tags=["formats"],
        summary="List caption formats",
        description="All format keys accepted by /import and /export, with import support flags.",
    )
    def list_formats() -> List[FormatInfo]:
        result = []
        for fmt, codec_cls in CODECS.items():
            codec = codec_cls()
            result.append(FormatInfo(
                key=fmt.value,
                name=codec.name,
                extension=codec.extension,
                can_import=codec.can_parse,
            ))
        return result

    @app.delete(
        "/session",
        status_code=204,
        tags=["health"],
        summary="Discard all captions, history and waveform data",
    )
    def reset_session() -> Response:
        session.reset()
        return Response(status_code=204)

    # -----------------------------------------------------------------------
    # Captions
    # -----------------------------------------------------------------------

    @app.get(
        "/captions",
        response_model=List[CaptionModel],
        tags=["captions"],
        summary="List captions in collection order",
    )
    def list_captions() -> List[CaptionModel]:
        with session.locked() as (store, _):
            captions = store.captions
        return [CaptionModel.from_caption(c) for c in captions]

    @app.post(
        "/captions",
        response_model=IdResponse,
        status_code=201,
        tags=["captions"],
        summary="Append an empty zero-duration caption",
    )
    def create_caption(body: CreateCaptionRequest) -> IdResponse:
        with session.locked() as (store, _):
            return IdResponse(id=store.create(body.start_ms))

    @app.post(
        "/captions/timed",
        response_model=IdResponse,
        status_code=201,
        tags=["captions"],
        summary="Add a caption with timing and text",
        description="The collection is re-sorted by start time afterwards.",
        responses=_VALIDATION_ERROR,
    )
    def add_timed_caption(body: TimedCaptionRequest) -> IdResponse:
        with session.locked() as (store, _):
            return IdResponse(id=store.add_timed(body.start_ms, body.end_ms, body.text))

    @app.patch(
        "/captions/{caption_id}/text",
        response_model=AppliedResponse,
        tags=["captions"],
        summary="Replace one caption's text",
    )
    def update_text(caption_id: str, body: TextUpdateRequest) -> AppliedResponse:
        with session.locked() as (store, _):
            return AppliedResponse(applied=store.update_text(caption_id, body.text))

    @app.patch(
        "/captions/{caption_id}/timing",
        response_model=AppliedResponse,
        tags=["captions"],
        summary="Retime one caption in place",
        responses=_VALIDATION_ERROR,
    )
    def update_timing(caption_id: str, body: TimingUpdateRequest) -> AppliedResponse:
        with session.locked() as (store, _):
            return AppliedResponse(
                applied=store.update_timing(caption_id, body.start_ms, body.end_ms)
            )

    @app.patch(
        "/captions/{caption_id}/style",
        response_model=AppliedResponse,
        tags=["captions"],
        summary="Replace one caption's style",
    )
    def update_style(caption_id: str, body: StyleModel) -> AppliedResponse:
        with session.locked() as (store, _):
            return AppliedResponse(applied=store.update_style(caption_id, body.to_style()))

    @app.put(
        "/style",
        response_model=CountResponse,
        tags=["captions"],
        summary="Apply one style to every caption",
    )
    def update_global_style(body: StyleModel) -> CountResponse:
        with session.locked() as (store, _):
            store.update_global_style(body.to_style())
            return CountResponse(count=len(store))

    @app.post(
        "/captions/delete",
        response_model=CountResponse,
        tags=["captions"],
        summary="Delete captions by id",
        description="Unknown ids are ignored. A snapshot is recorded even if nothing matched.",
    )
    def delete_captions(body: DeleteRequest) -> CountResponse:
        with session.locked() as (store, _):
            return CountResponse(count=store.delete(body.ids))

    @app.post(
        "/captions/{caption_id}/split",
        response_model=AppliedResponse,
        tags=["captions"],
        summary="Split a caption at a time inside it",
        responses=_VALIDATION_ERROR,
    )
    def split_caption(caption_id: str, body: SplitRequest) -> AppliedResponse:
        with session.locked() as (store, _):
            return AppliedResponse(applied=store.split(caption_id, body.at_ms) is not None)

    @app.put(
        "/selection",
        response_model=List[int],
        tags=["captions"],
        summary="Replace the merge selection",
        description="Positions refer to collection order. Selection is not recorded in history.",
        responses=_VALIDATION_ERROR,
    )
    def set_selection(body: SelectionRequest) -> List[int]:
        with session.locked() as (store, _):
            store.select(body.positions)
            return store.selection

    @app.post(
        "/captions/merge",
        response_model=IdResponse,
        tags=["captions"],
        summary="Merge the selected captions into the first",
        responses=_VALIDATION_ERROR,
    )
    def merge_captions() -> IdResponse:
        with session.locked() as (store, _):
            return IdResponse(id=store.merge_selected())

    @app.post(
        "/captions/sort",
        response_model=CountResponse,
        tags=["captions"],
        summary="Stable-sort captions by start time",
    )
    def sort_captions() -> CountResponse:
        with session.locked() as (store, _):
            store.sort_by_start()
            return CountResponse(count=len(store))

    @app.post(
        "/captions/shift",
        response_model=CountResponse,
        tags=["captions"],
        summary="Shift every caption by a fixed offset",
    )
    def shift_captions(body: ShiftRequest) -> CountResponse:
        with session.locked() as (store, _):
            store.shift_all(body.delta_ms)
            return CountResponse(count=len(store))

    @app.post(
        "/captions/stretch",
        response_model=CountResponse,
        tags=["captions"],
        summary="Scale every caption's times by a factor",
        responses=_VALIDATION_ERROR,
    )
    def stretch_captions(body: StretchRequest) -> CountResponse:
        with session.locked() as (store, _):
            store.stretch_all(body.factor)
            return CountResponse(count=len(store))

    # -----------------------------------------------------------------------
    # Bulk text transforms
    # -----------------------------------------------------------------------

    @app.post(
        "/transforms/auto-punctuate",
        response_model=CountResponse,
        tags=["transforms"],
        summary="Fix sentence punctuation in every caption",
    )
    def auto_punctuate() -> CountResponse:
        with session.locked() as (store, _):
            store.auto_punctuate()
            return CountResponse(count=len(store))

    @app.post(
        "/transforms/find-replace",
        response_model=CountResponse,
        tags=["transforms"],
        summary="Literal find and replace across all captions",
        description="Returns the number of captions whose text changed.",
        responses=_VALIDATION_ERROR,
    )
    def find_replace(body: FindReplaceRequest) -> CountResponse:
        with session.locked() as (store, _):
            return CountResponse(
                count=store.find_replace(body.find, body.replace, body.case_sensitive)
            )

    @app.post(
        "/transforms/profanity-filter",
        response_model=CountResponse,
        tags=["transforms"],
        summary="Mask listed profanity in every caption",
    )
    def profanity_filter(body: ProfanityFilterRequest) -> CountResponse:
        with session.locked() as (store, _):
            store.apply_profanity_filter(body.bleep)
            return CountResponse(count=len(store))

    # -----------------------------------------------------------------------
    # Analysis
    # -----------------------------------------------------------------------

    @app.get(
        "/analysis/reading-speed",
        response_model=WarningsResponse,
        tags=["analysis"],
        summary="Reading-speed warnings for the current captions",
    )
    def reading_speed() -> WarningsResponse:
        with session.locked() as (store, _):
            return WarningsResponse(warnings=store.analyze_reading_speed())

    @app.get(
        "/analysis/conflicts",
        response_model=ConflictsResponse,
        tags=["analysis"],
        summary="Position pairs of overlapping captions",
    )
    def conflicts() -> ConflictsResponse:
        with session.locked() as (store, _):
            pairs = store.detect_conflicts()
        return ConflictsResponse(conflicts=[list(p) for p in pairs])

    # -----------------------------------------------------------------------
    # History
    # -----------------------------------------------------------------------

    @app.post(
        "/history/undo",
        response_model=HistoryResponse,
        tags=["history"],
        summary="Step back one snapshot",
    )
    def undo() -> HistoryResponse:
        with session.locked() as (store, _):
            return _history_response(store, store.undo())

    @app.post(
        "/history/redo",
        response_model=HistoryResponse,
        tags=["history"],
        summary="Step forward one snapshot",
    )
    def redo() -> HistoryResponse:
        with session.locked() as (store, _):
            return _history_response(store, store.redo())

    # -----------------------------------------------------------------------
    # Import / export
    # -----------------------------------------------------------------------

    @app.post(
        "/import/{fmt}",
        response_model=ImportResponse,
        tags=["formats"],
        summary="Replace all captions with parsed file content",
        description=(
            "Parsing is all-or-nothing: on a parse error the current captions "
            "are kept. Returns reading-speed warnings and conflicts found after import."
        ),
        responses=_FORMAT_ERROR,
    )
    def import_captions(fmt: str, body: ImportRequest) -> ImportResponse:
        with session.locked() as (store, _):
            count = store.import_captions(fmt, body.content)
            return ImportResponse(
                count=count,
                warnings=store.last_import_warnings,
                conflicts=[list(p) for p in store.last_import_conflicts],
            )

    @app.get(
        "/export/{fmt}",
        tags=["formats"],
        summary="Export all captions as a file",
        responses=_FORMAT_ERROR,
    )
    def export_captions(fmt: str) -> Response:
        codec = get_codec(fmt)
        with session.locked() as (store, _):
            content = store.export_captions(fmt)
        filename = "captions{}".format(codec.extension)
        return Response(
            content=content,
            media_type=codec.media_type,
            headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
        )

    # -----------------------------------------------------------------------
    # Waveform and timeline
    # -----------------------------------------------------------------------

    @app.post(
        "/waveform",
        response_model=WaveformResponse,
        tags=["waveform"],
        summary="Build the waveform envelope from PCM samples",
        description=(
            "Samples are resampled to target_rate (or the configured default) "
            "before the envelope is computed. The envelope replaces any previous one."
        ),
        responses={400: {"model": ErrorResponse, "description": "Resampling failed"}},
    )
    def process_waveform(body: WaveformRequest) -> WaveformResponse:
        target = body.target_rate or WAVEFORM_SAMPLE_RATE
        samples = resample_audio(body.samples, body.sample_rate, target)
        with session.locked() as (_, analyzer):
            envelope = analyzer.process_buffer(samples)
        logger.info(
            "Waveform built: %d samples at %d Hz -> %d envelope points",
            len(body.samples), body.sample_rate, len(envelope),
        )
        return WaveformResponse(envelope=envelope)

    @app.get(
        "/waveform/peaks",
        response_model=PeaksResponse,
        tags=["waveform"],
        summary="Envelope indices of local maxima above a threshold",
    )
    def waveform_peaks(
        threshold: float = Query(default=0.0, description="Minimum envelope value for a peak."),
    ) -> PeaksResponse:
        with session.locked() as (_, analyzer):
            return PeaksResponse(peaks=analyzer.get_peaks(threshold))

    @app.get(
        "/waveform/nearest-peak",
        response_model=Optional[int],
        tags=["waveform"],
        summary="Time in ms of the loudest point near a time, or null",
    )
    def nearest_peak(
        time_ms: float = Query(description="Reference time in milliseconds."),
        duration_ms: float = Query(description="Media duration in milliseconds."),
        threshold: float = Query(default=0.0, description="Minimum envelope value."),
    ) -> Optional[int]:
        with session.locked() as (_, analyzer):
            return analyzer.find_nearest_peak(time_ms, duration_ms, threshold)

    @app.get(
        "/waveform/nearest-silence",
        response_model=Optional[int],
        tags=["waveform"],
        summary="Time in ms of the first quiet point near a time, or null",
    )
    def nearest_silence(
        time_ms: float = Query(description="Reference time in milliseconds."),
        duration_ms: float = Query(description="Media duration in milliseconds."),
        threshold: float = Query(default=0.01, description="Envelope value counted as silence."),
    ) -> Optional[int]:
        with session.locked() as (_, analyzer):
            return analyzer.find_nearest_silence(time_ms, duration_ms, threshold)

    @app.post(
        "/timeline/click",
        response_model=TimeResponse,
        tags=["timeline"],
        summary="Media time under a pixel position",
    )
    def timeline_click(body: ClickRequest) -> TimeResponse:
        time_ms = timeline.time_from_click(
            _to_transform(body.transform), body.duration_ms, body.width, body.mouse_x
        )
        return TimeResponse(time_ms=time_ms)

    @app.post(
        "/timeline/wheel",
        response_model=TransformModel,
        tags=["timeline"],
        summary="Zoom one wheel step around the cursor",
    )
    def timeline_wheel(body: WheelRequest) -> TransformModel:
        return _from_transform(timeline.handle_wheel(
            _to_transform(body.transform), body.duration_ms, body.width, body.mouse_x, body.delta_y
        ))

    @app.post(
        "/timeline/pan",
        response_model=TransformModel,
        tags=["timeline"],
        summary="Pan relative to the drag start",
    )
    def timeline_pan(body: PanRequest) -> TransformModel:
        return _from_transform(timeline.handle_pan(
            _to_transform(body.transform), body.width, body.start_mouse_x, body.current_mouse_x
        ))

    return app


app = create_app()


def run_api():
    """Entry point for the caption-editor-api console script."""
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting caption editor API on %s:%d", API_HOST, API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)

"""REST API routes."""

import asyncio
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Request, HTTPException
from pydantic import BaseModel

from ...analysis.report_builder import ReportBuilder, save_report
from ...analysis.usage_analyzer import UsageAnalyzer
from ...editing.locale_editor import LocaleEditor
from ...models.analysis_result import AnalysisOutcome
from ...models.key_path import iter_keys
from ...resolution.lens_provider import LensProvider
from ...resolution.resolver import LocaleResolver
from ..services.job_manager import JobStatus

router = APIRouter()


# Request/Response models
class LensRequest(BaseModel):
    text: str
    languages: Optional[list[str]] = None


class SetValueRequest(BaseModel):
    key: str
    locale: str
    value: str


class SavedFileRequest(BaseModel):
    path: str


class FoldersRequest(BaseModel):
    folders: list[str]


class AnalysisRequest(BaseModel):
    include_extensions: Optional[list[str]] = None
    exclude_patterns: Optional[list[str]] = None
    save_report: bool = True


def _priority(request: Request, languages: Optional[list[str]] = None) -> list[str]:
    return languages or request.app.state.config.display_languages


def _require_config(request: Request) -> None:
    """Refuse to touch the project when the configuration is invalid."""
    errors = request.app.state.config.validate()
    if errors:
        raise HTTPException(500, "Configuration errors: " + "; ".join(errors))


def _editor(request: Request) -> LocaleEditor:
    store = request.app.state.store
    return LocaleEditor(store.project_root, store.folders)


# Locale endpoints
@router.get("/locales")
async def list_locales(request: Request):
    """List loaded locales with their origin files and key counts."""
    _require_config(request)
    store = request.app.state.store
    snapshot = await store.snapshot()

    return {
        "folders": store.folders,
        "locales": [
            {
                "locale": locale,
                "file": str(snapshot.get_origin(locale)),
                "keys": sum(1 for _ in iter_keys(snapshot.get_tree(locale))),
            }
            for locale in snapshot.locales
        ],
    }


@router.get("/keys/{key}")
async def get_key(request: Request, key: str, language: Optional[str] = None):
    """Resolve a key: primary display value plus per-locale values."""
    _require_config(request)
    snapshot = await request.app.state.store.snapshot()
    priority = [language] if language else _priority(request)
    resolver = LocaleResolver(priority)

    primary = resolver.select_primary(key, snapshot)
    classification = resolver.classify(key, snapshot)

    return {
        "key": key,
        "found": classification.found,
        "primary": {"locale": primary.locale, "value": primary.value} if primary else None,
        "translations": classification.with_value,
        "missing_locales": classification.without_value,
    }


@router.post("/lenses")
async def get_lenses(request: Request, body: LensRequest):
    """Annotate every translation call in the posted document text."""
    _require_config(request)
    settings = request.app.state.config
    provider = LensProvider(
        request.app.state.store,
        _priority(request, body.languages),
        enabled=settings.enable_codelens,
    )
    lenses = await provider.provide(body.text)
    return {"lenses": [lens.to_dict() for lens in lenses]}


@router.put("/keys")
async def set_value(request: Request, body: SetValueRequest):
    """Set one key's value for one locale and write it to disk."""
    _require_config(request)
    store = request.app.state.store
    snapshot = await store.snapshot()

    try:
        path = await asyncio.to_thread(
            _editor(request).save_value,
            body.locale,
            body.key,
            body.value,
            snapshot.get_origin(body.locale),
        )
    except OSError as e:
        raise HTTPException(500, f"Failed to save: {e}")

    store.invalidate()
    return {"status": "updated", "key": body.key, "locale": body.locale, "file": str(path)}


@router.delete("/keys/{key}")
async def delete_key(request: Request, key: str):
    """Remove a key from every locale that defines it."""
    _require_config(request)
    store = request.app.state.store
    snapshot = await store.snapshot()

    if not snapshot.values_for(key):
        raise HTTPException(404, f"Key not found: {key}")

    try:
        deleted_from = await asyncio.to_thread(_editor(request).delete_key, snapshot, key)
    except OSError as e:
        raise HTTPException(500, f"Failed to delete: {e}")

    store.invalidate()
    return {"status": "deleted", "key": key, "locales": deleted_from}


# Store endpoints
@router.post("/store/invalidate")
async def invalidate_store(request: Request):
    """Drop the cached snapshot so the next request reloads from disk."""
    request.app.state.store.invalidate()
    return {"status": "invalidated"}


@router.post("/store/saved")
async def notify_saved(request: Request, body: SavedFileRequest):
    """Tell the store a file was saved; reloads only for locale files."""
    invalidated = request.app.state.store.notify_saved(Path(body.path))
    return {"invalidated": invalidated}


@router.put("/store/folders")
async def update_folders(request: Request, body: FoldersRequest):
    """Replace the folder list used by the store."""
    if not body.folders:
        raise HTTPException(400, "At least one folder is required")

    changed = request.app.state.store.update_folders(body.folders)
    request.app.state.config.i18n_folders = list(body.folders)
    return {"folders": body.folders, "changed": changed}


# Analysis endpoints
@router.post("/analysis")
async def start_analysis(request: Request, body: AnalysisRequest):
    """Start an unused-key analysis job."""
    _require_config(request)
    settings = request.app.state.config
    store = request.app.state.store
    job_manager = request.app.state.job_manager

    analyzer = UsageAnalyzer(
        store.project_root,
        store.folders,
        body.include_extensions or settings.include_extensions,
        body.exclude_patterns if body.exclude_patterns is not None else settings.exclude_patterns,
    )

    job = job_manager.create_job(job_type="analysis")

    asyncio.create_task(
        _run_analysis_job(
            job_manager,
            analyzer,
            job.job_id,
            body.save_report,
        )
    )

    return {"job_id": job.job_id}


async def _run_analysis_job(
    job_manager,
    analyzer: UsageAnalyzer,
    job_id: str,
    write_report: bool = True,
):
    """Run analysis job in background."""
    job_manager.set_running(job_id)
    job = job_manager.get_job(job_id)

    try:
        async def progress_callback(percentage, message, **extra):
            await job_manager.send_progress(job_id, percentage, message, **extra)

        result = await analyzer.analyze(job.token, progress_callback)

        if result.outcome == AnalysisOutcome.CANCELLED:
            job_manager.set_cancelled(job_id)
            await job_manager.send_cancelled(job_id)
            return

        summary = result.to_dict()
        if result.completed:
            report = ReportBuilder().build(
                total_keys=result.total_keys,
                scanned_files=result.scanned_file_count,
                unused_keys=result.unused_keys,
                values_by_locale=result.snapshot.values_by_locale(result.unused_keys),
            )
            path = None
            if write_report:
                path = await asyncio.to_thread(save_report, report, analyzer.project_root)
            summary["report_file"] = str(path) if path else None
            # Unsaved reports are returned inline
            summary["report"] = None if path else report

        job_manager.set_completed(job_id, summary)
        await job_manager.send_complete(job_id, {"success": True, **summary})

    except Exception as e:
        job_manager.set_failed(job_id, str(e))
        await job_manager.send_error(job_id, str(e))

    finally:
        job_manager.cleanup_job(job_id)


@router.get("/analysis/{job_id}/status")
async def get_analysis_status(request: Request, job_id: str):
    """Get analysis job status (polling fallback)."""
    job_manager = request.app.state.job_manager

    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(404, "Job not found")

    return {
        "job_id": job.job_id,
        "status": job.status.value,
        "progress": job.progress.__dict__ if job.progress else None,
        "result": job.result,
        "error": job.error,
    }


@router.post("/analysis/{job_id}/cancel")
async def cancel_analysis(request: Request, job_id: str):
    """Request cancellation of a running analysis."""
    job_manager = request.app.state.job_manager

    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(404, "Job not found")

    if not job_manager.cancel_job(job_id):
        raise HTTPException(400, f"Job already {job.status.value}")

    return {"job_id": job_id, "status": JobStatus.CANCELLED.value, "requested": True}


@router.get("/analysis")
async def list_analyses(request: Request):
    """List analysis jobs, newest first."""
    job_manager = request.app.state.job_manager
    return {
        "jobs": [
            {"job_id": job.job_id, "status": job.status.value, "created_at": job.created_at}
            for job in job_manager.list_jobs()
        ]
    }

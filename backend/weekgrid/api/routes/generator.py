import logging
from time import perf_counter

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db, get_engine_options
from weekgrid.core.exceptions import SchedulerError
from weekgrid.schemas.generator import (
    ExplicitSpecialConfig,
    GenerateGridRequest,
    GenerateGridResponse,
    GenerationContext,
    GenerationRequest,
    SectionGridOut,
    ValidateGridRequest,
    ValidationReport,
)
from weekgrid.services.request_normalizer import EngineOptions
from weekgrid.services.timetable_engine import generate, validate
from weekgrid.services.timetable_store import get_section_grid, load_generation_inputs, save_section_grid
from weekgrid.services.week_grid import CELL_COUNT, WeekGrid

router = APIRouter()
logger = logging.getLogger(__name__)


def build_generation_request(db: Session, payload: GenerateGridRequest) -> GenerationRequest:
    inputs = load_generation_inputs(db, payload.department, payload.year, payload.section)
    if inputs.special is not None:
        special = inputs.special
    else:
        # Legacy flags only apply when the department/year has no explicit rows.
        special = payload.legacy_special or ExplicitSpecialConfig()
    lab_preferences = payload.lab_preferences if payload.lab_preferences is not None else inputs.lab_preferences
    return GenerationRequest(
        subjects=tuple(payload.subjects),
        special=special,
        lab_preferences=lab_preferences,
        open_elective_hours=inputs.open_elective_hours,
        context=GenerationContext(
            department=payload.department,
            year=payload.year,
            section=payload.section,
            counsellor_name=payload.counsellor_name,
        ),
    )


@router.post("/timetable/generate", response_model=GenerateGridResponse)
def generate_timetable(
    payload: GenerateGridRequest,
    db: Session = Depends(get_db),
    options: EngineOptions = Depends(get_engine_options),
) -> GenerateGridResponse:
    started = perf_counter()
    logger.info(
        "TIMETABLE GENERATION START | department=%s | year=%s | section=%s | subjects=%s | persist=%s",
        payload.department,
        payload.year,
        payload.section,
        len(payload.subjects),
        payload.persist,
    )
    try:
        request = build_generation_request(db, payload)
        grid = generate(request, options)
        rows = grid.to_rows(request.subjects, request.context)
        report = validate(grid, request.subjects, request.lab_preferences)
        if not report.valid:
            logger.warning(
                "TIMETABLE GENERATION PRODUCED INVALID GRID | department=%s | year=%s | section=%s | errors=%s",
                payload.department,
                payload.year,
                payload.section,
                report.errors,
            )

        if payload.persist:
            save_section_grid(db, payload.department, payload.year, payload.section, rows)

        elapsed_ms = int((perf_counter() - started) * 1000)
        logger.info(
            "TIMETABLE GENERATION COMPLETE | department=%s | year=%s | section=%s | free_periods=%s | warnings=%s | wall_ms=%s",
            payload.department,
            payload.year,
            payload.section,
            grid.free_cells(),
            len(report.warnings),
            elapsed_ms,
        )
        return GenerateGridResponse(
            department=payload.department,
            year=payload.year,
            section=payload.section,
            total_hours=CELL_COUNT - grid.free_cells(),
            grid=rows,
            validation=report,
            persisted=payload.persist,
        )
    except SchedulerError as exc:
        logger.warning(
            "TIMETABLE GENERATION REJECTED | department=%s | year=%s | section=%s | error=%s | reason=%s",
            payload.department,
            payload.year,
            payload.section,
            type(exc).__name__,
            exc.message,
        )
        raise
    except Exception:
        elapsed_ms = int((perf_counter() - started) * 1000)
        logger.exception(
            "TIMETABLE GENERATION FAILED | department=%s | year=%s | section=%s | wall_ms=%s",
            payload.department,
            payload.year,
            payload.section,
            elapsed_ms,
        )
        raise


@router.post("/timetable/validate", response_model=ValidationReport)
def validate_timetable(payload: ValidateGridRequest) -> ValidationReport:
    grid = WeekGrid.from_rows(payload.grid, payload.subjects)
    report = validate(grid, payload.subjects, payload.lab_preferences)
    logger.info(
        "TIMETABLE VALIDATION | labs=%s | valid=%s | errors=%s | warnings=%s",
        len(report.lab_days),
        report.valid,
        len(report.errors),
        len(report.warnings),
    )
    return report


@router.get("/timetable/grids/{department}/{year}/{section}", response_model=SectionGridOut)
def read_section_grid(
    department: str,
    year: str,
    section: str,
    db: Session = Depends(get_db),
) -> SectionGridOut:
    return get_section_grid(db, department, year, section)

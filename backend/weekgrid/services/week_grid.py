from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from weekgrid.core.exceptions import GridFormatError, SchedulerError
from weekgrid.schemas.generator import GenerationContext, GridRows, Subject

DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
DAY_COUNT = len(DAYS)
PERIOD_COUNT = 7
SATURDAY = 5
WEEKDAY_INDICES = tuple(range(5))
MORNING_PERIODS = (1, 2, 3, 4)
CELL_COUNT = DAY_COUNT * PERIOD_COUNT


class ReservedKind(str, Enum):
    seminar = "seminar"
    library = "library"
    counselling = "counselling"
    open_elective = "open_elective"


RESERVED_LABELS = {
    ReservedKind.seminar: "Seminar",
    ReservedKind.library: "Library",
    ReservedKind.counselling: "Counselling",
    ReservedKind.open_elective: "Open Elective",
}


@dataclass(frozen=True)
class SubjectRef:
    subject_id: str


@dataclass(frozen=True)
class ReservedLabel:
    kind: ReservedKind


Cell = SubjectRef | ReservedLabel | None


def slot_name(day: int, period: int) -> str:
    return f"{DAYS[day]} P{period}"


def rotated_days(start: int, days: Iterable[int] = range(DAY_COUNT)) -> list[int]:
    """Days in round-robin order beginning at ``start``, wrapping past the last day."""
    ordered = sorted(days)
    return [day for day in ordered if day >= start] + [day for day in ordered if day < start]


def reserved_display_label(kind: ReservedKind, counsellor_name: str | None = None) -> str:
    label = RESERVED_LABELS[kind]
    if kind is not ReservedKind.open_elective and counsellor_name:
        return f"{label} ({counsellor_name})"
    return label


def _parse_reserved_label(value: str) -> ReservedKind | None:
    cleaned = value.strip().lower()
    for kind, label in RESERVED_LABELS.items():
        lowered = label.lower()
        if cleaned == lowered or cleaned == kind.value:
            return kind
        if kind is not ReservedKind.open_elective and cleaned.startswith(f"{lowered} ("):
            return kind
    return None


class WeekGrid:
    """Six days by seven periods; periods are 1-based, days 0-based (Monday=0)."""

    def __init__(self) -> None:
        self._cells: list[list[Cell]] = [[None] * PERIOD_COUNT for _ in range(DAY_COUNT)]

    def get(self, day: int, period: int) -> Cell:
        return self._cells[day][period - 1]

    def is_free(self, day: int, period: int) -> bool:
        return self._cells[day][period - 1] is None

    def place(self, day: int, period: int, cell: SubjectRef | ReservedLabel) -> None:
        current = self._cells[day][period - 1]
        if current is not None:
            raise SchedulerError(
                f"{slot_name(day, period)} is already occupied",
                details={"day": DAYS[day], "period": period},
            )
        self._cells[day][period - 1] = cell

    def place_block(self, day: int, start: int, length: int, cell: SubjectRef) -> None:
        for period in range(start, start + length):
            self.place(day, period, cell)

    def block_is_free(self, day: int, start: int, length: int) -> bool:
        if start < 1 or start + length - 1 > PERIOD_COUNT:
            return False
        return all(self.is_free(day, period) for period in range(start, start + length))

    def first_free_period(self, day: int) -> int | None:
        for period in range(1, PERIOD_COUNT + 1):
            if self.is_free(day, period):
                return period
        return None

    def last_free_period(self, day: int) -> int | None:
        for period in range(PERIOD_COUNT, 0, -1):
            if self.is_free(day, period):
                return period
        return None

    def free_cells(self, day: int | None = None) -> int:
        days = range(DAY_COUNT) if day is None else (day,)
        return sum(1 for d in days for cell in self._cells[d] if cell is None)

    def count(self, cell: Cell, day: int | None = None) -> int:
        days = range(DAY_COUNT) if day is None else (day,)
        return sum(1 for d in days for value in self._cells[d] if value == cell)

    def periods_of(self, cell: Cell, day: int) -> list[int]:
        return [index + 1 for index, value in enumerate(self._cells[day]) if value == cell]

    def days_with(self, cell: Cell) -> list[int]:
        return [day for day in range(DAY_COUNT) if cell in self._cells[day]]

    def slots(self) -> Iterator[tuple[int, int, Cell]]:
        for day in range(DAY_COUNT):
            for index, cell in enumerate(self._cells[day]):
                yield day, index + 1, cell

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeekGrid):
            return NotImplemented
        return self._cells == other._cells

    def to_rows(
        self,
        subjects: Iterable[Subject],
        context: GenerationContext | None = None,
    ) -> GridRows:
        names = {subject.id: subject.name for subject in subjects}
        counsellor_name = context.counsellor_name if context else None
        rows: GridRows = []
        for row in self._cells:
            out: list[str | None] = []
            for cell in row:
                if cell is None:
                    out.append(None)
                elif isinstance(cell, ReservedLabel):
                    out.append(reserved_display_label(cell.kind, counsellor_name))
                else:
                    out.append(names.get(cell.subject_id, cell.subject_id))
            rows.append(out)
        return rows

    @classmethod
    def from_rows(cls, rows: GridRows, subjects: Iterable[Subject]) -> "WeekGrid":
        if len(rows) != DAY_COUNT or any(len(row) != PERIOD_COUNT for row in rows):
            raise GridFormatError(f"Grid must have {DAY_COUNT} rows of {PERIOD_COUNT} periods")

        by_id: dict[str, str] = {}
        by_name: dict[str, str] = {}
        for subject in subjects:
            by_id[subject.id] = subject.id
            by_name.setdefault(subject.name, subject.id)

        grid = cls()
        for day, row in enumerate(rows):
            for index, value in enumerate(row):
                if value is None or not str(value).strip():
                    continue
                value = str(value).strip()
                if value in by_id:
                    cell: Cell = SubjectRef(by_id[value])
                elif value in by_name:
                    cell = SubjectRef(by_name[value])
                else:
                    kind = _parse_reserved_label(value)
                    cell = ReservedLabel(kind) if kind is not None else SubjectRef(value)
                grid._cells[day][index] = cell
        return grid

from weekgrid.models.timetable import (  # noqa: F401
    LabPreferenceRecord,
    OpenElectiveBudget,
    SectionTimetable,
    SpecialHoursConfigRecord,
)

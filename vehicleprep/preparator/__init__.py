from vehicleprep.preparator.preparations import PreparationsAPI
from vehicleprep.preparator.profile import ProfileAPI
from vehicleprep.preparator.timesheets import PreparatorTimesheetsAPI, TimesheetStatus

__all__ = [
    "PreparationsAPI",
    "PreparatorTimesheetsAPI",
    "ProfileAPI",
    "TimesheetStatus",
]

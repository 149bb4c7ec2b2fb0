from vehicleprep.admin.agencies import AgenciesAPI
from vehicleprep.admin.dashboard import DashboardAPI
from vehicleprep.admin.reports import ReportsAPI
from vehicleprep.admin.schedules import SchedulesAPI
from vehicleprep.admin.timesheets import TimesheetsAPI
from vehicleprep.admin.users import UsersAPI

__all__ = [
    "AgenciesAPI",
    "DashboardAPI",
    "ReportsAPI",
    "SchedulesAPI",
    "TimesheetsAPI",
    "UsersAPI",
]

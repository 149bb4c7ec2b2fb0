from vehicleprep.auth.api import AuthAPI
from vehicleprep.auth.utils import LoginThrottle, check_server_health

__all__ = ["AuthAPI", "LoginThrottle", "check_server_health"]

from typing import Dict, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.request import ApiResponse, api_request


class UsersAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_users(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/users", params=filters or {}),
            retry_count=1,
        )

    def get_user(self, user_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/admin/users/{user_id}"))

    def create_user(self, user_data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/admin/users", user_data),
            show_success_toast=True,
            success_message="User created",
        )

    def update_user(self, user_id: str, user_data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.put(f"/admin/users/{user_id}", user_data),
            show_success_toast=True,
            success_message="User updated",
        )

    def deactivate_user(self, user_id: str) -> ApiResponse:
        return api_request(
            lambda: self.client.delete(f"/admin/users/{user_id}"),
            show_success_toast=True,
            success_message="User deactivated",
        )

    def reactivate_user(self, user_id: str) -> ApiResponse:
        return api_request(
            lambda: self.client.patch(f"/admin/users/{user_id}/reactivate"),
            show_success_toast=True,
            success_message="User reactivated",
        )

    def reset_password(self, user_id: str, new_password: str) -> ApiResponse:
        return api_request(
            lambda: self.client.patch(f"/admin/users/{user_id}/reset-password", {"newPassword": new_password}),
            show_success_toast=True,
            success_message="Password reset",
        )

    def get_user_stats(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/admin/users/stats"))

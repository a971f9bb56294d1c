"""
Device permission checks for the events resource.

get_device_permissions(user_id) -> device ids; check_device raises
PermissionDeniedError when the user may not access the device.
"""

from __future__ import annotations

from fleetquery.core.data_manager import DataManager


class PermissionDeniedError(Exception):
    """The user has no permission on the requested device."""

    pass


class PermissionsManager:
    def __init__(self, data_manager: DataManager) -> None:
        self.data_manager = data_manager

    def get_device_permissions(self, user_id: int) -> set[int]:
        return self.data_manager.get_device_permissions(user_id)

    def check_device(self, user_id: int, device_id: int) -> None:
        if device_id not in self.get_device_permissions(user_id):
            raise PermissionDeniedError(f"Device access denied: {device_id}")

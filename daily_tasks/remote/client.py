"""Client for the remote task service."""

from typing import Any

import httpx

from daily_tasks.config import Settings, get_settings
from daily_tasks.errors import RemoteServiceError
from daily_tasks.reminders.models import Task, UserProfile


class TaskServiceClient:
    """RPC-style client: every call is ``POST <base_url>/rpc/<method>``.

    Arguments travel as a JSON object in the request body and the result
    comes back as ``{"result": ...}``.
    """

    def __init__(
        self,
        config: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or get_settings()
        self.client = client or httpx.AsyncClient(
            base_url=self.config.remote.base_url,
            headers={"User-Agent": "daily-tasks/1.0"},
            timeout=self.config.remote.timeout,
        )

    async def _call(self, method: str, **params: Any) -> Any:
        response = await self.client.post(f"/rpc/{method}", json=params)
        if response.status_code >= 400:
            raise RemoteServiceError(method, response.status_code, response.text[:200])
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteServiceError(method, response.status_code, "invalid JSON") from e
        return payload.get("result") if isinstance(payload, dict) else None

    # Tasks

    async def get_all_tasks(self) -> list[Task]:
        result = await self._call("getAllTasks")
        return [Task.model_validate(item) for item in result or []]

    async def create_task(
        self, title: str, description: str, reminder_time: int | None = None
    ) -> Task:
        result = await self._call(
            "createTask", title=title, description=description, reminderTime=reminder_time
        )
        return Task.model_validate(result)

    async def update_task(
        self, task_id: int, title: str, description: str, reminder_time: int | None = None
    ) -> Task:
        result = await self._call(
            "updateTask",
            taskId=task_id,
            title=title,
            description=description,
            reminderTime=reminder_time,
        )
        return Task.model_validate(result)

    async def delete_task(self, task_id: int) -> None:
        await self._call("deleteTask", taskId=task_id)

    async def complete_task(self, task_id: int) -> None:
        await self._call("completeTask", taskId=task_id)

    async def toggle_procrastination(self, task_id: int) -> None:
        await self._call("toggleProcrastination", taskId=task_id)

    # Settings

    async def get_notifications_enabled(self) -> bool:
        return bool(await self._call("getNotificationsEnabled"))

    async def set_notifications_enabled(self, enabled: bool) -> None:
        await self._call("setNotificationsEnabled", enabled=enabled)

    async def get_auto_reset(self) -> bool:
        return bool(await self._call("getAutoReset"))

    async def set_auto_reset(self, enabled: bool) -> None:
        await self._call("setAutoReset", enabled=enabled)

    # Profile

    async def get_caller_user_profile(self) -> UserProfile | None:
        result = await self._call("getCallerUserProfile")
        return UserProfile.model_validate(result) if result else None

    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        await self._call("saveCallerUserProfile", profile=profile.model_dump())

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

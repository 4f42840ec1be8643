"""
VirtualSphere Backend API Client
"""
from datetime import datetime
from typing import Optional, List, Type, TypeVar
import httpx
from virtualsphere.utils.config_loader import config
from virtualsphere.models.sync_schemas import (
    UserSyncDto,
    VirtualHumanSyncDto,
    ProjectSyncDto,
)
from virtualsphere.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.settings.backend_url).rstrip("/")
        self.secret_key = secret_key if secret_key is not None else config.settings.sync_secret_key
        self.headers = {"X-Sync-Key": self.secret_key}
        self.timeout = timeout
        self.transport = transport

    async def _get(self, endpoint: str, dto_class: Type[T], last_sync_time: Optional[datetime] = None) -> List[T]:
        url = f"{self.base_url}{endpoint}"
        params = {}
        if last_sync_time:
            params["lastSyncTime"] = last_sync_time.isoformat()

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url, headers=self.headers, params=params)
                response.raise_for_status()
                data = response.json()
                return [dto_class.model_validate(item) for item in data]
            except httpx.HTTPStatusError as e:
                logger.error(f"HTTP error occurred while fetching {url}: {e}")
                raise
            except Exception as e:
                logger.error(f"An error occurred while fetching {url}: {e}")
                raise

    async def get_users(self, last_sync_time: Optional[datetime] = None) -> List[UserSyncDto]:
        return await self._get("/sync/users", UserSyncDto, last_sync_time)

    async def get_virtual_humans(self, last_sync_time: Optional[datetime] = None) -> List[VirtualHumanSyncDto]:
        return await self._get("/sync/virtual-humans", VirtualHumanSyncDto, last_sync_time)

    async def get_projects(self, last_sync_time: Optional[datetime] = None) -> List[ProjectSyncDto]:
        return await self._get("/sync/projects", ProjectSyncDto, last_sync_time)

"""Maintenance flag: advisory only, read by the front-end"""

from ..models.content import now_ms
from ..models.site_flag import SiteFlag
from ..storage.base import Repository
from ..utils.logger import get_logger

logger = get_logger(__name__)

CONFIG = "config"
MAINTENANCE = "maintenance"


class MaintenanceService:
    def __init__(self, repository: Repository):
        self.repository = repository

    def get(self) -> bool:
        """Current flag; created as False on first read"""
        record = self.repository.get(CONFIG, MAINTENANCE)
        if record is None:
            flag = SiteFlag(key=MAINTENANCE, value=False)
            self.repository.upsert(CONFIG, flag.to_record())
            return False
        return SiteFlag.model_validate(record).value

    def set(self, enabled: bool) -> bool:
        flag = SiteFlag(key=MAINTENANCE, value=enabled, updated_at=now_ms())
        self.repository.upsert(CONFIG, flag.to_record())
        logger.info("Maintenance flag set", maintenance=enabled)
        return flag.value

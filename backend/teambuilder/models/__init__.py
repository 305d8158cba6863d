from teambuilder.models.admin import Administrator, AdminUser
from teambuilder.models.company import Company
from teambuilder.models.data_migration import AppDataMigration, DataMigrationStatus
from teambuilder.models.partnership import (
    Partnership,
    PartnershipHistory,
    PartnershipMember,
    TeamStatus,
)
from teambuilder.models.user import User

__all__ = [
    "Company",
    "User",
    "Partnership",
    "PartnershipMember",
    "PartnershipHistory",
    "TeamStatus",
    "Administrator",
    "AdminUser",
    "AppDataMigration",
    "DataMigrationStatus",
]

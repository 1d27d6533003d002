from .loan_catalog_service import LoanCatalogService
from .application_service import ApplicationLedgerService
from .user_service import UserDirectoryService

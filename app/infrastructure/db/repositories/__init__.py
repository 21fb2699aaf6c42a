from .bill_repository import BillNotFoundError, BillRepository
from .master_data_repository import MasterDataRepository

__all__ = [
    "BillRepository",
    "BillNotFoundError",
    "MasterDataRepository",
]

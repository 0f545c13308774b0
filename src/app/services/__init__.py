from .unit_of_work import UnitOfWork, DocumentUnitOfWork

__all__ = [
    "UnitOfWork",
    "DocumentUnitOfWork",
]

from typing import Optional


class CrmError(Exception):
    """Base class for failures raised by the booking and payment services."""


class NotFoundError(CrmError, LookupError):
    def __init__(self, message: str, entity_type: Optional[str] = None, entity_id: Optional[object] = None) -> None:
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidStateError(CrmError, ValueError):
    """The entity is not in a state that permits the requested operation."""


class InvalidTransitionError(InvalidStateError):
    def __init__(self, current_status: str, target_status: Optional[str] = None, message: Optional[str] = None) -> None:
        if message is None:
            if target_status:
                message = f"Cannot transition from {current_status} to {target_status}."
            else:
                message = f"Operation not permitted while booking is {current_status}."
        super().__init__(message)
        self.current_status = current_status
        self.target_status = target_status

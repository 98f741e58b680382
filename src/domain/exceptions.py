class CatalogException(Exception):
    """Base exception for all catalog-related errors."""
    pass

class UnsupportedCapabilityError(CatalogException):
    """Raised when a bird is asked to perform an action it has no capability for."""
    def __init__(self, bird_name: str, capability: str):
        self.bird_name = bird_name
        self.capability = capability
        super().__init__(f"{bird_name} does not support '{capability}'.")

class ParkingRecordActiveException(CatalogException):
    """Raised when a fee is requested for a vehicle that is still parked."""
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Parking record {record_id} has no exit time yet.")

class ParkingRecordClosedException(CatalogException):
    """Raised when an exit is registered twice for the same record."""
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Parking record {record_id} is already closed.")

class RecordNotFoundException(CatalogException):
    """Raised when the store has no record matching the given identifier."""
    def __init__(self, record_id: str, message: str = "Record not found."):
        self.record_id = record_id
        super().__init__(f"{message} id={record_id}")

class StoreException(CatalogException):
    """Raised when the remote JSON store cannot be reached or answers with an error."""
    pass

class StoreWriteException(StoreException):
    """Raised when a write to the remote JSON store fails."""
    pass

class UnknownRateStrategyException(CatalogException, ValueError):
    """Raised when a parking rate strategy name is not recognised."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown parking rate strategy: '{name}'.")

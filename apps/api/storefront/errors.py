from dataclasses import dataclass

ORDER_FAILED_TITLE = "Order Failed"
ORDER_FAILED_MESSAGE = "There was an error placing your order. Please try again."


@dataclass
class OrderPlacementError(Exception):
    code: str
    message: str
    retryable: bool = True

    def __str__(self) -> str:
        return f"checkout:{self.code}:{self.message}"


class OrderInsertFailedError(OrderPlacementError):
    def __init__(self, message: str = "Order insert failed") -> None:
        super().__init__(code="ORDER_INSERT_FAILED", message=message, retryable=True)


class OrderNotReturnedError(OrderPlacementError):
    def __init__(self, message: str = "Order insert returned no row") -> None:
        super().__init__(code="ORDER_NOT_RETURNED", message=message, retryable=False)


class OrderNumberUnavailableError(OrderPlacementError):
    def __init__(self, message: str = "Could not allocate an order number") -> None:
        super().__init__(code="ORDER_NUMBER_UNAVAILABLE", message=message, retryable=True)

from abc import ABC


class BaseCustomException(Exception, ABC):
    """
    Base class for all custom exceptions.
    """

    def __init__(self, message: str | None = None):
        self.message = message or self.get_default_message()
        super().__init__(self.message)

    def get_default_message(self) -> str:
        """
        Return default error message.

        Returns
        -------
        str
            Default error message
        """
        return "error.unknown"

    def get_status_code(self) -> int:
        """
        Return HTTP status code for exception.

        Returns
        -------
        int
            HTTP status code
        """
        return 500

    def get_details(self) -> dict | None:
        """
        Return extra diagnostic fields for the error response.

        Returns
        -------
        dict | None
            Details to render, or None
        """
        return None


class BadRequestException(BaseCustomException):
    """Bad request exception (400)."""

    def get_status_code(self) -> int:
        return 400


class UnauthorizedException(BaseCustomException):
    """Unauthorized exception (401)."""

    def get_status_code(self) -> int:
        return 401

    def get_default_message(self) -> str:
        return "error.auth.unauthorized"


class ForbiddenException(BaseCustomException):
    """Forbidden exception (403)."""

    def get_status_code(self) -> int:
        return 403

    def get_default_message(self) -> str:
        return "error.auth.forbidden"


class InvalidFormatException(BadRequestException):
    """Malformed address, amount or other input."""

    def get_default_message(self) -> str:
        return "error.format.invalid"


class UnknownMethodException(BaseCustomException):
    """Method or event missing from the contract descriptor."""

    def get_default_message(self) -> str:
        return "error.abi.unknown_method"


class ServiceUnavailableException(BaseCustomException):
    """Service unavailable exception (503)."""

    def get_status_code(self) -> int:
        return 503


class ContractNotConfiguredException(ServiceUnavailableException):
    """Contract address for the requested operation is not set."""

    def get_default_message(self) -> str:
        return "error.contract.not_configured"


class SigningKeyRequiredException(ServiceUnavailableException):
    """State-changing operation requested in read-only mode."""

    def get_default_message(self) -> str:
        return "error.signing_key.required"


class RPCException(BaseCustomException):
    """RPC error exception."""

    def get_default_message(self) -> str:
        return "error.rpc.failed"

    def get_status_code(self) -> int:
        return 502


class ChainConnectionException(RPCException):
    """Node unreachable or transport failure."""

    def get_default_message(self) -> str:
        return "error.rpc.connection"


class RemoteExecutionException(RPCException):
    """Node executed the call and reported an error, or returned bad data."""

    def get_default_message(self) -> str:
        return "error.rpc.execution"


class ChainTimeoutException(BaseCustomException):
    """Deadline expired while waiting on the node."""

    def get_default_message(self) -> str:
        return "error.rpc.timeout"

    def get_status_code(self) -> int:
        return 504


class SigningException(BaseCustomException):
    """Transaction could not be signed."""

    def get_default_message(self) -> str:
        return "error.transaction.signing"


class InsufficientFundsException(BaseCustomException):
    """Signer balance does not cover gas."""

    def get_default_message(self) -> str:
        return "error.transaction.insufficient_funds"

    def get_status_code(self) -> int:
        return 402


class NonceConflictException(BaseCustomException):
    """Node rejected the transaction nonce."""

    def get_default_message(self) -> str:
        return "error.transaction.nonce_conflict"

    def get_status_code(self) -> int:
        return 409


class TransactionRevertedException(BaseCustomException):
    """
    Transaction was mined with a failure status.

    Parameters
    ----------
    transaction_hash : str
        Hash of the reverted transaction
    block_number : int | None
        Block the transaction was included in
    message : str | None
        Optional message override
    """

    def __init__(
        self,
        transaction_hash: str,
        block_number: int | None = None,
        message: str | None = None
    ):
        self.transaction_hash = transaction_hash
        self.block_number = block_number
        super().__init__(message)

    def get_default_message(self) -> str:
        return "error.transaction.reverted"

    def get_status_code(self) -> int:
        return 409

    def get_details(self) -> dict | None:
        return {
            "transaction_hash": self.transaction_hash,
            "block_number": self.block_number
        }


class MalformedLogException(BaseCustomException):
    """Log entry could not be decoded."""

    def get_default_message(self) -> str:
        return "error.log.malformed"

    def get_status_code(self) -> int:
        return 422

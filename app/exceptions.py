"""Domain exceptions shared by services, routers and the webhook dispatcher"""


class ChattableError(Exception):
    """Base exception for all domain errors."""
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


class UnauthorizedError(ChattableError):
    """Raised when there is no valid session or no active organization."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(ChattableError):
    """Raised when the caller is not a member of the organization."""
    status_code = 403

    def __init__(self, message: str = "Access denied to this organization"):
        super().__init__(message)


class NotFoundError(ChattableError):
    """Raised when an entity does not exist or belongs to another organization."""
    status_code = 404

    def __init__(self, resource: str, identifier=None):
        self.resource = resource
        self.identifier = identifier
        if identifier is None:
            super().__init__(f"{resource} not found")
        else:
            super().__init__(f"{resource} not found: {identifier}")


class ConflictError(ChattableError):
    """Raised when a resource already exists."""
    status_code = 409


class InvalidPayloadError(ChattableError):
    """Raised when input is malformed or out of range."""
    status_code = 400


class InvalidStatusError(ChattableError):
    """Raised when a status is not one of the defined order statuses."""
    status_code = 400

    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid status: {status}")


class UnknownMenuItemError(ChattableError):
    """Raised when a requested item id does not resolve within the organization."""
    status_code = 422

    def __init__(self, menu_item_id):
        self.menu_item_id = menu_item_id
        super().__init__(f"Menu item not found: {menu_item_id}")


class MenuItemUnavailableError(ChattableError):
    """Raised when a requested menu item is marked unavailable."""
    status_code = 422

    def __init__(self, menu_item_id):
        self.menu_item_id = menu_item_id
        super().__init__(f"Menu item is not available: {menu_item_id}")


class UnsupportedDocumentError(ChattableError):
    """Raised when a knowledge-base upload has an unsupported MIME type."""
    status_code = 415

    def __init__(self, mime_type):
        self.mime_type = mime_type
        super().__init__(f"Unsupported document type: {mime_type}")


class ExternalServiceError(ChattableError):
    """Raised when an external collaborator (storage, embeddings, voice platform) fails."""
    status_code = 502

    def __init__(self, service: str, message: str = "request failed"):
        self.service = service
        super().__init__(f"{service}: {message}")


class OrderIdGenerationError(ChattableError):
    """Raised when no free order identifier was found within the allowed attempts."""
    status_code = 503

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a unique order id after {attempts} attempts")


class WebhookVerificationError(ChattableError):
    """Raised when a webhook signature cannot be verified."""
    status_code = 401

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message)

class InvalidRequestError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NetworkError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RetellError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MakeWebhookError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MalformedWebhookError(Exception):
    def __init__(self, message: str = "Invalid webhook payload"):
        self.message = message
        super().__init__(message)


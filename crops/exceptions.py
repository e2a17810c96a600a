"""
Exceptions raised by the crops application.
"""


class CropsError(Exception):
    """Base error for crop library operations."""

    pass


class CropImportError(CropsError):
    """Error while importing crops from CSV."""

    pass


class CropbotMissing(CropImportError):
    """
    The member that owns imported crops does not exist.

    Raised before any row is imported; create the member named by
    settings.CROPS_BOT_USERNAME and run the import again.
    """

    pass


class CropRowError(CropImportError):
    """A single CSV row could not be imported."""

    def __init__(self, message, line_number=None):
        super().__init__(message)
        self.line_number = line_number

    def __str__(self):
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number}: {message}"
        return message


class SearchGatewayError(CropsError):
    """Error talking to the crop search index."""

    pass

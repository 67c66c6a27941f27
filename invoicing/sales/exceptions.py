class DocumentError(Exception):
    """A sales document operation was refused"""


class ConversionError(DocumentError):
    pass


class PaymentError(DocumentError):
    pass


class StatusTransitionError(DocumentError):
    pass

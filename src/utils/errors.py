class ReceiptLedgerError(Exception):
    """Base class for collaborator failures surfaced to the pages."""


class OcrError(ReceiptLedgerError):
    """The OCR service failed or returned nothing usable."""


class ReceiptStoreError(ReceiptLedgerError):
    """A Supabase table or storage call failed."""


class AuthError(ReceiptLedgerError):
    """Sign in / sign up / sign out was rejected."""

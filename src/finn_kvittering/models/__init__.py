from .listing import ExtractionResult, ParseUrlResponse
from .voucher import VoucherRequest

__all__ = ["ExtractionResult", "ParseUrlResponse", "VoucherRequest"]
